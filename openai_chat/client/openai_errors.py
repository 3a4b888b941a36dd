class ChatError(RuntimeError):
    """Базовое исключение чата.

    Ни одно из наследников не должно ронять приложение: сессия и
    `ChatController` превращают их в сообщения транскрипта.
    """


class InvalidCredential(ChatError):
    """API-ключ не введён (оставлено значение-заглушка)."""


class SessionAlreadyActive(ChatError):
    """Попытка начать чат, когда другой ещё не завершён."""


class NoActiveSession(ChatError):
    """Операция над чатом, который не начат или уже завершён."""


class CompletionError(ChatError):
    """Запрос к API не дал ответа ассистента."""


class TransportError(CompletionError):
    """Сетевая ошибка, статус не 2xx или некорректное тело ответа."""

    def __init__(self, detail: str, status_code=None):
        super().__init__(detail)
        self.detail = detail
        self.status_code = status_code


class EmptyResponseError(CompletionError):
    """API вернул пустой список choices."""

    def __init__(self, detail: str = "Не получено ни одного ответа на запрос"):
        super().__init__(detail)
