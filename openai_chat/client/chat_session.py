import asyncio
import logging
import threading
from typing import Optional, Tuple, Union

from openai_chat.client.openai_client import OpenAIClient, validate_max_tokens
from openai_chat.client.openai_errors import (
    ChatError,
    CompletionError,
    InvalidCredential,
    NoActiveSession,
    SessionAlreadyActive,
)
from openai_chat.endpoint.openai_entities import ChatModel, Message, Role
from openai_chat.endpoint.openai_settings import OpenAISettings, get_openai_settings

logger = logging.getLogger(__name__)


class ConversationSession:
    """
    Диалог с одной моделью и одним системным сообщением.

    history[0] всегда системное сообщение; reset() возвращает историю
    к нему. Ходы выполняются строго по одному: блокировка держится на всё
    время запроса к API.
    """

    def __init__(self, client: OpenAIClient, model_id: Union[ChatModel, str], system_prompt: str):
        model = model_id.value if isinstance(model_id, ChatModel) else model_id
        if not model:
            raise ValueError("Не указана модель")
        self.model_id = model
        self.system_prompt = system_prompt
        self._client: Optional[OpenAIClient] = client
        self._lock = threading.Lock()
        self._history = [self._system_message()]

    @classmethod
    def start(
        cls,
        credential: str,
        model_id: Union[ChatModel, str],
        system_prompt: str,
        settings: Optional[OpenAISettings] = None,
    ) -> "ConversationSession":
        """
        Начинает диалог.

        :raises InvalidCredential: ключ пустой или равен заглушке из настроек
        """
        settings = settings or get_openai_settings()
        if not credential or not credential.strip() or credential == settings.placeholder_api_key:
            raise InvalidCredential("Введите API-ключ OpenAI и попробуйте снова")

        session = cls(OpenAIClient(credential.strip(), settings), model_id, system_prompt)
        logger.info(f"Начат чат с моделью {session.model_id}")
        return session

    def _system_message(self) -> Message:
        return Message(role=Role.SYSTEM, content=self.system_prompt)

    def _ensure_active(self) -> OpenAIClient:
        if self._client is None:
            raise NoActiveSession("Чат завершён. Начните новый, нажав «Начать чат»")
        return self._client

    @property
    def active(self) -> bool:
        return self._client is not None

    @property
    def history(self) -> Tuple[Message, ...]:
        return tuple(self._history)

    def send_turn(self, user_text: str, max_tokens: int) -> Message:
        """
        Добавляет сообщение пользователя, запрашивает ответ и добавляет его.

        Ошибки API не пробрасываются: вместо ответа в историю попадает
        сообщение с ролью error, сообщение пользователя остаётся.
        """
        validate_max_tokens(max_tokens)
        with self._lock:
            client = self._ensure_active()
            self._history.append(Message(role=Role.USER, content=user_text))
            try:
                reply = client.complete(self.model_id, self._history, max_tokens)
            except CompletionError as e:
                logger.warning(f"Ход завершился ошибкой: {e}")
                reply = Message(role=Role.ERROR, content=f"❌ {e}")
            self._history.append(reply)
            return reply

    async def asend_turn(self, user_text: str, max_tokens: int) -> Message:
        # блокирующий HTTP-запрос выполняется в пуле потоков
        return await asyncio.to_thread(self.send_turn, user_text, max_tokens)

    def reset(self) -> None:
        with self._lock:
            self._ensure_active()
            self._history = [self._system_message()]

    def end(self) -> None:
        """Сбрасывает историю и забывает клиента вместе с ключом."""
        with self._lock:
            self._ensure_active()
            self._history = [self._system_message()]
            self._client = None
        logger.info(f"Чат с моделью {self.model_id} завершён")


class ChatController:
    """
    То, что держит интерфейс: не более одной активной сессии.

    Ошибки жизненного цикла не пробрасываются, а превращаются в сообщение
    с ролью error, которое возвращается и сохраняется в `notice`. В историю
    сессии уведомление не попадает, интерфейс показывает его в конце чата
    (см. `chat_view`) до следующего действия.
    """

    def __init__(self, settings: Optional[OpenAISettings] = None):
        self.settings = settings or get_openai_settings()
        self.session: Optional[ConversationSession] = None
        self.notice: Optional[Message] = None

    def _notify(self, error: ChatError) -> Message:
        logger.warning(f"{type(error).__name__}: {error}")
        self.notice = Message(role=Role.ERROR, content=str(error))
        return self.notice

    def _require_session(self, action: str) -> ConversationSession:
        if self.session is None:
            raise NoActiveSession(
                f"Нет активного чата, чтобы {action}. Начните новый, нажав «Начать чат»"
            )
        return self.session

    def transcript(self) -> Tuple[Message, ...]:
        return self.session.history if self.session is not None else ()

    def chat_view(self) -> Tuple[Message, ...]:
        """История сессии и, в конце, последнее уведомление, как их показывает интерфейс."""
        notice = (self.notice,) if self.notice is not None else ()
        return self.transcript() + notice

    def start(self, credential: str, model_id: Union[ChatModel, str], system_prompt: str) -> Optional[Message]:
        self.notice = None
        try:
            if self.session is not None:
                raise SessionAlreadyActive(
                    "Чат уже идёт. Чтобы начать новый, нажмите «Завершить чат» "
                    "или очистите сообщения кнопкой «Очистить чат»"
                )
            self.session = ConversationSession.start(credential, model_id, system_prompt, self.settings)
        except (InvalidCredential, SessionAlreadyActive) as e:
            return self._notify(e)
        return None

    def end(self) -> Optional[Message]:
        self.notice = None
        try:
            self._require_session("его завершить").end()
        except NoActiveSession as e:
            return self._notify(e)
        self.session = None
        return None

    def clear(self) -> Optional[Message]:
        self.notice = None
        try:
            self._require_session("его очистить").reset()
        except NoActiveSession as e:
            return self._notify(e)
        return None

    def send(self, user_text: str, max_tokens: int) -> Message:
        self.notice = None
        try:
            return self._require_session("отправить сообщение").send_turn(user_text, max_tokens)
        except NoActiveSession as e:
            return self._notify(e)

    async def asend(self, user_text: str, max_tokens: int) -> Message:
        self.notice = None
        try:
            return await self._require_session("отправить сообщение").asend_turn(user_text, max_tokens)
        except NoActiveSession as e:
            return self._notify(e)
