import logging
import os
from functools import lru_cache
from typing import Iterable

import tiktoken

from utils.log_filters import CredentialFilter

logger = logging.getLogger(__name__)

# Служебные токены на роль и разметку одного сообщения
TOKENS_PER_MESSAGE: int = 3


def configure_logging(level: int = logging.INFO) -> None:
    """Настраивает корневой логгер приложения.

    Вызывается при старте интерфейса (в `chat_ui`).
    """
    fmt = os.getenv("LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.basicConfig(level=level, format=fmt)
    # Ключ API не должен попадать в логи (в т.ч. из urllib3 на уровне DEBUG)
    filt = CredentialFilter()
    root = logging.getLogger()
    for h in list(root.handlers):
        if not any(isinstance(f, CredentialFilter) for f in h.filters):
            h.addFilter(filt)


def log_request_start(model_id: str, max_tokens: int, message_count: int) -> None:
    logger.info(f"Запрос к модели: {model_id}")
    logger.debug(f"Параметры генерации: max_tokens={max_tokens}, сообщений в истории={message_count}")


@lru_cache()
def _get_encoding():
    """Кодировка `cl100k_base` или None, если её не удалось загрузить."""
    try:
        return tiktoken.get_encoding("cl100k_base")
    except Exception as e:
        logger.warning(f"Не удалось загрузить кодировку tiktoken, считаем приближённо: {e}")
        return None


def count_tokens(text: str) -> int:
    """Подсчитывает токены текста с использованием `tiktoken`.

    Если кодировка недоступна — возвращает оценку по количеству символов.
    """
    enc = _get_encoding()
    if enc is None:
        return max(1, len(text) // 4)
    return len(enc.encode(text))


def count_history_tokens(messages: Iterable) -> int:
    """Приблизительный размер истории в токенах (для подписи в интерфейсе)."""
    return sum(count_tokens(m.content) + TOKENS_PER_MESSAGE for m in messages)
