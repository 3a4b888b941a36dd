# client/openai_client.py
import logging
from typing import Optional, Sequence, Union

import requests
from pydantic import ValidationError
from requests.exceptions import ConnectionError, RequestException, Timeout
from requests.exceptions import JSONDecodeError as RequestsJSONDecodeError

from openai_chat.client.openai_errors import EmptyResponseError, TransportError
from openai_chat.endpoint.openai_entities import (
    MAX_MAX_TOKENS,
    MIN_MAX_TOKENS,
    ChatModel,
    CompletionRequest,
    CompletionResponse,
    Message,
    Role,
)
from openai_chat.endpoint.openai_settings import OpenAISettings, get_openai_settings
from utils.utils import log_request_start

logger = logging.getLogger(__name__)


def validate_max_tokens(max_tokens: int) -> int:
    if not MIN_MAX_TOKENS <= max_tokens <= MAX_MAX_TOKENS:
        raise ValueError(
            f"max_tokens должен быть в диапазоне [{MIN_MAX_TOKENS}, {MAX_MAX_TOKENS}], получено {max_tokens}"
        )
    return max_tokens


class OpenAIClient:
    """Один синхронный запрос к chat completions на каждый вызов `complete`."""

    def __init__(self, api_key: str, settings: Optional[OpenAISettings] = None):
        self.api_key = api_key
        self.settings = settings or get_openai_settings()

    def build_request(
        self,
        model_id: Union[ChatModel, str],
        messages: Sequence[Message],
        max_tokens: int,
    ) -> CompletionRequest:
        model = model_id.value if isinstance(model_id, ChatModel) else model_id
        if not model:
            raise ValueError("Не указана модель")
        if not messages:
            raise ValueError("История сообщений пуста")
        validate_max_tokens(max_tokens)

        # Сообщения об ошибках живут только в транскрипте
        wire_messages = [m for m in messages if m.role is not Role.ERROR]
        return CompletionRequest(
            model=model,
            messages=wire_messages,
            max_tokens=max_tokens,
            user=self.settings.caller_tag,
        )

    def complete(
        self,
        model_id: Union[ChatModel, str],
        messages: Sequence[Message],
        max_tokens: int,
    ) -> Message:
        """
        Отправляет историю в API и возвращает сообщение первого choice.

        :raises TransportError: сеть, статус не 2xx, некорректный JSON
        :raises EmptyResponseError: в ответе нет ни одного choice
        """
        request = self.build_request(model_id, messages, max_tokens)
        log_request_start(request.model, max_tokens, len(request.messages))

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }

        try:
            url = self.settings.api_url
            logger.debug(f"Отправка POST-запроса к {url}")
            response = requests.post(
                url=url,
                headers=headers,
                json=request.model_dump(mode="json"),
                timeout=self.settings.request_timeout_seconds
            )
            response.raise_for_status()

            completion = CompletionResponse.model_validate(response.json())

        except ConnectionError as e:
            error_msg = "Не удалось подключиться к OpenAI (ConnectionError)"
            logger.error(f"{error_msg}: {e}")
            raise TransportError(error_msg) from e

        except Timeout as e:
            error_msg = f"Таймаут при обращении к OpenAI (таймаут: {self.settings.request_timeout_seconds} сек)"
            logger.error(f"{error_msg}: {e}")
            raise TransportError(error_msg) from e

        except (RequestsJSONDecodeError, ValidationError) as e:
            error_msg = "Некорректный формат ответа от OpenAI"
            logger.error(f"{error_msg}: {e}")
            raise TransportError(error_msg) from e

        except RequestException as e:
            status = e.response.status_code if e.response is not None else None
            error_msg = f"Ошибка HTTP-запроса к OpenAI: статус {status or 'unknown'}"
            logger.error(f"{error_msg}: {e}")
            raise TransportError(error_msg, status_code=status) from e

        except (ValueError, KeyError, TypeError) as e:
            error_msg = "Некорректный формат ответа от OpenAI"
            logger.error(f"{error_msg}: {e}")
            raise TransportError(error_msg) from e

        except Exception as e:
            error_msg = "Неожиданная ошибка при работе с OpenAI"
            logger.error(f"{error_msg}: {e}")
            raise TransportError(f"{error_msg}: {type(e).__name__}") from e

        if not completion.choices:
            logger.warning(f"OpenAI вернул пустой список choices (id={completion.id})")
            raise EmptyResponseError()

        message = completion.choices[0].message
        logger.info(
            f"Успешно получен ответ от {completion.model} "
            f"(длина: {len(message.content)} символов, токенов: {completion.usage.total_tokens})"
        )
        return message
