from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

MIN_MAX_TOKENS: int = 1
MAX_MAX_TOKENS: int = 32768


class Role(str, Enum):
    """Роль автора сообщения. `error` существует только в транскрипте."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    ERROR = "error"


# https://platform.openai.com/docs/models/overview
class ChatModel(str, Enum):
    GPT_3_5_TURBO = "gpt-3.5-turbo"
    GPT_3_5_TURBO_0301 = "gpt-3.5-turbo-0301"
    TEXT_DAVINCI_003 = "text-davinci-003"
    TEXT_DAVINCI_002 = "text-davinci-002"
    CODE_DAVINCI_002 = "code-davinci-002"
    GPT_4 = "gpt-4"
    GPT_4_0314 = "gpt-4-0314"
    GPT_4_32K = "gpt-4-32k"
    GPT_4_32K_0314 = "gpt-4-32k-0314"

    @classmethod
    def from_wire(cls, model_id: str) -> "ChatModel":
        """Обратный поиск варианта модели по строке из API.

        :raises ValueError: если идентификатор неизвестен
        """
        try:
            return cls(model_id)
        except ValueError:
            raise ValueError(f"Неизвестная модель: {model_id!r}") from None

    @classmethod
    def selectable(cls) -> Tuple["ChatModel", ...]:
        """Модели, которые предлагаются в селекторе интерфейса."""
        return cls.GPT_3_5_TURBO, cls.GPT_4, cls.GPT_4_32K


class Message(BaseModel):
    """Одно сообщение диалога. После создания не изменяется."""
    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""

    @field_validator("content", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class CompletionRequest(BaseModel):
    """
    Тело запроса к /v1/chat/completions.

    Меняются от запроса к запросу только model, messages и max_tokens,
    остальные параметры фиксированы.
    """
    model: str
    messages: List[Message]
    temperature: Optional[float] = 0.5
    top_p: Optional[float] = None
    n: Optional[int] = 1
    stream: Optional[bool] = False
    stop: Optional[List[str]] = None
    max_tokens: int = Field(..., ge=MIN_MAX_TOKENS, le=MAX_MAX_TOKENS)
    presence_penalty: Optional[float] = 0.0
    frequency_penalty: Optional[float] = 0.0
    logit_bias: Optional[Dict[str, int]] = Field(default_factory=dict)
    user: Optional[str] = "agent"


class Usage(BaseModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class Choice(BaseModel):
    message: Message
    index: int = 0
    logprobs: Optional[Dict[str, List[float]]] = None
    finish_reason: Optional[str] = None
    usage: Optional[Usage] = None


class CompletionResponse(BaseModel):
    """Ответ /v1/chat/completions."""
    id: str
    object: str
    created: int
    model: str
    usage: Usage = Field(default_factory=Usage)
    choices: List[Choice] = Field(default_factory=list)
