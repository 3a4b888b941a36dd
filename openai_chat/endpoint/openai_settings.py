from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAISettings(BaseSettings):
    api_url: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="URL эндпоинта chat completions"
    )

    request_timeout_seconds: int = Field(
        default=120,
        description="Таймаут на запрос к API"
    )

    placeholder_api_key: str = Field(
        default="<your-openai-api-key-here>",
        description="Значение поля API-ключа по умолчанию, с ним чат не стартует"
    )

    default_model: str = Field(
        default="gpt-3.5-turbo",
        description="Модель, выбранная в интерфейсе по умолчанию"
    )

    default_system_prompt: str = Field(
        default="You are a friendly assistant.",
        description="Системное сообщение по умолчанию"
    )

    default_max_tokens: int = Field(
        default=10,
        ge=1,
        le=32768,
        description="Максимальное число токенов ответа по умолчанию"
    )

    caller_tag: str = Field(
        default="agent",
        description="Значение поля user в запросе"
    )

    model_config = SettingsConfigDict(
        frozen=True,
        case_sensitive=False,
        env_prefix="OPENAI_CHAT_",
        env_file=".env",
        extra="ignore"
    )


@lru_cache()
def get_openai_settings() -> OpenAISettings:
    """
    Получить настройки приложения

    Используют @lru_cache для кэширования - настройки загружаются один раз
    и переиспользуются при последующих вызовах

    :return: экземпляр OpenAISettings
    """
    return OpenAISettings()
