from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # core
    ENV: str = "dev"
    API_PREFIX: str = "/api"
    APP_NAME: str = "MyBuddy Backend"
    APP_VERSION: str = "1.0.0"

    # cors
    FRONTEND_ORIGIN: str | None = None
    # Explicit debug-only switch for wide-open CORS in non-prod envs
    CORS_ALLOW_ALL_ORIGINS: bool = False

    # search providers
    GOOGLE_API_KEY: str | None = None
    GOOGLE_SEARCH_ENGINE_ID: str | None = None
    BING_API_KEY: str | None = None
    DUCKDUCKGO_ENABLED: bool = True
    # Applied to every outbound provider call
    SEARCH_TIMEOUT_SECONDS: float = 8.0

    # llm (overview generation)
    OPENAI_ENABLED: bool = True
    OPENAI_API_KEY: str | None = None
    OPENROUTER_API_KEY: str | None = None
    LLM_MODEL: str = "gpt-4o-mini"
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 1000
    # Hard cap on concurrent LLM calls per process
    LLM_MAX_CONCURRENCY: int = 4
    OVERVIEW_MAX_SOURCES: int = 8

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    return Settings()


@dataclass(frozen=True)
class ProviderConfig:
    """
    Credentials and switches for the search providers.

    Built once from Settings and handed to the aggregator, so the search
    pipeline never reads process-wide configuration on its own.
    """

    google_api_key: str = ""
    google_search_engine_id: str = ""
    bing_api_key: str = ""
    duckduckgo_enabled: bool = True
    timeout_seconds: float = 8.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderConfig":
        return cls(
            google_api_key=settings.GOOGLE_API_KEY or "",
            google_search_engine_id=settings.GOOGLE_SEARCH_ENGINE_ID or "",
            bing_api_key=settings.BING_API_KEY or "",
            duckduckgo_enabled=settings.DUCKDUCKGO_ENABLED,
            timeout_seconds=settings.SEARCH_TIMEOUT_SECONDS,
        )
