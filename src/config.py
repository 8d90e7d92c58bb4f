from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings validated via Pydantic.

    Values are loaded from environment variables and/or a .env file.
    """

    # API Keys (used by the CLI; HTTP callers supply their own key per request)
    anthropic_api_key: str = ""
    gemini_api_key: str = ""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""

    # App config
    environment: str = "development"
    log_level: str = "INFO"
    llm_provider: str = "anthropic"
    llm_model: str = "claude-sonnet-4-20250514"
    gemini_model: str = "gemini-1.5-flash"
    llm_max_tokens: int = 8192

    # Analysis pipeline
    min_content_length: int = 50
    max_content_length: int = 100_000
    batch_size: int = 10
    retry_max_attempts: int = 3
    retry_base_delay: float = 1.0
    recency_window_months: int = 1
    prompt_version: str = "v1"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @property
    def persistence_enabled(self) -> bool:
        """Analyses are only written to Supabase in production."""
        return self.environment.lower() == "production"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance.

    Gracefully handles missing .env files (e.g. in CI/testing) by falling
    back to environment variables and defaults.
    """
    try:
        return Settings()
    except Exception:
        # If .env is missing or unreadable, build settings from env vars only.
        return Settings(_env_file=None)  # type: ignore[call-arg]


settings = get_settings()
