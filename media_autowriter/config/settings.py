"""Configuration settings using Pydantic Settings."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Find .env file - look in project root
# Go up from media_autowriter/config/settings.py -> media_autowriter/config -> media_autowriter -> root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"

# Also check current working directory as fallback
_cwd_env_file = Path.cwd() / ".env"
if not _env_file.exists() and _cwd_env_file.exists():
    _env_file = _cwd_env_file


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(_env_file) if _env_file.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )

    # Runtime
    environment: str = "development"

    # PostgreSQL
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "media_db"
    postgres_user: str = "media_user"
    postgres_password: str = "change_me_strong_password"
    # Full SQLAlchemy URL override (e.g. sqlite+aiosqlite:///./local.db)
    database_url_override: Optional[str] = None

    @property
    def database_url(self) -> str:
        """Construct PostgreSQL async database URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # LLM providers
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_text_model: str = "gpt-4o"
    openai_image_model: str = "dall-e-3"

    grok_api_key: Optional[str] = None
    grok_base_url: str = "https://api.x.ai/v1"
    grok_text_model: str = "grok-2-latest"
    grok_image_model: str = "grok-2-image"

    # Per-call HTTP timeouts (seconds)
    llm_request_timeout_seconds: float = 90.0
    image_request_timeout_seconds: float = 120.0

    # Which provider serves each generation step ("openai" or "grok")
    theme_provider: str = "grok"
    audience_provider: str = "openai"
    outline_provider: str = "grok"
    section_provider: str = "grok"
    image_provider: str = "openai"
    alt_text_provider: str = "openai"
    metadata_provider: str = "openai"
    slug_provider: str = "openai"

    # Article generation pipeline
    pipeline_timeout_seconds: float = 300.0
    theme_candidate_count: int = 5
    # Number of re-proposals after every candidate theme was a duplicate
    theme_retry_attempts: int = 1
    # Images generated for the first N sections (in addition to the featured image)
    section_image_count: int = 1
    section_max_tokens: int = 2000

    # Scheduler
    schedule_timezone: str = "Asia/Tokyo"
    scheduler_max_concurrency: int = 4
    cron_secret: Optional[str] = None

    # Rate Limiting
    rate_limit_generation_per_minute: int = 10

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        """Whether stack traces must be hidden from API error bodies."""
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
