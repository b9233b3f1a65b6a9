"""Bot configuration using Pydantic Settings."""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Telegram
    telegram_bot_token: str = Field(default="", alias="TELEGRAM_BOT_TOKEN")

    # OpenRouter
    openrouter_api_key: str = Field(default="", alias="OPENROUTER_API_KEY")
    openrouter_base_url: str = Field(
        default="https://openrouter.ai/api/v1",
        alias="OPENROUTER_BASE_URL",
    )
    openrouter_model: str = Field(
        default="google/gemini-2.5-flash",
        alias="OPENROUTER_MODEL",
    )
    openrouter_max_tokens: int = Field(default=2000, alias="OPENROUTER_MAX_TOKENS")
    openrouter_temperature: float = Field(default=0.2, alias="OPENROUTER_TEMPERATURE")
    openrouter_timeout: int = Field(default=60, alias="OPENROUTER_TIMEOUT")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/mathbot.db",
        alias="DATABASE_URL",
    )

    # Solver
    # At most 50 records are kept; a deployment may only lower the cap
    history_limit: int = Field(default=50, gt=0, le=50, alias="HISTORY_LIMIT")
    default_language: str = Field(default="en", alias="DEFAULT_LANGUAGE")
    numeric_tolerance: float = Field(default=0.01, alias="NUMERIC_TOLERANCE")

    # Seconds between message edits while a follow-up answer streams in
    stream_edit_interval: float = Field(default=1.0, alias="STREAM_EDIT_INTERVAL")

    # Mini App
    webapp_url: str = Field(default="", alias="WEBAPP_URL")
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:5173",
        alias="CORS_ORIGINS",
    )

    @field_validator("default_language", mode="before")
    @classmethod
    def normalize_language(cls, v):
        """Language codes are stored lowercase."""
        if isinstance(v, str):
            return v.strip().lower() or "en"
        return v

    # App Settings
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @property
    def cors_origin_list(self) -> list[str]:
        """CORS origins parsed from the comma-separated setting."""
        return [x.strip() for x in self.cors_origins.split(",") if x.strip()]

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database."""
        return "sqlite" in self.database_url.lower()


settings = Settings()
