from __future__ import annotations

from pydantic import AliasChoices, Field

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800

    WEBHOOK_BASE_URL: str = Field(
        validation_alias=AliasChoices("WEBHOOK_BASE_URL", "N8N_BASE_URL")
    )
    CHAT_WEBHOOK_PATH: str = "/webhook/agent"
    REQUEST_TIMEOUT_SEC: float = 20.0

    TRACK_RATE_LIMIT_MAX_REQUESTS: int = 10
    TRACK_RATE_LIMIT_WINDOW_SEC: int = 60
    TRUST_PROXY_HEADERS: bool = False
    TRACKING_CODE_LISTING_ENABLED: bool = True

    CORS_ORIGINS: str = ""


settings = Settings()
