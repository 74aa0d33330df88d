from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "URL Shortener"

    # Public base for shortLink / managementLink; falls back to the request host
    BASE_URL: Optional[str] = None

    # Link lifecycle
    DEFAULT_VALIDITY_MINUTES: int = 30
    SHORTCODE_LENGTH: int = 6
    SHORTCODE_MAX_ATTEMPTS: int = 5
    SWEEP_INTERVAL_SECONDS: float = 0
    EXPIRED_RETENTION_MINUTES: int = 1440

    # Logging / remote collector
    LOG_LEVEL: str = "INFO"
    LOG_COLLECTOR_URL: Optional[str] = None
    ACCESS_TOKEN: Optional[str] = None
    LOG_COLLECTOR_TIMEOUT: float = 5.0
    LOG_QUEUE_SIZE: int = 1000

    # Rate limiting
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_LIMIT: int = 100
    RATE_LIMIT_WINDOW: int = 900

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
