from typing import List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # App Config
    APP_NAME: str = "SupplyVault"
    APP_ENV: str = "development"
    PORT: int = 8000
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./supplyvault.db"

    # Public dashboard base URL used in notification links
    APP_URL: str = Field(default="http://localhost:3000")

    # Shared secret sent by the external scheduler as a bearer token
    CRON_SECRET: Optional[str] = Field(default=None)

    # Outbound email (Resend)
    RESEND_API_KEY: Optional[str] = Field(default=None)
    RESEND_API_URL: str = Field(default="https://api.resend.com/emails")
    EMAIL_FROM: str = Field(default="SupplyVault <notifications@supplyvault.com>")
    EMAIL_TIMEOUT_SECONDS: int = Field(default=15)

    # Pipelines
    ALERT_WINDOW_DAYS: List[int] = Field(default=[90, 30, 7])
    REVERIFY_BATCH_LIMIT: int = Field(default=100)
    REVERIFY_MAX_AGE_DAYS: int = Field(default=30)

    # Optional JSON export of SA8000 certified facilities
    SA8000_REGISTRY_PATH: Optional[str] = Field(default=None)

    # Embedded scheduler for deployments without an external cron
    SCHEDULER_ENABLED: bool = Field(default=False)
    SCHEDULER_INTERVAL_SECONDS: int = Field(default=86400)

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
