"""Application settings.

Values come from environment variables prefixed with ``STOREFRONT_`` (or a
``.env`` file in the working directory). ``STOREFRONT_ENV`` selects the
environment: ``test`` and ``development`` run against a local SQLite
database, ``production`` expects real infrastructure and logs JSON.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_",
        env_file=".env",
        extra="ignore",
    )

    env: str = "development"
    log_level: str | None = None

    database_url: str = "sqlite:///storefront.db"
    database_echo: bool = False
    # Seconds a SQLite writer waits for the database lock before giving up
    sqlite_busy_timeout: float = 30.0

    jwt_secret: str = "dev-secret"
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7

    checkout_max_attempts: int = Field(default=3, ge=1)

    email_adapter: str = "console"  # console | fake | smtp
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from_address: str = "Storefront <no-reply@storefront.local>"
    # Worker threads delivering order emails; 0 sends inline in the request
    notification_workers: int = Field(default=2, ge=0)

    cors_origins: list[str] = ["http://localhost:3000"]

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings (read once)."""
    return Settings()
