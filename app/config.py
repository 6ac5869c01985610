"""Application configuration via pydantic-settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Hotel Ortus"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 1

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "ortus"
    postgres_password: str = Field(default="ortus_secret")
    postgres_db: str = "hotel_ortus"
    db_pool_size: int = 10
    db_max_overflow: int = 5
    database_url_override: Optional[str] = Field(default=None, alias="DATABASE_URL")

    @computed_field
    @property
    def database_url(self) -> str:
        """Async database connection URL."""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync connection URL for Alembic; follows DATABASE_URL when set."""
        if self.database_url_override:
            return (
                self.database_url_override
                .replace("+asyncpg", "")
                .replace("+aiosqlite", "")
            )
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis (rate limiting, Celery broker)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    @computed_field
    @property
    def redis_url(self) -> str:
        """Redis connection URL."""
        auth = f":{self.redis_password}@" if self.redis_password else ""
        return f"redis://{auth}{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # JWT Authentication
    jwt_secret_key: str = Field(default="change-this-secret-in-production")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7

    # Rate Limiting
    rate_limit_per_minute: int = 100

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Hotel operations
    hotel_timezone: str = "Asia/Kolkata"
    arrival_hour: int = Field(default=11, ge=0, le=23)
    checkout_hour: int = Field(default=11, ge=0, le=23)
    max_guests_per_booking: int = 6

    # Auto-checkout sweep
    auto_checkout_scheduler: Literal["asyncio", "celery", "none"] = "asyncio"
    auto_checkout_interval_seconds: int = Field(default=60, ge=1)

    # Reject non-adjacent status changes and reopening of closed bookings
    strict_status_transitions: bool = False

    # Nightly prices (INR), used only to suggest a payment amount
    room_prices: Dict[str, int] = {
        "Deluxe Room": 2500,
        "Executive Suite": 4000,
        "Family Room": 5500,
    }
    default_room_price: int = 2500


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
