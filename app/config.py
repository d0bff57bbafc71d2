"""Application configuration via pydantic-settings."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import List, Literal, Optional

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
    app_name: str = "Chauffeur Bookings"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    api_prefix: str = "/api/v1"
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "chauffeur"
    postgres_password: str = Field(default="chauffeur_secret")
    postgres_db: str = "chauffeur_bookings"
    db_pool_size: int = 10
    db_max_overflow: int = 5

    @computed_field
    @property
    def database_url(self) -> str:
        """Async PostgreSQL connection URL."""
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @computed_field
    @property
    def sync_database_url(self) -> str:
        """Sync PostgreSQL connection URL for Alembic."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # Redis (Celery broker)
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

    # Driver portal tokens
    jwt_secret_key: str = Field(default="your-super-secret-key-change-in-production")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 12 * 60

    # Stripe
    stripe_secret_key: Optional[str] = None
    stripe_webhook_secret: Optional[str] = None

    # Email (SendGrid)
    sendgrid_api_key: Optional[str] = None
    email_from_address: str = "bookings@chauffeurdeluxe.com.au"
    email_from_name: str = "Chauffeur de Luxe"
    operations_email: str = "operations@chauffeurdeluxe.com.au"

    # CORS
    cors_origins: List[str] = [
        "https://bookingform-pi.vercel.app",
        "https://bookings.chauffeurdeluxe.com.au",
    ]

    # Fares and payouts
    service_timezone: str = "Australia/Sydney"  # applied to pickup times sent without an offset
    minimum_fare: Decimal = Decimal("10.00")
    # Fare includes 10% tax, 10% GST and 25% margin; dividing reverses the stack.
    payout_divisor: Decimal = Decimal("1.45")

    # Notification outbox
    outbox_batch_size: int = 50
    outbox_max_attempts: int = 5
    outbox_backoff_seconds: int = 30
    outbox_claim_seconds: int = 300  # a claimed message is due again if its sender dies
    outbox_dispatch_interval_seconds: int = 30  # 0 disables the in-process loop


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
