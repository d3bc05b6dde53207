"""Centralized application configuration via environment variables."""

from datetime import timedelta
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Secrets use SecretStr to prevent accidental logging.
    Database URL is assembled from individual components to match
    the official PostgreSQL Docker image environment variables.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "DEBUG"
    # --- CORS ---
    cors_allowed_origins: list[str] = []
    cors_allow_credentials: bool = False
    cors_allowed_methods: list[str] = ["GET", "POST", "DELETE"]
    cors_allowed_headers: list[str] = ["Content-Type", "Authorization"]

    # --- PostgreSQL ---
    postgres_user: str = "xenon"
    postgres_password: SecretStr = SecretStr("secret")
    postgres_db: str = "xenon_platform"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    @computed_field  # type: ignore[prop-decorator]
    @property
    def database_url(self) -> str:
        """Assemble database URL from components.

        Uses psycopg v3 driver which supports both sync (create_engine)
        and async (create_async_engine) modes natively.
        """
        password = self.postgres_password.get_secret_value()
        return (
            f"postgresql+psycopg://{self.postgres_user}:{password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # --- Identity (bearer JWT issued by the identity provider) ---
    jwt_secret: SecretStr = SecretStr("dev-only-signing-key-change-me-in-production")
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = None

    # --- Pricing ---
    plan_catalog_path: Path = Path("config/plans.yaml")

    # --- Abuse detection / IP blocking ---
    # Defaults follow the platform security event options.
    brute_force_threshold: int = 5
    brute_force_window_minutes: int = 15
    ip_block_minutes: int = 60
    security_cleanup_interval_seconds: int = 300
    # Peers allowed to set X-Forwarded-For / X-Real-IP for failure counting.
    trusted_proxies: list[str] = []

    @property
    def brute_force_window(self) -> timedelta:
        return timedelta(minutes=self.brute_force_window_minutes)

    @property
    def ip_block_duration(self) -> timedelta:
        return timedelta(minutes=self.ip_block_minutes)

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from xenon_gatekeeper.config import get_settings
        settings = get_settings()

    Or for dependency injection in FastAPI::

        @app.get("/")
        def root(settings: Settings = Depends(get_settings)):
            ...
    """
    return Settings()


settings = get_settings()
