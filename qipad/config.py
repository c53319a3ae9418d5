"""Application Configuration - environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache): single instance per process
    - The same Settings object configures the API, the client layer and the
      maintenance command

Design Decisions:
    - Defaults provided for all non-secret settings so a local docker-compose
      stack and the test suite run without a .env file
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://qipad:qipad@db:5432/qipad"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosted Postgres hands out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Auth
    jwt_secret: str = "qipad-dev-secret-change-me"
    access_token_expire_minutes: int = 60 * 24
    admin_username: str = "admin"
    admin_password: str = "change-me"

    # Credits
    joining_bonus: int = 10
    kyc_verification_bonus: int = 20

    # Uploads / object storage
    upload_max_bytes: int = 5 * 1024 * 1024
    upload_content_type_prefix: str = "image/"
    object_storage_base_url: str = "https://storage.qipad.local/qipad-objects"
    upload_url_ttl_seconds: int = 900
    upload_acl_required: bool = False

    # Client
    api_base_url: str = "http://localhost:5000"
    api_timeout_seconds: float = 30.0

    # API
    cors_origins: list[str] = ["http://localhost:5173"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
