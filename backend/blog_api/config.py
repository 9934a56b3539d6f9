"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
    - Rate budgets are settings, not constants: tests and deployments tune them without code changes
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from limits import parse


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    environment: str = "development"

    # Database
    database_url: str = (
        "postgresql+asyncpg://blog:blog@db:5432/blog"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting providers hand out postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 10
    database_max_overflow: int = 10

    # Auth: tokens are issued elsewhere, this service only verifies them
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"

    # Asset store (S3-compatible)
    minio_endpoint: str = "minio:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    asset_bucket: str = "blog-assets"
    asset_folder: str = "blog-uploads"
    asset_public_base_url: str = "http://localhost:9000"
    asset_max_width: int = 1200
    asset_max_height: int = 630
    asset_quality: int = 80

    @field_validator("asset_public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # Rate admission: one `limits` rate string per admission class
    rate_general_limit: str = "100/15 minutes"
    rate_authentication_limit: str = "20/15 minutes"
    rate_upload_limit: str = "50/hour"

    @field_validator(
        "rate_general_limit", "rate_authentication_limit", "rate_upload_limit",
    )
    @classmethod
    def check_rate_string(cls, v: str) -> str:
        parse(v)
        return v

    # API
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5500",
        "http://127.0.0.1:5500",
        "http://127.0.0.1:3000",
    ]
    # Behind a proxy (serverless deployments) the client address is the first X-Forwarded-For hop
    trust_forwarded_for: bool = False

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
