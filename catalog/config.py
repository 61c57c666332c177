from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def normalize_db_url(url: str) -> str:
    url = (url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL not configured.")

    # Railway/Heroku: postgres://...
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+psycopg2://", 1)

    # postgresql://... sem driver
    if url.startswith("postgresql://") and "+psycopg2" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg2://", 1)

    return url


class Settings(BaseSettings):
    DATABASE_URL: str = Field(
        validation_alias=AliasChoices("DATABASE_URL", "POSTGRES_URL"),
    )
    DB_SSL_MODE: Optional[str] = None
    DB_POOL_SIZE: int = Field(default=5, ge=1)

    APP_ENV: str = Field(
        default="development",
        validation_alias=AliasChoices("APP_ENV", "NODE_ENV"),
    )

    AWS_REGION: str = "us-east-1"
    AWS_BUCKET_NAME: str = ""
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    S3_ENDPOINT: Optional[str] = None
    S3_OBJECT_ACL: Optional[str] = None

    PORT: int = 5000
    ALLOWED_ORIGINS: str = "*"

    MAX_UPLOAD_BYTES: int = Field(default=15 * 1024 * 1024, ge=1)
    IMAGE_QUALITY: int = Field(default=80, ge=1, le=100)
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",         # local
        env_ignore_empty=True,   # evita sobrescrever com vazio
        extra="ignore",
        populate_by_name=True,
    )

    def __init__(self, **values):
        super().__init__(**values)
        self.DATABASE_URL = normalize_db_url(self.DATABASE_URL)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() == "production"

    @property
    def allowed_origins(self) -> list[str]:
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]

    @property
    def db_ssl_mode(self) -> str:
        if self.DB_SSL_MODE:
            return self.DB_SSL_MODE.strip()
        return "verify-full" if self.is_production else "prefer"


@lru_cache
def get_settings() -> Settings:
    return Settings()
