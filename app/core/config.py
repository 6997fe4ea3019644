from typing import Literal

from pydantic import (
    HttpUrl,
    PostgresDsn,
    computed_field,
)
from pydantic_core import MultiHostUrl
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    environment: Literal["development", "production"] = "development"
    log_level: str = "INFO"

    admin_api_key: str

    jwt_secret_key: str
    jwt_algorithm: str = "HS256"

    database_url: str | None = None

    gemini_api_key: str
    gemini_tts_model: str = "gemini-2.5-flash-preview-tts"
    gemini_image_model: str = "imagen-3.0-generate-002"
    gemini_timeout_ms: int = 120_000

    # Local development only
    postgres_password: str | None = None
    postgres_user: str | None = None
    postgres_db: str | None = None
    postgres_server: str | None = None
    postgres_port: int | None = None

    minio_access_key: str
    minio_secret_key: str
    minio_bucket: str
    minio_server: str

    s3_public_domain: str | None = None

    sentry_dsn: HttpUrl | None = None
    sentry_traces_sample_rate: float | None = None

    trending_limit: int = 8
    search_limit: int = 10

    @computed_field  # type: ignore[prop-decorator]
    @property
    def sqlalchemy_url(self) -> PostgresDsn:
        if self.database_url:
            # Ensure the async driver is used.
            return self.database_url.replace("postgresql://", "postgresql+psycopg://")

        # Fallback during local development
        return MultiHostUrl.build(
            scheme="postgresql+psycopg",
            username=self.postgres_user,
            password=self.postgres_password,
            host=self.postgres_server,
            port=self.postgres_port,
            path=self.postgres_db,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )


settings = Settings()
