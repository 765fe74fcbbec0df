"""
Core configuration using Pydantic Settings.
Loads from environment variables.
"""

import json
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(default="formhire", alias="APP_NAME")
    app_env: Literal["development", "test", "staging", "production"] = Field(
        default="development", alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    site_url: str = Field(default="http://localhost:3000", alias="SITE_URL")

    # API
    allowed_origins: Annotated[list[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        alias="ALLOWED_ORIGINS",
    )

    # Database
    database_url: str = Field(..., alias="DATABASE_URL")
    database_pool_size: int = Field(default=20, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=10, alias="DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Admin allow-list
    admin_emails: Annotated[frozenset[str], NoDecode] = Field(
        default=frozenset(), alias="ADMIN_EMAILS"
    )

    # Session tokens issued by the identity provider bridge
    session_secret: str = Field(..., alias="SESSION_SECRET")
    session_algorithm: str = Field(default="HS256", alias="SESSION_ALGORITHM")
    session_cookie_name: str = Field(default="formhire_session", alias="SESSION_COOKIE_NAME")
    session_expire_minutes: int = Field(default=60 * 24 * 30, alias="SESSION_EXPIRE_MINUTES")

    # Celery
    celery_broker_url: str = Field(default="redis://localhost:6379/0", alias="CELERY_BROKER_URL")
    celery_result_backend: str = Field(
        default="redis://localhost:6379/1", alias="CELERY_RESULT_BACKEND"
    )
    celery_task_always_eager: bool = Field(default=False, alias="CELERY_TASK_ALWAYS_EAGER")

    # SMTP
    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    smtp_from_email: str | None = Field(default=None, alias="SMTP_FROM_EMAIL")
    smtp_from_name: str = Field(default="FormHire", alias="SMTP_FROM_NAME")

    # S3 resume storage
    aws_access_key_id: str | None = Field(default=None, alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str | None = Field(default=None, alias="AWS_SECRET_ACCESS_KEY")
    aws_region: str = Field(default="us-east-1", alias="AWS_REGION")
    aws_s3_bucket: str | None = Field(default=None, alias="AWS_S3_BUCKET")
    resume_prefix: str = Field(default="resumes", alias="RESUME_PREFIX")
    resume_max_bytes: int = Field(default=5 * 1024 * 1024, alias="RESUME_MAX_BYTES")

    # Logging
    log_request_body: bool = Field(default=False, alias="LOG_REQUEST_BODY")
    log_response_body: bool = Field(default=False, alias="LOG_RESPONSE_BODY")
    log_max_body_size: int = Field(default=1024, alias="LOG_MAX_BODY_SIZE")
    json_logs: bool = Field(default=True, alias="JSON_LOGS")

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def split_origins(cls, v):
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("admin_emails", mode="before")
    @classmethod
    def normalize_admin_emails(cls, v):
        """Trim and lower-case allow-listed emails; accept CSV or JSON list."""
        if v is None:
            return frozenset()
        if isinstance(v, str):
            raw = v.strip()
            if raw.startswith("["):
                items = json.loads(raw)
            else:
                items = raw.split(",")
        else:
            items = list(v)
        return frozenset(item.strip().lower() for item in items if item and item.strip())


# Global settings instance
settings = Settings()
