# src/file_manager/config/settings.py
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from file_manager.errors import ConfigurationError


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from file_manager.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="file-manager",
        description="Application name"
    )

    host: str = Field(
        default="0.0.0.0",
        description="Interface the HTTP server binds to"
    )

    port: int = Field(
        default=3000,
        alias="PORT",
        description="Port the HTTP server listens on"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL",
        description="Custom endpoint for S3-compatible stores (MinIO, moto server)"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="files",
        description="Private bucket holding every uploaded file"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        level = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if level not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return level

    @field_validator("aws_endpoint_url", "aws_access_key_id", "aws_secret_access_key")
    @classmethod
    def blank_as_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty environment variables as unset."""
        if v is not None and not v.strip():
            return None
        return v

    def require_storage_credentials(self) -> None:
        """
        Fail fast when the storage credential is absent.

        Raises:
            ConfigurationError: if either half of the AWS key pair is missing.
        """
        missing = [
            name
            for name, value in (
                ("AWS_ACCESS_KEY_ID", self.aws_access_key_id),
                ("AWS_SECRET_ACCESS_KEY", self.aws_secret_access_key),
            )
            if not value
        ]
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} environment variable is required"
            )

    def describe(self) -> dict:
        """Effective configuration with secrets masked, for display."""
        return {
            "App Name": self.app_name,
            "Host": self.host,
            "Port": self.port,
            "AWS Region": self.aws_region,
            "AWS Endpoint": self.aws_endpoint_url,
            "AWS Access Key ID": _mask(self.aws_access_key_id),
            "AWS Secret Access Key": _mask(self.aws_secret_access_key),
            "S3 Bucket": self.s3_bucket_name,
            "Log Level": self.log_level,
        }

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


def _mask(value: Optional[str]) -> str:
    if not value:
        return "<not set>"
    return value[:4] + "*" * max(len(value) - 4, 0)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
