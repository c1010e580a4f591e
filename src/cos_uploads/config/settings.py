# src/cos_uploads/config/settings.py
import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cos_uploads.schemas import StorageParams


class Settings(BaseSettings):
    """
    Single source of truth for all application settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from cos_uploads.config.settings import get_settings
        settings = get_settings()
        bucket_name = settings.cos_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="cos-uploads",
        description="Application name"
    )

    # Object Storage Settings
    cos_endpoint: str = Field(
        default="",
        description="Object storage endpoint URL"
    )

    cos_bucket_name: str = Field(
        default="",
        description="Bucket receiving the uploads"
    )

    cos_access_key_id: str = Field(
        default="",
        description="HMAC access key id"
    )

    cos_secret_access_key: str = Field(
        default="",
        description="HMAC secret access key"
    )

    cos_api_key_id: str = Field(
        default="",
        description="IAM API key, used instead of the HMAC keys when set"
    )

    cos_service_instance_id: str = Field(
        default="",
        description="Resource instance id of the COS service"
    )

    cos_region: Optional[str] = Field(
        default=None,
        description="Region name passed to the S3 client"
    )

    cos_signature_version: Optional[str] = Field(
        default=None,
        description="Request signing version, s3v4 for HMAC keys and oauth for IAM by default"
    )

    # Upload Settings
    max_upload_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Maximum number of files accepted by POST /multiple"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard logging level names."""
        level = v.upper()
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if level not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return level

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)

    def to_storage_params(self, **overrides) -> StorageParams:
        """Build storage engine parameters from these settings.

        Keyword arguments (key, file_filter, field_name, ...) are passed through.
        """
        params = {
            "endpoint": self.cos_endpoint,
            "bucket": self.cos_bucket_name,
            "access_key_id": self.cos_access_key_id,
            "secret_access_key": self.cos_secret_access_key,
            "api_key_id": self.cos_api_key_id,
            "service_instance_id": self.cos_service_instance_id,
            "region": self.cos_region,
            "signature_version": self.cos_signature_version,
        }
        params.update(overrides)
        return StorageParams(**params)

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
