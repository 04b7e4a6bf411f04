"""
Storage Configuration

This module contains configuration for object storage services.
"""

from functools import lru_cache

from pydantic import Field

from ..settings import BaseConfig


class StorageSettings(BaseConfig):
    """Storage configuration."""

    # Storage Provider
    storage_provider: str = Field(default="s3")  # s3, oss
    storage_bucket: str = Field(default="datalayer-uploads")
    storage_timeout: int = Field(default=30)
    storage_max_retries: int = Field(default=3)

    # S3 Configuration
    s3_endpoint: str = Field(default="")
    s3_access_key: str = Field(default="")
    s3_secret_key: str = Field(default="")
    s3_session_token: str = Field(default="")
    s3_region: str = Field(default="us-east-1")
    s3_verify_ssl: bool = Field(default=True)

    # OSS Configuration
    oss_endpoint: str = Field(default="")
    oss_access_key_id: str = Field(default="")
    oss_access_key_secret: str = Field(default="")
    oss_region: str = Field(default="")

    def to_storage_config(self):
        """Build the interface-level StorageConfig for the selected provider."""
        from datalayer.storage.interfaces import StorageConfig

        provider = self.storage_provider.lower()
        if provider == "oss":
            return StorageConfig(
                provider=provider,
                bucket_name=self.storage_bucket,
                region=self.oss_region or None,
                endpoint=self.oss_endpoint or None,
                access_key=self.oss_access_key_id or None,
                secret_key=self.oss_access_key_secret or None,
                timeout=self.storage_timeout,
                max_retries=self.storage_max_retries,
            )

        return StorageConfig(
            provider=provider,
            bucket_name=self.storage_bucket,
            region=self.s3_region or None,
            endpoint=self.s3_endpoint or None,
            access_key=self.s3_access_key or None,
            secret_key=self.s3_secret_key or None,
            session_token=self.s3_session_token or None,
            timeout=self.storage_timeout,
            max_retries=self.storage_max_retries,
            verify_ssl=self.s3_verify_ssl,
        )


@lru_cache()
def get_storage_settings() -> StorageSettings:
    """Get cached storage configuration."""
    return StorageSettings()
