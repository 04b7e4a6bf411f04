"""
Storage client factory

Selects the storage backend from configuration.
"""

from typing import Dict, Optional, Type

from config.loguru_config import get_logger
from .interfaces import StorageConfig, StorageInterface, StorageType, ValidationException
from .implementations import OSSClient, S3Client

logger = get_logger(__name__)

STORAGE_BACKENDS: Dict[StorageType, Type[StorageInterface]] = {
    StorageType.S3: S3Client,
    StorageType.OSS: OSSClient,
}


def create_storage_client(config: Optional[StorageConfig] = None) -> StorageInterface:
    """
    Build the storage client for ``config.provider``.

    Args:
        config: Storage configuration, read from the environment when omitted

    Returns:
        StorageInterface: An unconnected client; call ``connect()`` before use

    Raises:
        ValidationException: If the provider is unknown
    """
    if config is None:
        from config.services.storage_config import get_storage_settings
        config = get_storage_settings().to_storage_config()

    try:
        storage_type = StorageType(config.provider.lower())
    except ValueError as e:
        raise ValidationException(
            f"Unsupported storage provider: {config.provider}",
            provider=config.provider,
            bucket=config.bucket_name,
            error_code="UNSUPPORTED_PROVIDER"
        ) from e

    logger.debug(f"Creating {storage_type.value} storage client for bucket {config.bucket_name}")
    return STORAGE_BACKENDS[storage_type](config)
