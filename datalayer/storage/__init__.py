"""
Infrastructure Storage Layer

This module provides the object storage interface and its S3 and Alibaba
Cloud OSS implementations.
"""

from .interfaces import (
    StorageInterface,
    StorageConfig,
    StorageType,
    StorageObject,
    StorageException,
    ConnectionException,
    ObjectException,
    UploadException,
    ValidationException
)

from .implementations import (
    S3Client,
    OSSClient
)

from .factory import create_storage_client

__all__ = [
    # Interfaces
    'StorageInterface',
    'StorageConfig',
    'StorageType',
    'StorageObject',

    # Exceptions
    'StorageException',
    'ConnectionException',
    'ObjectException',
    'UploadException',
    'ValidationException',

    # Implementations
    'S3Client',
    'OSSClient',

    # Factory
    'create_storage_client'
]
