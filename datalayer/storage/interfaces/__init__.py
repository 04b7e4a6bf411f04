"""
Storage Interfaces

This module contains the abstract interface for object storage services.
"""

from .storage_interface import (
    # Storage interfaces and models
    StorageInterface,
    StorageConfig,
    StorageType,
    StorageObject,
    directory_prefix,

    # Storage exceptions
    StorageException,
    ConnectionException,
    ObjectException,
    UploadException,
    ValidationException,
)

__all__ = [
    # Storage interfaces
    "StorageInterface",
    "StorageConfig",
    "StorageType",
    "StorageObject",
    "directory_prefix",

    # Storage exceptions
    "StorageException",
    "ConnectionException",
    "ObjectException",
    "UploadException",
    "ValidationException",
]
