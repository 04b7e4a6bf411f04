"""
Object Storage Interface Abstract Class

This module defines the single capability interface shared by every object
storage backend. Backends implement the object primitives; directory
operations (delete a prefix, move a prefix) are built on top of them here.
"""

import asyncio
import posixpath
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, BinaryIO, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from config.loguru_config import get_logger

logger = get_logger(__name__)


class StorageType(str, Enum):
    """Storage types."""
    S3 = "s3"
    OSS = "oss"


@dataclass
class StorageObject:
    """Storage object representation."""
    key: str
    bucket: str
    size: int
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    content_type: Optional[str] = None
    url: Optional[str] = None


class StorageConfig(BaseModel):
    """Storage configuration model."""
    provider: str
    bucket_name: str = Field(description="Bucket name")
    region: Optional[str] = Field(default=None, description="Storage region")
    endpoint: Optional[str] = Field(default=None, description="Storage endpoint URL")
    access_key: Optional[str] = Field(default=None, description="Access key")
    secret_key: Optional[str] = Field(default=None, description="Secret key")
    session_token: Optional[str] = Field(default=None, description="Session token")

    # Connection settings
    timeout: int = Field(default=30, description="Request timeout in seconds")
    max_retries: int = Field(default=3, description="Maximum retry attempts")
    retry_mode: str = Field(default="standard", description="Retry mode")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    # Performance settings
    max_concurrency: int = Field(default=10, description="Maximum concurrent operations")

    # Custom options
    custom_options: Optional[Dict[str, Any]] = None


def directory_prefix(path: str) -> str:
    """Normalize a directory path to a listing prefix ending with ``/``."""
    return path.strip("/") + "/"


class StorageInterface(ABC):
    """
    Abstract interface for object storage services.

    Paths are object keys inside the configured bucket, e.g.
    ``boats/some_boat_id/pictures/berry.jpg``. A "directory" is a key prefix.
    """

    def __init__(self, config: StorageConfig):
        """Initialize the storage client with configuration."""
        self.config = config
        self.provider_name = config.provider
        self.bucket_name = config.bucket_name
        self.region = config.region
        self.endpoint = config.endpoint
        self.timeout = config.timeout
        self.max_retries = config.max_retries
        self.max_concurrency = config.max_concurrency
        self._connected = False

    @abstractmethod
    async def connect(self) -> bool:
        """
        Connect to the storage service.

        Returns:
            bool: True if connection successful

        Raises:
            ConnectionException: If connection fails
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Disconnect from the storage service.
        """
        pass

    @abstractmethod
    async def upload(
        self,
        data: Union[bytes, BinaryIO],
        path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> StorageObject:
        """
        Upload an object.

        Args:
            data: Object data, bytes or a binary stream
            path: Full key inside the bucket
            content_type: Content type
            metadata: Object metadata

        Returns:
            StorageObject: The stored object

        Raises:
            UploadException: If upload fails
        """
        pass

    @abstractmethod
    async def delete_object(self, path: str) -> bool:
        """
        Delete an object.

        Args:
            path: Full key inside the bucket

        Returns:
            bool: True if deletion successful

        Raises:
            ObjectException: If deletion fails
        """
        pass

    @abstractmethod
    async def delete_objects(self, paths: List[str]) -> Dict[str, bool]:
        """
        Delete multiple objects in bulk.

        Args:
            paths: Object keys

        Returns:
            Dict[str, bool]: Deletion result per key

        Raises:
            ObjectException: If deletion fails
        """
        pass

    @abstractmethod
    async def list_directory(self, path: str) -> List[StorageObject]:
        """
        List every object under a directory, across all result pages.

        Args:
            path: Directory path

        Returns:
            List[StorageObject]: Objects found, empty when the directory is empty

        Raises:
            ObjectException: If listing fails
        """
        pass

    @abstractmethod
    async def copy_object(self, source: str, destination: str) -> bool:
        """
        Copy an object inside the bucket.

        Args:
            source: Source key
            destination: Destination key

        Returns:
            bool: True if copy successful

        Raises:
            ObjectException: If copy fails
        """
        pass

    async def delete_directory(self, path: str) -> int:
        """
        Remove a whole directory, e.g. ``boats/some_id/pictures/``.

        Returns:
            int: Number of deleted objects
        """
        self._require_path(path)

        objects = await self.list_directory(path)
        if not objects:
            logger.debug(f"Nothing to delete in {path}")
            return 0

        results = await self.delete_objects([obj.key for obj in objects])
        deleted = sum(1 for ok in results.values() if ok)
        logger.info(f"Deleted {deleted} object(s) from {self.provider_name}://{self.bucket_name}/{path}")
        return deleted

    async def move_directory(self, source: str, destination: str) -> int:
        """
        Move a whole directory, e.g. ``tmp/some_id/pictures`` to ``boats/some_id/pictures``.

        Objects are copied first (keeping their path relative to ``source``),
        then exactly the objects listed before copying are deleted. Not atomic:
        every copy is awaited, and if any failed the first error is raised with
        the source left in place and partial copies possibly at the destination.

        Returns:
            int: Number of moved objects

        Raises:
            ValidationException: If a path is missing or ``destination`` lies inside ``source``
        """
        self._require_path(source)
        self._require_path(destination)

        source_prefix = directory_prefix(source)
        destination_prefix = directory_prefix(destination)

        if destination_prefix.startswith(source_prefix):
            raise ValidationException(
                f"Cannot move directory {source} into itself ({destination})",
                provider=self.provider_name,
                bucket=self.bucket_name,
            )

        objects = await self.list_directory(source)

        copies = []
        for obj in objects:
            # skip the directory marker itself
            if obj.key == source_prefix:
                continue
            relative = obj.key[len(source_prefix):] if obj.key.startswith(source_prefix) else posixpath.basename(obj.key)
            copies.append(self.copy_object(obj.key, destination_prefix + relative))

        results = await asyncio.gather(*copies, return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result

        if objects:
            await self.delete_objects([obj.key for obj in objects])

        logger.info(f"Moved {len(copies)} object(s) from {source} to {destination}")
        return len(copies)

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the storage service.

        Returns:
            Dict[str, Any]: Health check result
        """
        test_key = f"health_check/{uuid.uuid4()}.txt"
        try:
            start_time = time.time()
            await self.upload(b"Storage health check", test_key)
            upload_time = (time.time() - start_time) * 1000

            await self.delete_object(test_key)

            return {
                "status": "healthy",
                "provider": self.provider_name,
                "bucket": self.bucket_name,
                "upload_time_ms": upload_time,
            }
        except StorageException as e:
            return {
                "status": "unhealthy",
                "provider": self.provider_name,
                "bucket": self.bucket_name,
                "error": str(e)
            }

    def get_provider_info(self) -> Dict[str, Any]:
        """
        Get information about the storage provider.

        Returns:
            Dict[str, Any]: Provider information
        """
        return {
            "provider": self.provider_name,
            "bucket": self.bucket_name,
            "region": self.region,
            "endpoint": self.endpoint,
            "connected": self._connected,
            "config": {
                "timeout": self.timeout,
                "max_retries": self.max_retries,
                "max_concurrency": self.max_concurrency,
            }
        }

    def _require_path(self, path: str) -> None:
        if not path:
            raise ValidationException(
                "No path was specified",
                provider=self.provider_name,
                bucket=self.bucket_name,
            )

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()


class StorageException(Exception):
    """Exception raised by storage services."""

    def __init__(
        self,
        message: str,
        provider: str = None,
        bucket: str = None,
        key: str = None,
        error_code: str = None
    ):
        super().__init__(message)
        self.provider = provider
        self.bucket = bucket
        self.key = key
        self.error_code = error_code


class ConnectionException(StorageException):
    """Exception raised when connection fails."""
    pass


class ObjectException(StorageException):
    """Exception raised for object operations."""
    pass


class UploadException(ObjectException):
    """Exception raised when upload fails."""
    pass


class ValidationException(StorageException):
    """Exception raised when validation fails."""
    pass
