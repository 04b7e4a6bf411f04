"""
Alibaba Cloud OSS Object Storage Client Implementation

oss2 is a blocking SDK: each call is pushed to a worker thread with
``asyncio.to_thread`` so the client exposes the same async StorageInterface
as the S3 backend.
"""

import asyncio
from datetime import datetime, timezone
from typing import BinaryIO, Dict, List, Optional, Union

import oss2
from oss2.exceptions import OssError

from config.loguru_config import get_logger
from ..interfaces.storage_interface import (
    StorageInterface,
    StorageConfig,
    StorageObject,
    ConnectionException,
    ObjectException,
    UploadException,
    ValidationException,
    directory_prefix,
)

logger = get_logger(__name__)

# batch_delete_objects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000


def resolve_endpoint(region: Optional[str], endpoint: Optional[str]) -> str:
    """Build the public OSS endpoint for a region such as ``oss-cn-hangzhou``."""
    if endpoint:
        return endpoint
    if not region:
        raise ValidationException(
            "OSS requires either an endpoint or a region",
            provider="oss"
        )
    if not region.startswith("oss-"):
        region = f"oss-{region}"
    return f"https://{region}.aliyuncs.com"


class OSSClient(StorageInterface):
    """
    Alibaba Cloud OSS object storage client implementation.
    """

    def __init__(self, config: StorageConfig):
        super().__init__(config)

        self.access_key_id = config.access_key
        self.access_key_secret = config.secret_key
        self.security_token = config.session_token
        self.endpoint = resolve_endpoint(config.region, config.endpoint)

        self._bucket: Optional[oss2.Bucket] = None

    def _build_bucket(self) -> oss2.Bucket:
        if self.security_token:
            auth = oss2.StsAuth(self.access_key_id, self.access_key_secret, self.security_token)
        else:
            auth = oss2.Auth(self.access_key_id, self.access_key_secret)
        return oss2.Bucket(auth, self.endpoint, self.bucket_name, connect_timeout=self.timeout)

    async def connect(self) -> bool:
        """
        Connect to OSS and check the bucket is reachable.

        Raises:
            ConnectionException: If connection fails
        """
        bucket = self._build_bucket()

        try:
            await asyncio.to_thread(bucket.get_bucket_info)
        except OssError as e:
            logger.error(f"OSS connection failed: {e}")
            raise ConnectionException(
                f"OSS connection failed: {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                error_code=getattr(e, "code", None) or "CONNECTION_ERROR"
            ) from e

        self._bucket = bucket
        self._connected = True
        logger.info(f"Connected to OSS bucket {self.bucket_name} at {self.endpoint}")
        return True

    async def disconnect(self) -> None:
        """Disconnect from OSS."""
        self._bucket = None
        self._connected = False
        logger.info("Disconnected from OSS")

    def _get_bucket(self) -> oss2.Bucket:
        if self._bucket is None:
            raise ConnectionException(
                "Not connected to OSS service",
                provider=self.provider_name,
                bucket=self.bucket_name
            )
        return self._bucket

    def _object_url(self, key: str) -> str:
        scheme, _, host = self.endpoint.partition("://")
        if not host:
            scheme, host = "https", self.endpoint
        return f"{scheme}://{self.bucket_name}.{host}/{key}"

    async def upload(
        self,
        data: Union[bytes, BinaryIO],
        path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> StorageObject:
        """
        Upload an object to OSS.

        Raises:
            UploadException: If upload fails
        """
        self._require_path(path)
        bucket = self._get_bucket()

        headers = {}
        if content_type:
            headers["Content-Type"] = content_type
        for name, value in (metadata or {}).items():
            headers[f"x-oss-meta-{name}"] = value

        try:
            result = await asyncio.to_thread(bucket.put_object, path, data, headers=headers or None)
        except OssError as e:
            logger.error(f"Error while saving {path} to OSS: {e}")
            raise UploadException(
                f"Failed to upload object '{path}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=path,
                error_code=getattr(e, "code", None)
            ) from e

        if isinstance(data, (bytes, bytearray)):
            size = len(data)
        else:
            size = data.tell()

        logger.info(f"Successfully uploaded {path} to OSS")
        return StorageObject(
            key=path,
            bucket=self.bucket_name,
            size=size,
            etag=(result.etag or "").strip('"') or None,
            content_type=content_type,
            url=self._object_url(path)
        )

    async def delete_object(self, path: str) -> bool:
        """
        Delete an object from OSS.

        Raises:
            ObjectException: If deletion fails
        """
        self._require_path(path)
        bucket = self._get_bucket()

        try:
            await asyncio.to_thread(bucket.delete_object, path)
        except OssError as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise ObjectException(
                f"Failed to delete object '{path}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=path,
                error_code=getattr(e, "code", None)
            ) from e

        logger.info(f"Successfully deleted {path}")
        return True

    async def delete_objects(self, paths: List[str]) -> Dict[str, bool]:
        """
        Delete multiple objects from OSS in batches.

        Returns:
            Dict[str, bool]: True for every key OSS reported as deleted

        Raises:
            ObjectException: If a batch request fails
        """
        if not paths:
            return {}

        bucket = self._get_bucket()
        results = {path: False for path in paths}

        try:
            for start in range(0, len(paths), DELETE_BATCH_SIZE):
                batch = paths[start:start + DELETE_BATCH_SIZE]
                response = await asyncio.to_thread(bucket.batch_delete_objects, batch)
                for key in response.deleted_keys:
                    results[key] = True
        except OssError as e:
            logger.error(f"Failed to delete objects: {e}")
            raise ObjectException(
                f"Failed to delete objects: {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                error_code=getattr(e, "code", None)
            ) from e

        return results

    def _collect(self, prefix: str) -> List[StorageObject]:
        objects = []
        for info in oss2.ObjectIterator(self._get_bucket(), prefix=prefix):
            objects.append(StorageObject(
                key=info.key,
                bucket=self.bucket_name,
                size=info.size,
                etag=(info.etag or "").strip('"') or None,
                last_modified=datetime.fromtimestamp(info.last_modified, tz=timezone.utc)
                if info.last_modified else None,
                url=self._object_url(info.key)
            ))
        return objects

    async def list_directory(self, path: str) -> List[StorageObject]:
        """
        List every object under ``path``. ObjectIterator follows the markers.

        Raises:
            ObjectException: If listing fails
        """
        self._require_path(path)

        try:
            return await asyncio.to_thread(self._collect, directory_prefix(path))
        except OssError as e:
            logger.error(f"Failed to list {path}: {e}")
            raise ObjectException(
                f"Failed to list objects under '{path}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=path,
                error_code=getattr(e, "code", None)
            ) from e

    async def copy_object(self, source: str, destination: str) -> bool:
        """
        Copy an object inside the bucket.

        Raises:
            ObjectException: If copy fails
        """
        if not source or not destination:
            raise ValidationException(
                "Source and destination keys cannot be empty",
                provider=self.provider_name,
                bucket=self.bucket_name
            )
        bucket = self._get_bucket()

        try:
            await asyncio.to_thread(bucket.copy_object, self.bucket_name, source, destination)
        except OssError as e:
            logger.error(f"Failed to copy {source} to {destination}: {e}")
            raise ObjectException(
                f"Failed to copy object '{source}' to '{destination}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=destination,
                error_code=getattr(e, "code", None)
            ) from e

        logger.debug(f"Copied {source} to {destination}")
        return True
