"""
AWS S3 Object Storage Client Implementation

This module provides an S3-compatible object storage client that implements
the StorageInterface abstract base class.
"""

from typing import BinaryIO, Dict, List, Optional, Union

import aioboto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

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

# DeleteObjects accepts at most 1000 keys per request
DELETE_BATCH_SIZE = 1000


def _error_code(error: Exception) -> Optional[str]:
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


class S3Client(StorageInterface):
    """
    AWS S3 object storage client implementation.

    Every call opens a short-lived client from the aioboto3 session created
    in ``connect()``.
    """

    def __init__(self, config: StorageConfig):
        """
        Initialize S3 client with configuration.

        Args:
            config: Storage configuration with S3-specific settings
        """
        super().__init__(config)

        self.access_key = config.access_key
        self.secret_key = config.secret_key
        self.session_token = config.session_token
        self.region = config.region or "us-east-1"
        self.verify_ssl = config.verify_ssl

        self._session = None

        self._boto_config = Config(
            region_name=self.region,
            retries={
                "max_attempts": config.max_retries,
                "mode": config.retry_mode
            },
            connect_timeout=config.timeout,
            read_timeout=config.timeout,
            max_pool_connections=config.max_concurrency
        )

    async def connect(self) -> bool:
        """
        Connect to S3 service and check the bucket is reachable.

        Returns:
            bool: True if connection successful

        Raises:
            ConnectionException: If connection fails
        """
        self._session = aioboto3.Session(
            aws_access_key_id=self.access_key,
            aws_secret_access_key=self.secret_key,
            aws_session_token=self.session_token,
            region_name=self.region
        )

        try:
            async with self._get_client() as s3:
                await s3.head_bucket(Bucket=self.bucket_name)
        except (NoCredentialsError, PartialCredentialsError) as e:
            self._session = None
            logger.error(f"S3 credentials error: {e}")
            raise ConnectionException(
                f"S3 credentials error: {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                error_code="CREDENTIALS_ERROR"
            ) from e
        except (BotoCoreError, ClientError) as e:
            self._session = None
            logger.error(f"S3 connection failed: {e}")
            raise ConnectionException(
                f"S3 connection failed: {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                error_code=_error_code(e) or "CONNECTION_ERROR"
            ) from e

        self._connected = True
        logger.info(f"Connected to S3 bucket {self.bucket_name}")
        return True

    async def disconnect(self) -> None:
        """Disconnect from S3 service."""
        self._session = None
        self._connected = False
        logger.info("Disconnected from S3")

    def _get_client(self):
        """Get S3 client."""
        if not self._session:
            raise ConnectionException(
                "Not connected to S3 service",
                provider=self.provider_name,
                bucket=self.bucket_name
            )
        return self._session.client(
            "s3",
            endpoint_url=self.endpoint,
            config=self._boto_config,
            verify=self.verify_ssl
        )

    def _object_url(self, key: str) -> str:
        if self.endpoint:
            return f"{self.endpoint.rstrip('/')}/{self.bucket_name}/{key}"
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{key}"

    async def upload(
        self,
        data: Union[bytes, BinaryIO],
        path: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> StorageObject:
        """
        Upload an object to S3.

        Raises:
            UploadException: If upload fails
        """
        self._require_path(path)

        upload_args = {
            "Bucket": self.bucket_name,
            "Key": path,
            "Body": data,
        }
        if content_type:
            upload_args["ContentType"] = content_type
        if metadata:
            upload_args["Metadata"] = metadata

        try:
            async with self._get_client() as s3:
                response = await s3.put_object(**upload_args)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error while saving {path} to S3: {e}")
            raise UploadException(
                f"Failed to upload object '{path}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=path,
                error_code=_error_code(e)
            ) from e

        if isinstance(data, (bytes, bytearray)):
            size = len(data)
        else:
            current_pos = data.tell()
            data.seek(0, 2)
            size = data.tell()
            data.seek(current_pos)

        logger.info(f"Successfully uploaded {path} to S3")
        return StorageObject(
            key=path,
            bucket=self.bucket_name,
            size=size,
            etag=response.get("ETag", "").strip('"') or None,
            content_type=content_type,
            url=self._object_url(path)
        )

    async def delete_object(self, path: str) -> bool:
        """
        Delete an object from S3.

        Raises:
            ObjectException: If deletion fails
        """
        self._require_path(path)

        try:
            async with self._get_client() as s3:
                await s3.delete_object(Bucket=self.bucket_name, Key=path)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise ObjectException(
                f"Failed to delete object '{path}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=path,
                error_code=_error_code(e)
            ) from e

        logger.info(f"Successfully deleted {path}")
        return True

    async def delete_objects(self, paths: List[str]) -> Dict[str, bool]:
        """
        Delete multiple objects from S3.

        Returns:
            Dict[str, bool]: Deletion results, False for keys S3 reported as errors

        Raises:
            ObjectException: If the request fails
        """
        if not paths:
            return {}

        results = {path: True for path in paths}

        try:
            async with self._get_client() as s3:
                for start in range(0, len(paths), DELETE_BATCH_SIZE):
                    batch = paths[start:start + DELETE_BATCH_SIZE]
                    response = await s3.delete_objects(
                        Bucket=self.bucket_name,
                        Delete={"Objects": [{"Key": key} for key in batch]}
                    )
                    for error in response.get("Errors", []):
                        logger.warning(f"S3 refused to delete {error['Key']}: {error.get('Message')}")
                        results[error["Key"]] = False
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to delete objects: {e}")
            raise ObjectException(
                f"Failed to delete objects: {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                error_code=_error_code(e)
            ) from e

        return results

    async def list_directory(self, path: str) -> List[StorageObject]:
        """
        List every object under ``path``, following continuation tokens.

        Raises:
            ObjectException: If listing fails
        """
        self._require_path(path)

        list_args = {
            "Bucket": self.bucket_name,
            "Prefix": directory_prefix(path),
        }
        objects = []

        try:
            async with self._get_client() as s3:
                while True:
                    response = await s3.list_objects_v2(**list_args)
                    for obj in response.get("Contents", []):
                        objects.append(StorageObject(
                            key=obj["Key"],
                            bucket=self.bucket_name,
                            size=obj.get("Size", 0),
                            etag=obj.get("ETag", "").strip('"') or None,
                            last_modified=obj.get("LastModified"),
                            url=self._object_url(obj["Key"])
                        ))

                    if not response.get("IsTruncated"):
                        break
                    list_args["ContinuationToken"] = response["NextContinuationToken"]
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to list {path}: {e}")
            raise ObjectException(
                f"Failed to list objects under '{path}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=path,
                error_code=_error_code(e)
            ) from e

        return objects

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

        try:
            async with self._get_client() as s3:
                await s3.copy_object(
                    CopySource={"Bucket": self.bucket_name, "Key": source},
                    Bucket=self.bucket_name,
                    Key=destination
                )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to copy {source} to {destination}: {e}")
            raise ObjectException(
                f"Failed to copy object '{source}' to '{destination}': {str(e)}",
                provider=self.provider_name,
                bucket=self.bucket_name,
                key=destination,
                error_code=_error_code(e)
            ) from e

        logger.debug(f"Copied {source} to {destination}")
        return True
