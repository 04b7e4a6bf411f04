"""
MongoDB Client Implementation

This module implements the document database interface on top of Motor,
the asyncio MongoDB driver. ``MongoDBClient.get_database`` is meant to be
passed as the connection accessor of every ``Repository``.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from config.loguru_config import get_logger

from ..interfaces.document_db_interface import (
    ConnectionException,
    DocumentDBConfig,
    DocumentDBInterface,
)

logger = get_logger(__name__)


class MongoDBClient(DocumentDBInterface):
    """
    MongoDB pool lifecycle object.

    Owns one ``AsyncIOMotorClient``; the client multiplexes requests over its
    own connection pool, so a single instance is shared by every repository.
    """

    def __init__(self, config: DocumentDBConfig):
        super().__init__(config)
        self._client: Optional[AsyncIOMotorClient] = None

    async def connect(self) -> bool:
        """
        Create the Motor client and check the server answers.

        Returns:
            bool: True if connection successful

        Raises:
            ConnectionException: If the server cannot be reached
        """
        if self._client is not None:
            return True

        params = dict(self.config.connection_params or {})
        if self.config.app_name:
            params.setdefault("appname", self.config.app_name)

        client = AsyncIOMotorClient(
            self.config.url,
            minPoolSize=self.config.min_pool_size,
            maxPoolSize=self.config.max_pool_size,
            serverSelectionTimeoutMS=self.config.server_selection_timeout_ms,
            connectTimeoutMS=self.config.connect_timeout_ms,
            **params,
        )

        try:
            await client.admin.command("ping")
        except PyMongoError as e:
            client.close()
            error_msg = f"Failed to connect to MongoDB at {self.config.masked_url()}: {str(e)}"
            logger.error(error_msg)
            raise ConnectionException(
                error_msg,
                provider=self.provider_name,
                database=self.database_name,
                error_code="CONNECTION_ERROR",
            ) from e

        self._client = client
        self._connected = True
        logger.info(f"Connected to MongoDB: {self.config.masked_url()} (database: {self.database_name})")
        return True

    async def disconnect(self) -> None:
        """Close the Motor client."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Disconnected from MongoDB")
        self._connected = False

    def get_client(self) -> AsyncIOMotorClient:
        """Return the Motor client."""
        if self._client is None:
            raise ConnectionException(
                "Database not initialized. Call connect() first.",
                provider=self.provider_name,
                database=self.database_name,
            )
        return self._client

    def get_database(self) -> AsyncIOMotorDatabase:
        """Return the configured database handle."""
        return self.get_client()[self.database_name]

    async def ping(self) -> bool:
        """Check if the MongoDB server answers a ping."""
        if self._client is None:
            return False

        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {str(e)}")
            return False
