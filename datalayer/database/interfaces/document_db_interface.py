"""
Document Database Interface Abstract Class

This module defines the abstract interface for document database providers.
A provider owns the connection pool lifecycle and hands out database handles
through ``get_database``, which is the zero-argument connection accessor that
repositories are built with.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, Field


class DocumentDBConfig(BaseModel):
    """Document database configuration."""
    provider: str = "mongodb"
    url: str = Field(default="mongodb://localhost:27017", description="Connection string")
    database: str = Field(description="Database name")
    app_name: Optional[str] = None

    # Connection pooling
    min_pool_size: int = Field(default=0, ge=0)
    max_pool_size: int = Field(default=100, ge=1)

    # Timeout settings
    server_selection_timeout_ms: int = Field(default=5000, ge=1)
    connect_timeout_ms: int = Field(default=10000, ge=1)

    # Additional driver keyword arguments
    connection_params: Optional[Dict[str, Any]] = None

    def masked_url(self) -> str:
        """Return the connection string with the password hidden."""
        return mask_url_password(self.url)


def mask_url_password(url: str) -> str:
    """Hide the password part of a connection URL for safe logging."""
    parts = urlsplit(url)
    if "@" not in parts.netloc:
        return url

    credentials, host = parts.netloc.rsplit("@", 1)
    if ":" not in credentials:
        return url

    username = credentials.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{username}:***@{host}"))


class DocumentDBInterface(ABC):
    """
    Abstract interface for document database providers.

    Implementations wrap an asynchronous driver client. The client is created
    by ``connect`` and released by ``disconnect``; nothing is created at import
    time.
    """

    def __init__(self, config: DocumentDBConfig):
        """Initialize the document database with configuration."""
        self.config = config
        self.provider_name = config.provider
        self.database_name = config.database
        self._connected = False

    @abstractmethod
    async def connect(self) -> bool:
        """
        Connect to the document database.

        Returns:
            bool: True if connection successful

        Raises:
            ConnectionException: If connection fails
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Disconnect from the document database and release the pool.
        """
        pass

    @abstractmethod
    def get_database(self) -> Any:
        """
        Return the live database handle.

        Cheap and idempotent: repositories call it on every operation.

        Raises:
            ConnectionException: If not connected
        """
        pass

    @abstractmethod
    async def ping(self) -> bool:
        """
        Round-trip to the server.

        Returns:
            bool: True if the server answered
        """
        pass

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the document database.

        Returns:
            Dict[str, Any]: Health check result
        """
        try:
            healthy = self._connected and await self.ping()
            return {
                "status": "healthy" if healthy else "unhealthy",
                "provider": self.provider_name,
                "database": self.database_name,
                "connected": self._connected,
            }
        except Exception as e:
            return {
                "status": "unhealthy",
                "provider": self.provider_name,
                "database": self.database_name,
                "connected": self._connected,
                "error": str(e),
            }

    def get_connection_info(self) -> Dict[str, Any]:
        """
        Get connection information.

        Returns:
            Dict[str, Any]: Connection information, credentials masked
        """
        return {
            "provider": self.provider_name,
            "url": self.config.masked_url(),
            "database": self.database_name,
            "connected": self._connected,
            "config": {
                "min_pool_size": self.config.min_pool_size,
                "max_pool_size": self.config.max_pool_size,
                "server_selection_timeout_ms": self.config.server_selection_timeout_ms,
                "connect_timeout_ms": self.config.connect_timeout_ms,
            },
        }

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.disconnect()


class DocumentDBException(Exception):
    """Exception raised by document database providers."""

    def __init__(
        self,
        message: str,
        provider: str = None,
        database: str = None,
        collection: str = None,
        error_code: str = None
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.database = database
        self.collection = collection
        self.error_code = error_code


class ConnectionException(DocumentDBException):
    """Exception raised when connection fails or the pool is not available."""
    pass


class RepositoryError(DocumentDBException):
    """Exception raised by repositories."""
    pass


class RepoMalformedError(RepositoryError):
    """Exception raised when a repository is built without its accessor or collection name."""

    def __init__(self, message: str = "The repository was malformed", **kwargs):
        super().__init__(message, **kwargs)


class GuardedFieldsError(RepositoryError):
    """Exception raised when a guarded write is left with nothing to save."""
    pass
