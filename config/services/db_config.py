"""
Database Configuration

This module contains configuration for the MongoDB document store.
"""

from functools import lru_cache

from pydantic import Field

from ..settings import BaseConfig


class DatabaseConfig(BaseConfig):
    """Database configuration."""

    # MongoDB Configuration
    mongodb_url: str = Field(default="mongodb://localhost:27017")
    mongodb_database: str = Field(default="datalayer")
    mongodb_app_name: str = Field(default="datalayer")

    # Pool Settings
    mongodb_min_pool_size: int = Field(default=0, ge=0)
    mongodb_max_pool_size: int = Field(default=100, ge=1)
    mongodb_server_selection_timeout_ms: int = Field(default=5000, ge=1)
    mongodb_connect_timeout_ms: int = Field(default=10000, ge=1)

    def to_db_config(self):
        """Build the interface-level configuration used by MongoDBClient."""
        from datalayer.database.interfaces import DocumentDBConfig

        return DocumentDBConfig(
            url=self.mongodb_url,
            database=self.mongodb_database,
            app_name=self.mongodb_app_name,
            min_pool_size=self.mongodb_min_pool_size,
            max_pool_size=self.mongodb_max_pool_size,
            server_selection_timeout_ms=self.mongodb_server_selection_timeout_ms,
            connect_timeout_ms=self.mongodb_connect_timeout_ms,
        )


@lru_cache()
def get_database_config() -> DatabaseConfig:
    """Get cached database configuration."""
    return DatabaseConfig()
