"""
Service Configurations

Per-service settings: MongoDB and object storage.
"""

from .db_config import DatabaseConfig, get_database_config
from .storage_config import StorageSettings, get_storage_settings

__all__ = [
    "DatabaseConfig",
    "get_database_config",
    "StorageSettings",
    "get_storage_settings",
]
