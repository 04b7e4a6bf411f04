"""
Infrastructure Database Layer

MongoDB connection lifecycle and the repository base class every
per-collection repository extends.
"""

from .interfaces import (
    DocumentDBInterface,
    DocumentDBConfig,
    DocumentDBException,
    ConnectionException,
    RepositoryError,
    RepoMalformedError,
    GuardedFieldsError,
)
from .implementations import MongoDBClient
from .repository import Repository, filter_fields, to_object_id
from .rules import REPOSITORY_RULES

__all__ = [
    # Interfaces
    "DocumentDBInterface",
    "DocumentDBConfig",

    # Exceptions
    "DocumentDBException",
    "ConnectionException",
    "RepositoryError",
    "RepoMalformedError",
    "GuardedFieldsError",

    # Implementations
    "MongoDBClient",

    # Repository
    "Repository",
    "filter_fields",
    "to_object_id",
    "REPOSITORY_RULES",
]
