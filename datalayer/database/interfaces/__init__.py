"""
Database Interfaces

This module contains abstract interfaces for document database providers.
"""

from .document_db_interface import (
    # Interfaces and models
    DocumentDBInterface,
    DocumentDBConfig,
    mask_url_password,

    # Exceptions
    DocumentDBException,
    ConnectionException,
    RepositoryError,
    RepoMalformedError,
    GuardedFieldsError,
)

__all__ = [
    # Interfaces
    "DocumentDBInterface",
    "DocumentDBConfig",
    "mask_url_password",

    # Exceptions
    "DocumentDBException",
    "ConnectionException",
    "RepositoryError",
    "RepoMalformedError",
    "GuardedFieldsError",
]
