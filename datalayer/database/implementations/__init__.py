"""
Database Implementations

This module contains concrete implementations of the database interfaces.
"""

from .mongo_client import MongoDBClient

__all__ = [
    "MongoDBClient",
]
