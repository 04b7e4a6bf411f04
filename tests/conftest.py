"""
Test configuration and shared fixtures.

Motor collections are replaced by ``MagicMock`` doubles whose driver
coroutines are ``AsyncMock``; no MongoDB server is needed for unit tests.
"""
import os
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock, Mock

import pytest
from bson import ObjectId

# Test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "DEBUG"

from config.loguru_config import setup_logging  # noqa: E402
from datalayer.database import Repository  # noqa: E402

setup_logging("testing")


def make_cursor(documents: Optional[List[Dict[str, Any]]] = None) -> Mock:
    """Cursor double exposing Motor's ``to_list``."""
    cursor = Mock()
    cursor.to_list = AsyncMock(return_value=list(documents or []))
    return cursor


def make_collection(name: str = "todos") -> MagicMock:
    """Collection double with the Motor coroutine methods the repository uses."""
    collection = MagicMock(name=f"collection:{name}")
    collection.name = name
    collection.find = Mock(return_value=make_cursor())
    collection.find_one = AsyncMock(return_value=None)
    collection.count_documents = AsyncMock(return_value=0)
    collection.insert_one = AsyncMock(return_value=Mock(inserted_id=ObjectId()))
    collection.find_one_and_update = AsyncMock(return_value=None)
    collection.find_one_and_replace = AsyncMock(return_value=None)
    collection.delete_one = AsyncMock(return_value=Mock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=Mock(deleted_count=0))
    return collection


class FakeDatabase:
    """Database double handing out one collection double per name."""

    def __init__(self):
        self.collections: Dict[str, MagicMock] = {}

    def get_collection(self, name: str) -> MagicMock:
        if name not in self.collections:
            self.collections[name] = make_collection(name)
        return self.collections[name]

    def __getitem__(self, name: str) -> MagicMock:
        return self.get_collection(name)


class TodoRepository(Repository):
    """Repository used across the repository tests."""
    fields = ["name", "description", "done", "tags"]
    hidden = ["secret"]
    rules = {
        "name": "required|alpha",
        "description": "string",
    }

    def __init__(self, get_database):
        super().__init__(get_database, "todos")


@pytest.fixture
def fake_db() -> FakeDatabase:
    """In-memory database double."""
    return FakeDatabase()


@pytest.fixture
def todos(fake_db) -> MagicMock:
    """The ``todos`` collection double."""
    return fake_db.get_collection("todos")


@pytest.fixture
def todo_repository(fake_db) -> TodoRepository:
    """Repository bound to the ``todos`` collection double."""
    return TodoRepository(lambda: fake_db)


@pytest.fixture
def collection_factory():
    """Build standalone collection doubles."""
    return make_collection


@pytest.fixture
def cursor_factory():
    """Build cursor doubles returning the given documents."""
    return make_cursor


@pytest.fixture
def todo_stub() -> Dict[str, Any]:
    """Sample todo document."""
    return {
        "name": "groceries",
        "description": "buy milk",
        "done": False,
        "tags": ["home"],
    }


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: unit tests")
    config.addinivalue_line("markers", "integration: tests that need a running MongoDB or object store")
