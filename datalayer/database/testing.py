"""
Test helpers for code built on repositories.

Typically used in a fixture::

    @pytest.fixture
    async def seeded_db(mongo):
        async def seed(db):
            await db.get_collection("todos").insert_one(todo_stub)

        return await prepare_collections(mongo.get_database, ["todos"], seed)
"""

import asyncio
import inspect
from typing import Any, Callable, Iterable, Optional

from config.loguru_config import get_logger

logger = get_logger(__name__)


async def prepare_collections(
    get_database: Callable[[], Any],
    collections: Iterable[str],
    seed: Optional[Callable[[Any], Any]] = None
) -> Any:
    """
    Empty the given collections, then hand the database to ``seed``.

    Args:
        get_database: Connection accessor
        collections: Names of the collections to clear
        seed: Optional callback (sync or async) that inserts fixture data

    Returns:
        Any: The database handle
    """
    db = get_database()
    names = list(collections)

    await asyncio.gather(*(db.get_collection(name).delete_many({}) for name in names))
    logger.debug(f"Cleared collections: {names}")

    if seed is not None:
        outcome = seed(db)
        if inspect.isawaitable(outcome):
            await outcome

    return db
