"""
MongoDB connection management.

One AsyncMongoClient is created lazily and reused across requests (the
connection pool avoids a cold start on every query). Collection names and
index definitions for all practice collections live here.
"""

from __future__ import annotations

import logging
from typing import Optional

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient, IndexModel
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from polish_trainer.config import DB_NAME, get_mongo_uri
from polish_trainer.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

# Collection names
CONCEPTS = "concepts"
CONCEPT_PROGRESS = "concept_progress"
QUESTION_BANK = "question_bank"
CONCEPT_GROUPS = "concept_groups"
COURSE_CONCEPTS = "course_concepts"

INDEXES = {
    CONCEPTS: [
        IndexModel([("id", ASCENDING)], unique=True),
        IndexModel([("category", ASCENDING), ("difficulty", ASCENDING), ("is_active", ASCENDING)]),
    ],
    CONCEPT_PROGRESS: [
        IndexModel([("user_id", ASCENDING), ("concept_id", ASCENDING)], unique=True),
        IndexModel([("next_review", ASCENDING), ("is_active", ASCENDING)]),
    ],
    QUESTION_BANK: [
        IndexModel([("id", ASCENDING)], unique=True),
        IndexModel([("target_concepts", ASCENDING)]),
        IndexModel([("difficulty", ASCENDING), ("is_active", ASCENDING)]),
        IndexModel([("created_date", DESCENDING)]),
    ],
    CONCEPT_GROUPS: [
        IndexModel([("id", ASCENDING)], unique=True),
        IndexModel([("member_concepts", ASCENDING)]),
    ],
    COURSE_CONCEPTS: [
        IndexModel([("course_id", ASCENDING), ("concept_id", ASCENDING)], unique=True),
        IndexModel([("course_id", ASCENDING), ("confidence", DESCENDING)]),
    ],
}

# Global connection pool (reused across requests)
_client: Optional[AsyncMongoClient] = None


# ---- Connection Management ----

def get_client() -> AsyncMongoClient:
    """
    Get the shared MongoDB client, creating it on first use.

    Returns:
        AsyncMongoClient with timezone-aware datetimes

    Raises:
        ValueError: If MONGO_URI is not set
    """
    global _client

    if _client is not None:
        return _client

    _client = AsyncMongoClient(
        get_mongo_uri(),
        tz_aware=True,
        maxPoolSize=10,  # Connection pool size
        minPoolSize=1,   # Keep at least 1 connection alive
        maxIdleTimeMS=60000  # Keep connections alive for 60 seconds
    )
    return _client


def get_database(db_name: Optional[str] = None) -> AsyncDatabase:
    """Get the practice database (MONGO_DB_NAME by default)."""
    return get_client()[db_name or DB_NAME]


async def close_client() -> None:
    """Close the shared client, if one was opened."""
    global _client

    if _client is not None:
        await _client.close()
        _client = None


async def ensure_indexes(db: Optional[AsyncDatabase] = None) -> dict[str, list[str]]:
    """
    Create the indexes used by the practice queries (idempotent).

    Returns:
        Mapping of collection name to created index names
    """
    if db is None:
        db = get_database()

    created = {}
    for collection_name, indexes in INDEXES.items():
        names = await db[collection_name].create_indexes(indexes)
        created[collection_name] = names
        logger.info("[MONGO] Ensured %d indexes on %s", len(names), collection_name)
    return created


class MongoRepository:
    """
    Base for the Mongo-backed stores.

    The database is resolved lazily so a store can be constructed before
    MONGO_URI is available (for example at import time in scripts).
    """

    collection_name = ""

    def __init__(self, db: Optional[AsyncDatabase] = None):
        self._db = db

    @property
    def collection(self) -> AsyncCollection:
        db = self._db if self._db is not None else get_database()
        return db[self.collection_name]

    async def _find_docs(
        self,
        query: dict,
        sort: Optional[list[tuple[str, int]]] = None,
        limit: Optional[int] = None
    ) -> list[dict]:
        cursor = self.collection.find(query)
        if sort:
            cursor = cursor.sort(list(sort))
        if limit:
            cursor = cursor.limit(limit)
        try:
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            raise StoreUnavailableError(f"Query on {self.collection_name} failed: {e}") from e
