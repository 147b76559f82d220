"""
Index bootstrap.

The RLS companion collections need a unique (entity_id, reader) index: it
is what guarantees at most one capability record per principal per
document. Listing indexes keep scoped reads and ordering cheap.
"""

import logging

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel
from pymongo.errors import PyMongoError

from ..constants import (
    CONSUMING_IMAGES_COLLECTION,
    CONSUMINGS_COLLECTION,
    DEPARTMENTS_COLLECTION,
    LABELS_COLLECTION,
    RLS_COLLECTIONS,
    readers_collection,
)
from ..exceptions import PersistenceError

logger = logging.getLogger(__name__)


def reader_indexes() -> list[IndexModel]:
    return [
        IndexModel(
            [("entity_id", ASCENDING), ("reader", ASCENDING)],
            name="entity_reader_unique",
            unique=True,
        ),
        IndexModel([("reader", ASCENDING)], name="reader_idx"),
    ]


ENTITY_INDEXES: dict[str, list[IndexModel]] = {
    DEPARTMENTS_COLLECTION: [IndexModel([("rank", ASCENDING)], name="rank_idx")],
    LABELS_COLLECTION: [IndexModel([("category", ASCENDING)], name="category_idx")],
    CONSUMINGS_COLLECTION: [IndexModel([("author", ASCENDING)], name="author_idx")],
    CONSUMING_IMAGES_COLLECTION: [
        IndexModel([("consuming_id", ASCENDING)], name="consuming_idx")
    ],
}


async def ensure_indexes(db: AsyncIOMotorDatabase) -> list[str]:
    """
    Create the indexes the repositories rely on. Idempotent.

    Returns:
        Names of the created (or already present) indexes

    Raises:
        PersistenceError: If index creation fails
    """
    plan: dict[str, list[IndexModel]] = dict(ENTITY_INDEXES)
    for entity in RLS_COLLECTIONS:
        plan[readers_collection(entity)] = reader_indexes()

    created: list[str] = []
    for collection_name, models in plan.items():
        try:
            created.extend(await db[collection_name].create_indexes(models))
        except PyMongoError as e:
            logger.exception(f"Failed to create indexes on '{collection_name}'")
            raise PersistenceError(
                "Failed to create indexes",
                operation="create_indexes",
                collection=collection_name,
            ) from e
        logger.debug(f"Indexes ensured on '{collection_name}'")
    return created
