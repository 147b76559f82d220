"""
Row-level security gate.

``AccessGate`` reads and stores the RLS records of one entity collection.
Mutating operations call ``require`` inside their transaction before they
write; scoped reads never call it, they join the readers collection instead
and simply do not see documents without a record.

The gate interprets capability flags and never changes them. Changing
flags is ``grant``/``revoke``, which repositories expose as storage
operations for an external grant-management caller.
"""

import logging
from typing import Any

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from ..constants import readers_collection
from ..documents.base import PrincipalId, to_storage_time, utc_now
from ..documents.mapping import Row
from ..documents.rls import Capability, RLSRecord, rls_from_row
from ..exceptions import DocumentModificationAccessError, PersistenceError

logger = logging.getLogger(__name__)


class AccessGate:
    """RLS records of documents in ``entity_collection``."""

    def __init__(self, db: AsyncIOMotorDatabase, entity_collection: str):
        self._db = db
        self._entity_collection = entity_collection
        self.collection_name = readers_collection(entity_collection)

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._db[self.collection_name]

    def _persistence_error(self, operation: str, **context: Any) -> PersistenceError:
        logger.exception(
            f"RLS {operation} failed on '{self.collection_name}'",
            extra={"operation": operation, "collection": self.collection_name, **context},
        )
        return PersistenceError(
            f"Failed to {operation} access records",
            operation=operation,
            collection=self.collection_name,
            context=context,
        )

    async def resolve(
        self,
        entity_id: ObjectId,
        reader: PrincipalId,
        session: AsyncIOMotorClientSession | None = None,
    ) -> RLSRecord | None:
        """The reader's record for a document, or None."""
        try:
            doc = await self.collection.find_one(
                {"entity_id": entity_id, "reader": reader}, session=session
            )
        except PyMongoError as e:
            raise self._persistence_error("resolve", document_id=str(entity_id)) from e
        return rls_from_row(Row(doc)) if doc else None

    async def require(
        self,
        entity_id: ObjectId,
        reader: PrincipalId,
        capability: Capability,
        session: AsyncIOMotorClientSession | None = None,
    ) -> RLSRecord:
        """
        Resolve the reader's record and check one capability.

        Raises:
            DocumentModificationAccessError: If there is no record or the
                capability flag is false
        """
        record = await self.resolve(entity_id, reader, session=session)
        if record is None or not record.allows(capability):
            logger.info(
                f"Denied {capability.value} on {self._entity_collection}/{entity_id} "
                f"for principal {reader}"
            )
            raise DocumentModificationAccessError(
                f"Principal {reader} may not {capability.value} this document",
                document_id=str(entity_id),
                principal=reader,
                capability=capability.value,
            )
        return record

    async def touch(self, entity_id: ObjectId, reader: PrincipalId) -> bool:
        """
        Refresh the reader's last-read time.

        Best-effort: a store failure is logged and reported as False, never
        raised.
        """
        try:
            result = await self.collection.update_one(
                {"entity_id": entity_id, "reader": reader},
                {"$set": {"reading_time": to_storage_time(utc_now())}},
            )
        except PyMongoError as e:
            logger.warning(
                f"Could not refresh reading time on {self._entity_collection}/{entity_id}: {e}"
            )
            return False
        return result.modified_count > 0

    async def readers_of(self, entity_id: ObjectId) -> list[RLSRecord]:
        try:
            cursor = self.collection.find({"entity_id": entity_id}).sort("reader", ASCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise self._persistence_error("list", document_id=str(entity_id)) from e
        return [rls_from_row(Row(doc)) for doc in docs]

    async def grant(
        self,
        entity_id: ObjectId,
        record: RLSRecord,
        session: AsyncIOMotorClientSession | None = None,
    ) -> None:
        """Create or replace the record for ``record.reader``; keeps its reading time."""
        try:
            await self.collection.update_one(
                {"entity_id": entity_id, "reader": record.reader},
                {
                    "$set": {"can_edit": record.can_edit, "can_delete": record.can_delete},
                    "$setOnInsert": {
                        "reading_time": to_storage_time(record.reading_time),
                    },
                },
                upsert=True,
                session=session,
            )
        except PyMongoError as e:
            raise self._persistence_error(
                "grant", document_id=str(entity_id), reader=record.reader
            ) from e

    async def revoke(self, entity_id: ObjectId, reader: PrincipalId) -> int:
        try:
            result = await self.collection.delete_one({"entity_id": entity_id, "reader": reader})
        except PyMongoError as e:
            raise self._persistence_error("revoke", document_id=str(entity_id), reader=reader) from e
        return result.deleted_count

    async def purge(
        self, entity_id: ObjectId, session: AsyncIOMotorClientSession | None = None
    ) -> int:
        """Delete every record of a document (cascade of a document delete)."""
        try:
            result = await self.collection.delete_many({"entity_id": entity_id}, session=session)
        except PyMongoError as e:
            raise self._persistence_error("purge", document_id=str(entity_id)) from e
        return result.deleted_count
