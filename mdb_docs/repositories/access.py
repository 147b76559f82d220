"""
Shared document access.

``DocumentAccess`` holds the algorithm every entity repository needs:
windowed listing and counting through one ``ScopedQuery``, lookup by id,
and audit-stamped writes inside a transaction. Entity repositories own an
instance and supply their collection, mapping function and order; they do
not inherit from it.

Write hooks receive the transaction's session and the document's ObjectId:
``check`` runs first (an access check may abort the write) and ``cascade``
runs after the main write (grants, images, reader cleanup).
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from bson import ObjectId
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorClientSession,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from ..constants import REG_DATE_FIELD
from ..database.scoped_query import ScopedQuery
from ..database.transaction import transaction
from ..documents.audit import stamp_for_insert, stamp_for_update
from ..documents.base import Document, PrincipalId, utc_now
from ..documents.mapping import Row, to_object_id
from ..exceptions import DocsEngineError, PersistenceError
from ..observability import (
    document_context,
    get_logger,
    log_operation,
    record_operation,
    timed_operation,
)
from .base import validate_window

contextual_logger = get_logger(__name__)

T = TypeVar("T", bound=Document)

WriteHook = Callable[[AsyncIOMotorClientSession, ObjectId], Awaitable[Any]]


class DocumentAccess(Generic[T]):
    """
    Reads and writes of one entity collection.

    Args:
        client: Motor client; transactions start sessions on it
        db: Database holding the collection
        collection_name: Entity collection
        mapper: Pure function from a stored row to the entity
        order: Stable listing order
        access_collection: RLS companion collection, None for unrestricted entities
    """

    def __init__(
        self,
        client: AsyncIOMotorClient,
        db: AsyncIOMotorDatabase,
        collection_name: str,
        mapper: Callable[[Row], T],
        order: tuple[tuple[str, int], ...] = ((REG_DATE_FIELD, ASCENDING),),
        access_collection: str | None = None,
    ):
        self._client = client
        self._db = db
        self._collection_name = collection_name
        self._mapper = mapper
        self._order = order
        self._access_collection = access_collection

    @property
    def collection_name(self) -> str:
        return self._collection_name

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self._db[self._collection_name]

    def query(self, filter: Mapping[str, Any] | None = None, reader: Any = None) -> ScopedQuery:
        """
        Scoped query over this collection.

        For RLS-governed entities ``reader`` is mandatory: every read is
        joined with the access collection.
        """
        return ScopedQuery(
            base=self._collection_name,
            filter=dict(filter or {}),
            order=self._order,
            access=self._access_collection,
            reader=reader,
        )

    def _failure(self, operation: str, error: PyMongoError, **context: Any) -> PersistenceError:
        contextual_logger.exception(
            f"Database operation failed in {operation}",
            extra={"operation": operation, "collection": self._collection_name, **context},
        )
        return PersistenceError(
            f"Failed to {operation} documents",
            operation=operation,
            collection=self._collection_name,
            context=context,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def stream(self, limit: int, offset: int, query: ScopedQuery) -> AsyncIterator[T]:
        """
        Stream one window of ``query``.

        Arguments are validated on call, before any I/O; the returned
        iterator queries the store when first advanced.
        """
        validate_window(limit, offset)
        return self._iterate(query.list_pipeline(limit, offset))

    async def _iterate(self, pipeline: list[dict[str, Any]]) -> AsyncIterator[T]:
        start_time = time.perf_counter()
        success = True
        try:
            async for doc in self.collection.aggregate(pipeline):
                yield self._mapper(Row(doc))
        except PyMongoError as e:
            success = False
            raise self._failure("list", e) from e
        finally:
            record_operation(
                "repository.list",
                (time.perf_counter() - start_time) * 1000,
                success,
                collection=self._collection_name,
            )

    async def collect(self, limit: int, offset: int, query: ScopedQuery) -> list[T]:
        return [doc async for doc in self.stream(limit, offset, query)]

    async def count(self, query: ScopedQuery) -> int:
        async with timed_operation("repository.count", collection=self._collection_name):
            try:
                cursor = self.collection.aggregate(query.count_pipeline())
                result = await cursor.to_list(length=1)
            except PyMongoError as e:
                raise self._failure("count", e) from e
        return int(result[0]["count"]) if result else 0

    async def find_one(self, id: str, query: ScopedQuery) -> T | None:
        """Document ``id`` if it exists within ``query``'s scope."""
        object_id = to_object_id(id)
        if object_id is None:
            return None

        async with timed_operation("repository.find_by_id", collection=self._collection_name):
            try:
                cursor = self.collection.aggregate(query.by_id_pipeline(object_id))
                docs = await cursor.to_list(length=1)
            except PyMongoError as e:
                raise self._failure("find_by_id", e, document_id=id) from e
        return self._mapper(Row(docs[0])) if docs else None

    async def exists(self, id: str) -> bool:
        """Whether a document with this id exists, ignoring any scope."""
        object_id = to_object_id(id)
        if object_id is None:
            return False
        try:
            found = await self.collection.count_documents({"_id": object_id}, limit=1)
        except PyMongoError as e:
            raise self._failure("exists", e, document_id=id) from e
        return found > 0

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _write(
        self, operation: str, principal: PrincipalId | None = None, document_id: str | None = None
    ) -> AsyncIterator[dict[str, Any]]:
        """
        Run one write inside its document context and record how it ended.
        The caller adds outcome fields to the yielded dict.
        """
        name = f"{self._collection_name}.{operation}"
        outcome: dict[str, Any] = {}
        start_time = time.perf_counter()
        with document_context(self._collection_name, principal=principal, document_id=document_id):
            try:
                async with timed_operation(
                    f"repository.{operation}", collection=self._collection_name
                ):
                    yield outcome
            except DocsEngineError as e:
                log_operation(
                    contextual_logger,
                    name,
                    level=logging.WARNING,
                    success=False,
                    duration_ms=(time.perf_counter() - start_time) * 1000,
                    error=type(e).__name__,
                )
                raise
            log_operation(
                contextual_logger,
                name,
                level=logging.DEBUG,
                duration_ms=(time.perf_counter() - start_time) * 1000,
                **outcome,
            )

    async def insert(
        self,
        payload: Mapping[str, Any],
        principal: PrincipalId,
        cascade: WriteHook | None = None,
    ) -> str:
        """
        Insert a stamped document and its dependents atomically.

        Returns:
            The new document's id

        Raises:
            PersistenceError: If any part of the write fails (nothing persists)
        """
        body = stamp_for_insert(payload, principal, utc_now())

        async with self._write("insert", principal) as outcome:
            async with transaction(
                self._client, "insert", self._collection_name, principal=principal
            ) as session:
                result = await self.collection.insert_one(body, session=session)
                if cascade is not None:
                    await cascade(session, result.inserted_id)
            outcome["document_id"] = str(result.inserted_id)

        return outcome["document_id"]

    async def update(
        self,
        id: str,
        payload: Mapping[str, Any],
        principal: PrincipalId,
        check: WriteHook | None = None,
        cascade: WriteHook | None = None,
    ) -> int:
        """
        Set the payload fields and refresh the modification stamp.

        Returns:
            1 if a document matched, 0 otherwise
        """
        object_id = to_object_id(id)
        if object_id is None:
            return 0
        fields = stamp_for_update(payload, principal, utc_now())

        async with self._write("update", principal, id) as outcome:
            async with transaction(
                self._client, "update", self._collection_name, document_id=id, principal=principal
            ) as session:
                if check is not None:
                    await check(session, object_id)
                result = await self.collection.update_one(
                    {"_id": object_id}, {"$set": fields}, session=session
                )
                if result.matched_count and cascade is not None:
                    await cascade(session, object_id)
            outcome["affected"] = 1 if result.matched_count else 0

        return outcome["affected"]

    async def delete(
        self,
        id: str,
        check: WriteHook | None = None,
        cascade: WriteHook | None = None,
        principal: PrincipalId | None = None,
    ) -> int:
        """
        Delete a document and its dependents.

        Returns:
            Number of deleted documents; 0 for an absent id
        """
        object_id = to_object_id(id)
        if object_id is None:
            return 0

        async with self._write("delete", principal, id) as outcome:
            async with transaction(
                self._client, "delete", self._collection_name, document_id=id
            ) as session:
                if check is not None:
                    await check(session, object_id)
                result = await self.collection.delete_one({"_id": object_id}, session=session)
                if cascade is not None:
                    await cascade(session, object_id)
            outcome["affected"] = result.deleted_count

        return outcome["affected"]
