"""
Fuel-consumption repository.

Consumings belong to their author: listing and counting are scoped to the
owning principal. Images are dependent records in their own collection;
insert and update write the consuming and its image set in one
transaction, and delete removes the images with it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ..constants import (
    AUTHOR_FIELD,
    CONSUMING_IMAGES_COLLECTION,
    CONSUMINGS_COLLECTION,
    REG_DATE_FIELD,
)
from ..database.scoped_query import ScopedQuery, combine_filters
from ..documents.base import PrincipalId
from ..documents.consuming import (
    Consuming,
    Image,
    consuming_from_row,
    consuming_payload,
    image_from_row,
    image_payload,
)
from ..documents.mapping import Row, to_object_id
from ..exceptions import PersistenceError
from ..observability import get_logger
from .access import DocumentAccess
from .base import Repository
from .scopes import ConsumingScope

logger = get_logger(__name__)


class ConsumingRepository(Repository[Consuming]):
    entity_name = CONSUMINGS_COLLECTION

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase):
        self._db = db
        self._access = DocumentAccess(client, db, CONSUMINGS_COLLECTION, consuming_from_row)

    @property
    def images(self):
        return self._db[CONSUMING_IMAGES_COLLECTION]

    def _query(self, owner: PrincipalId | None, scope: ConsumingScope | None) -> ScopedQuery:
        return self._access.query(
            combine_filters(
                {AUTHOR_FIELD: owner} if owner is not None else None,
                scope.to_filter() if scope else None,
            )
        )

    def list(
        self,
        limit: int,
        offset: int,
        owner: PrincipalId,
        scope: ConsumingScope | None = None,
    ) -> AsyncIterator[Consuming]:
        return self._access.stream(limit, offset, self._query(owner, scope))

    async def count(self, owner: PrincipalId, scope: ConsumingScope | None = None) -> int:
        return await self._access.count(self._query(owner, scope))

    async def get_latest(
        self, vehicle_id: str, owner: PrincipalId, limit: int = 2
    ) -> list[Consuming]:
        """The owner's most recent records for a vehicle, newest first."""
        query = ScopedQuery(
            base=CONSUMINGS_COLLECTION,
            filter={AUTHOR_FIELD: owner, "vehicle_id": vehicle_id},
            order=((REG_DATE_FIELD, DESCENDING),),
        )
        return await self._access.collect(limit, 0, query)

    async def find_by_id(self, id: str, owner: PrincipalId | None = None) -> Consuming | None:
        """The consuming with its images; ``owner`` restricts to one author."""
        consuming = await self._access.find_one(id, self._query(owner, None))
        if consuming is not None:
            consuming.images = await self.get_images(id)
        return consuming

    async def get_images(self, id: str) -> list[Image]:
        consuming_id = to_object_id(id)
        if consuming_id is None:
            return []
        try:
            cursor = self.images.find({"consuming_id": consuming_id}).sort("_id", ASCENDING)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.exception(f"Failed to load images of consuming {id}")
            raise PersistenceError(
                "Failed to load images",
                operation="get_images",
                collection=CONSUMING_IMAGES_COLLECTION,
                context={"document_id": id},
            ) from e
        return [image_from_row(Row(doc)) for doc in docs]

    async def insert(self, document: Consuming, principal: PrincipalId) -> str:
        images = list(document.images)

        async def insert_images(session, consuming_id):
            if images:
                await self.images.insert_many(
                    [image_payload(image, consuming_id) for image in images], session=session
                )

        return await self._access.insert(
            consuming_payload(document), principal, cascade=insert_images
        )

    async def update(self, id: str, document: Consuming, principal: PrincipalId) -> int:
        """Update the record and replace its image set with ``document.images``."""
        images = list(document.images)

        async def replace_images(session, consuming_id):
            await self.images.delete_many({"consuming_id": consuming_id}, session=session)
            if images:
                await self.images.insert_many(
                    [image_payload(image, consuming_id) for image in images], session=session
                )

        return await self._access.update(
            id, consuming_payload(document), principal, cascade=replace_images
        )

    async def delete(self, id: str) -> int:
        async def delete_images(session, consuming_id):
            await self.images.delete_many({"consuming_id": consuming_id}, session=session)

        return await self._access.delete(id, cascade=delete_images)
