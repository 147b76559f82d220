"""Label repository."""

from __future__ import annotations

from collections.abc import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..constants import LABELS_COLLECTION
from ..documents.base import PrincipalId
from ..documents.label import Label, label_from_row, label_payload
from .access import DocumentAccess
from .base import Repository
from .scopes import LabelScope


class LabelRepository(Repository[Label]):
    entity_name = LABELS_COLLECTION

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase):
        self._access = DocumentAccess(
            client, db, LABELS_COLLECTION, label_from_row, order=(("identifier", ASCENDING),)
        )

    def _query(self, scope: LabelScope | None):
        return self._access.query(scope.to_filter() if scope else None)

    def list(
        self, limit: int = 0, offset: int = 0, scope: LabelScope | None = None
    ) -> AsyncIterator[Label]:
        return self._access.stream(limit, offset, self._query(scope))

    async def count(self, scope: LabelScope | None = None) -> int:
        return await self._access.count(self._query(scope))

    def get_of_category(self, category: str) -> AsyncIterator[Label]:
        """All labels of one category."""
        return self.list(0, 0, LabelScope(category=category))

    async def find_by_id(self, id: str) -> Label | None:
        return await self._access.find_one(id, self._access.query())

    async def find_by_identifier(self, identifier: str) -> Label | None:
        labels = await self._access.collect(1, 0, self._access.query({"identifier": identifier}))
        return labels[0] if labels else None

    async def insert(self, document: Label, principal: PrincipalId) -> str:
        return await self._access.insert(label_payload(document), principal)

    async def update(self, id: str, document: Label, principal: PrincipalId) -> int:
        return await self._access.update(id, label_payload(document), principal)

    async def delete(self, id: str) -> int:
        return await self._access.delete(id)
