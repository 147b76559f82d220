"""Department repository. Departments are listed by rank."""

from __future__ import annotations

from collections.abc import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..constants import DEPARTMENTS_COLLECTION
from ..database.scoped_query import reference_filter
from ..documents.base import PrincipalId
from ..documents.department import Department, department_from_row, department_payload
from .access import DocumentAccess
from .base import Repository


class DepartmentRepository(Repository[Department]):
    entity_name = DEPARTMENTS_COLLECTION

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase):
        self._access = DocumentAccess(
            client,
            db,
            DEPARTMENTS_COLLECTION,
            department_from_row,
            order=(("rank", ASCENDING),),
        )

    def list(self, limit: int = 0, offset: int = 0) -> AsyncIterator[Department]:
        return self._access.stream(limit, offset, self._access.query())

    async def count(self) -> int:
        return await self._access.count(self._access.query())

    def list_of_organization(
        self, organization_id: str, limit: int = 0, offset: int = 0
    ) -> AsyncIterator[Department]:
        """Departments of one organization, in rank order; a malformed id yields nothing."""
        query = self._access.query(reference_filter("organization_id", organization_id))
        return self._access.stream(limit, offset, query)

    async def find_by_id(self, id: str) -> Department | None:
        return await self._access.find_one(id, self._access.query())

    async def insert(self, document: Department, principal: PrincipalId) -> str:
        return await self._access.insert(department_payload(document), principal)

    async def update(self, id: str, document: Department, principal: PrincipalId) -> int:
        return await self._access.update(id, department_payload(document), principal)

    async def delete(self, id: str) -> int:
        return await self._access.delete(id)
