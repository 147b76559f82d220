"""Role repository. Roles are not RLS-governed; callers authorize upstream."""

from __future__ import annotations

from collections.abc import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from ..constants import ROLES_COLLECTION
from ..documents.base import PrincipalId
from ..documents.role import Role, role_from_row, role_payload
from .access import DocumentAccess
from .base import Repository


class RoleRepository(Repository[Role]):
    entity_name = ROLES_COLLECTION

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase):
        self._access = DocumentAccess(
            client, db, ROLES_COLLECTION, role_from_row, order=(("identifier", ASCENDING),)
        )

    def list(self, limit: int = 0, offset: int = 0) -> AsyncIterator[Role]:
        return self._access.stream(limit, offset, self._access.query())

    async def count(self) -> int:
        return await self._access.count(self._access.query())

    async def find_by_id(self, id: str) -> Role | None:
        return await self._access.find_one(id, self._access.query())

    async def find_by_identifier(self, identifier: str) -> Role | None:
        roles = await self._access.collect(1, 0, self._access.query({"identifier": identifier}))
        return roles[0] if roles else None

    async def insert(self, document: Role, principal: PrincipalId) -> str:
        return await self._access.insert(role_payload(document), principal)

    async def update(self, id: str, document: Role, principal: PrincipalId) -> int:
        return await self._access.update(id, role_payload(document), principal)

    async def delete(self, id: str) -> int:
        return await self._access.delete(id)
