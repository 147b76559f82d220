"""
Project repository.

Projects are RLS-governed: every read takes the reading principal and only
sees projects that principal holds a record for. The creator of a project
receives a full grant in the same transaction that inserts it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..constants import PROJECTS_COLLECTION
from ..documents.base import PrincipalId
from ..documents.project import Project, project_from_row, project_payload
from ..documents.rls import RLSRecord
from .base import RLSRepository
from .gated import GatedAccess
from .scopes import ProjectScope


class ProjectRepository(RLSRepository[Project]):
    entity_name = PROJECTS_COLLECTION

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase):
        self._gated = GatedAccess(client, db, PROJECTS_COLLECTION, project_from_row)

    def list(
        self,
        limit: int,
        offset: int,
        reader: PrincipalId,
        scope: ProjectScope | None = None,
    ) -> AsyncIterator[Project]:
        return self._gated.stream(limit, offset, reader, scope.to_filter() if scope else None)

    async def count(self, reader: PrincipalId, scope: ProjectScope | None = None) -> int:
        return await self._gated.count(reader, scope.to_filter() if scope else None)

    def search(
        self, keyword: str, reader: PrincipalId, limit: int = 0, offset: int = 0
    ) -> AsyncIterator[Project]:
        return self.list(limit, offset, reader, ProjectScope(keyword=keyword))

    async def find_by_id(self, id: str, reader: PrincipalId) -> Project | None:
        return await self._gated.find(id, reader)

    async def insert(self, document: Project, principal: PrincipalId) -> str:
        return await self._gated.insert(project_payload(document), principal)

    async def update(self, id: str, document: Project, principal: PrincipalId) -> int:
        return await self._gated.update(id, project_payload(document), principal)

    async def delete(self, id: str, principal: PrincipalId) -> int:
        return await self._gated.delete(id, principal)

    async def get_all_readers(self, document_id: str) -> list[RLSRecord]:
        return await self._gated.readers(document_id)

    async def grant_access(
        self,
        document_id: str,
        reader: PrincipalId,
        can_edit: bool = False,
        can_delete: bool = False,
    ) -> bool:
        return await self._gated.grant(document_id, reader, can_edit, can_delete)

    async def revoke_access(self, document_id: str, reader: PrincipalId) -> int:
        return await self._gated.revoke(document_id, reader)
