"""Task repository. Tasks are RLS-governed like projects."""

from __future__ import annotations

import dataclasses
from collections.abc import AsyncIterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..constants import TASKS_COLLECTION
from ..documents.base import PrincipalId
from ..documents.rls import RLSRecord
from ..documents.task import Task, task_from_row, task_payload
from .base import RLSRepository
from .gated import GatedAccess
from .scopes import TaskScope


class TaskRepository(RLSRepository[Task]):
    entity_name = TASKS_COLLECTION

    def __init__(self, client: AsyncIOMotorClient, db: AsyncIOMotorDatabase):
        self._gated = GatedAccess(client, db, TASKS_COLLECTION, task_from_row)

    def list(
        self,
        limit: int,
        offset: int,
        reader: PrincipalId,
        scope: TaskScope | None = None,
    ) -> AsyncIterator[Task]:
        return self._gated.stream(limit, offset, reader, scope.to_filter() if scope else None)

    async def count(self, reader: PrincipalId, scope: TaskScope | None = None) -> int:
        return await self._gated.count(reader, scope.to_filter() if scope else None)

    def list_of_project(
        self,
        project_id: str,
        reader: PrincipalId,
        limit: int = 0,
        offset: int = 0,
        scope: TaskScope | None = None,
    ) -> AsyncIterator[Task]:
        """Visible tasks of one project; a malformed project id yields nothing."""
        return self.list(limit, offset, reader, _of_project(project_id, scope))

    async def count_of_project(
        self, project_id: str, reader: PrincipalId, scope: TaskScope | None = None
    ) -> int:
        return await self.count(reader, _of_project(project_id, scope))

    async def find_by_id(self, id: str, reader: PrincipalId) -> Task | None:
        return await self._gated.find(id, reader)

    async def insert(self, document: Task, principal: PrincipalId) -> str:
        return await self._gated.insert(task_payload(document), principal)

    async def update(self, id: str, document: Task, principal: PrincipalId) -> int:
        return await self._gated.update(id, task_payload(document), principal)

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


def _of_project(project_id: str, scope: TaskScope | None) -> TaskScope:
    return dataclasses.replace(scope or TaskScope(), project_id=project_id)
