"""
RLS-governed document access.

``GatedAccess`` combines ``DocumentAccess`` with the entity's ``AccessGate``:

- reads join the readers collection, so a principal sees only documents it
  holds a record for, and ``find`` refreshes that record's reading time;
- ``insert`` writes the document and the creator's full grant in one
  transaction;
- ``update`` and ``delete`` check the acting principal's capability inside
  their transaction, and ``delete`` removes every record of the document.

Absent documents are not an access question: ``update`` and ``delete`` of
an unknown id return 0 without consulting the gate.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping
from typing import Any, Generic, TypeVar

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..constants import readers_collection
from ..documents.base import Document, PrincipalId
from ..documents.mapping import Row, to_object_id
from ..documents.rls import Capability, RLSRecord
from ..observability import get_logger
from .access import DocumentAccess
from .rls import AccessGate

logger = get_logger(__name__)

T = TypeVar("T", bound=Document)


class GatedAccess(Generic[T]):
    def __init__(
        self,
        client: AsyncIOMotorClient,
        db: AsyncIOMotorDatabase,
        collection_name: str,
        mapper: Callable[[Row], T],
    ):
        self.documents: DocumentAccess[T] = DocumentAccess(
            client,
            db,
            collection_name,
            mapper,
            access_collection=readers_collection(collection_name),
        )
        self.gate = AccessGate(db, collection_name)

    def stream(
        self, limit: int, offset: int, reader: PrincipalId, filter: Mapping[str, Any] | None
    ) -> AsyncIterator[T]:
        return self.documents.stream(limit, offset, self.documents.query(filter, reader))

    async def count(self, reader: PrincipalId, filter: Mapping[str, Any] | None) -> int:
        return await self.documents.count(self.documents.query(filter, reader))

    async def find(self, id: str, reader: PrincipalId) -> T | None:
        document = await self.documents.find_one(id, self.documents.query(reader=reader))
        if document is not None:
            await self.gate.touch(to_object_id(id), reader)
        return document

    async def insert(self, payload: Mapping[str, Any], principal: PrincipalId) -> str:
        creator = RLSRecord(reader=principal, can_edit=True, can_delete=True)

        async def grant_creator(session, entity_id):
            await self.gate.grant(entity_id, creator, session=session)

        return await self.documents.insert(payload, principal, cascade=grant_creator)

    async def update(self, id: str, payload: Mapping[str, Any], principal: PrincipalId) -> int:
        if not await self.documents.exists(id):
            return 0

        async def require_edit(session, entity_id):
            await self.gate.require(entity_id, principal, Capability.EDIT, session=session)

        return await self.documents.update(id, payload, principal, check=require_edit)

    async def delete(self, id: str, principal: PrincipalId) -> int:
        if not await self.documents.exists(id):
            return 0

        async def require_delete(session, entity_id):
            await self.gate.require(entity_id, principal, Capability.DELETE, session=session)

        async def purge_readers(session, entity_id):
            purged = await self.gate.purge(entity_id, session=session)
            logger.debug(
                f"Purged {purged} access records of {self.documents.collection_name}/{entity_id}"
            )

        return await self.documents.delete(
            id, check=require_delete, cascade=purge_readers, principal=principal
        )

    async def readers(self, id: str) -> list[RLSRecord]:
        entity_id = to_object_id(id)
        if entity_id is None:
            return []
        return await self.gate.readers_of(entity_id)

    async def grant(
        self, id: str, reader: PrincipalId, can_edit: bool, can_delete: bool
    ) -> bool:
        """Store a grant on an existing document; False when the document is absent."""
        entity_id = to_object_id(id)
        if entity_id is None or not await self.documents.exists(id):
            return False
        await self.gate.grant(
            entity_id, RLSRecord(reader=reader, can_edit=can_edit, can_delete=can_delete)
        )
        return True

    async def revoke(self, id: str, reader: PrincipalId) -> int:
        entity_id = to_object_id(id)
        if entity_id is None:
            return 0
        return await self.gate.revoke(entity_id, reader)
