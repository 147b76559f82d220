"""
Repository contract.

Every entity repository implements the same six operations. ``list``
returns a lazy, one-shot async stream; the other operations are coroutines.
Trailing ``*scope`` arguments (a principal, a filter object) narrow the
documents an operation sees and must be passed identically to ``list`` and
``count`` for the two to agree.

Example:
    class RoleRepository(Repository[Role]):
        ...

    async for role in roles.list(10, 0):
        ...
    total = await roles.count()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any, Generic, TypeVar

from ..documents.base import Document, PrincipalId
from ..documents.rls import RLSRecord
from ..exceptions import InvalidArgumentError

T = TypeVar("T", bound=Document)


def validate_window(limit: int, offset: int) -> None:
    """
    Check a (limit, offset) pair.

    Raises:
        InvalidArgumentError: If either value is negative
    """
    if limit < 0:
        raise InvalidArgumentError(f"limit must be >= 0, got {limit}", argument="limit", value=limit)
    if offset < 0:
        raise InvalidArgumentError(
            f"offset must be >= 0, got {offset}", argument="offset", value=offset
        )


class Repository(ABC, Generic[T]):
    """Six-operation document access contract."""

    entity_name: str = ""

    @abstractmethod
    def list(self, limit: int = 0, offset: int = 0, *scope: Any) -> AsyncIterator[T]:
        """
        Stream documents in the entity's stable order.

        Args:
            limit: Window size; 0 reads everything and ignores ``offset``
            offset: Documents to skip; must be >= 0
            *scope: Entity-specific scope arguments

        Raises:
            InvalidArgumentError: Immediately, for a negative limit or offset
        """

    @abstractmethod
    async def count(self, *scope: Any) -> int:
        """Number of documents ``list`` would stream for the same scope."""

    @abstractmethod
    async def find_by_id(self, id: str, *scope: Any) -> T | None:
        """Document with this id, or None when absent or out of scope."""

    @abstractmethod
    async def insert(self, document: T, principal: PrincipalId) -> str:
        """
        Persist a new document stamped with the acting principal.

        Returns:
            The new document's id
        """

    @abstractmethod
    async def update(self, id: str, document: T, principal: PrincipalId) -> int:
        """
        Replace the document's payload fields.

        Returns:
            1 if the document was updated, 0 if no document has this id
        """

    @abstractmethod
    async def delete(self, id: str, *scope: Any) -> int:
        """
        Delete a document. Deleting an absent id is not an error.

        Returns:
            Number of deleted documents (0 or 1)
        """


class RLSRepository(Repository[T]):
    """Repository whose documents are governed by row-level security."""

    @abstractmethod
    async def get_all_readers(self, document_id: str) -> list[RLSRecord]:
        """All RLS records of a document."""

    @abstractmethod
    async def grant_access(
        self,
        document_id: str,
        reader: PrincipalId,
        can_edit: bool = False,
        can_delete: bool = False,
    ) -> bool:
        """
        Create or replace the reader's capability record.

        Returns:
            False if the document does not exist
        """

    @abstractmethod
    async def revoke_access(self, document_id: str, reader: PrincipalId) -> int:
        """Remove the reader's capability record."""
