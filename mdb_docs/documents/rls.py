"""
Row-level security record.

One record binds a document to a reader principal with its capability
flags. Reading is implied by the record's existence; editing and deleting
need their flag set.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .base import PrincipalId
from .mapping import Row


class Capability(str, Enum):
    READ = "read"
    EDIT = "edit"
    DELETE = "delete"


@dataclass(frozen=True)
class RLSRecord:
    """Capabilities of one principal on one document."""

    reader: PrincipalId
    can_edit: bool = False
    can_delete: bool = False
    reading_time: datetime | None = None
    document_id: str | None = None

    def allows(self, capability: Capability) -> bool:
        if capability is Capability.EDIT:
            return self.can_edit
        if capability is Capability.DELETE:
            return self.can_delete
        return True


def rls_from_row(row: Row) -> RLSRecord:
    return RLSRecord(
        reader=row.get_int("reader"),
        can_edit=row.get_bool("can_edit"),
        can_delete=row.get_bool("can_delete"),
        reading_time=row.get_datetime("reading_time"),
        document_id=row.get_id("entity_id"),
    )
