"""Role documents."""

from dataclasses import dataclass, field
from typing import Any

from .base import Document, LocalizedText
from .mapping import Row, set_default_fields


@dataclass
class Role(Document):
    identifier: str = ""
    loc_name: LocalizedText = field(default_factory=dict)
    loc_descr: LocalizedText = field(default_factory=dict)


def role_from_row(row: Row) -> Role:
    role = Role(
        identifier=row.get_str("identifier", ""),
        loc_name=row.get_localized("loc_name"),
        loc_descr=row.get_localized("loc_descr"),
    )
    set_default_fields(role, row)
    return role


def role_payload(role: Role) -> dict[str, Any]:
    return {
        "identifier": role.identifier,
        "loc_name": dict(role.loc_name),
        "loc_descr": dict(role.loc_descr),
    }
