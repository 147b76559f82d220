"""Department documents. Departments list in ``rank`` order."""

from dataclasses import dataclass, field
from typing import Any

from .base import Document, LocalizedText
from .mapping import Row, reference_id, set_default_fields


@dataclass
class Department(Document):
    identifier: str = ""
    type_id: str | None = None
    organization_id: str | None = None
    lead_department_id: str | None = None
    rank: int = 0
    loc_name: LocalizedText = field(default_factory=dict)


def department_from_row(row: Row) -> Department:
    department = Department(
        identifier=row.get_str("identifier", ""),
        type_id=row.get_id("type_id"),
        organization_id=row.get_id("organization_id"),
        lead_department_id=row.get_id("lead_department_id"),
        rank=row.get_int("rank", 0),
        loc_name=row.get_localized("loc_name"),
    )
    set_default_fields(department, row)
    return department


def department_payload(department: Department) -> dict[str, Any]:
    return {
        "identifier": department.identifier,
        "type_id": reference_id("type_id", department.type_id),
        "organization_id": reference_id("organization_id", department.organization_id),
        "lead_department_id": reference_id("lead_department_id", department.lead_department_id),
        "rank": department.rank,
        "loc_name": dict(department.loc_name),
    }
