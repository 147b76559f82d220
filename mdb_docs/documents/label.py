"""Label documents."""

from dataclasses import dataclass, field
from typing import Any

from .base import Document, LocalizedText
from .mapping import Row, reference_id, set_default_fields


@dataclass
class Label(Document):
    identifier: str = ""
    category: str | None = None
    parent: str | None = None
    color: str | None = None
    hidden: bool = False
    loc_name: LocalizedText = field(default_factory=dict)


def label_from_row(row: Row) -> Label:
    label = Label(
        identifier=row.get_str("identifier", ""),
        category=row.get_str("category"),
        parent=row.get_id("parent"),
        color=row.get_str("color"),
        hidden=row.get_bool("hidden"),
        loc_name=row.get_localized("loc_name"),
    )
    set_default_fields(label, row)
    return label


def label_payload(label: Label) -> dict[str, Any]:
    return {
        "identifier": label.identifier,
        "category": label.category,
        "parent": reference_id("parent", label.parent),
        "color": label.color,
        "hidden": label.hidden,
        "loc_name": dict(label.loc_name),
    }
