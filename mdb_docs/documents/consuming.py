"""
Fuel-consumption records and their attached images.

Images are dependent sub-records stored in their own collection and always
written in the same transaction as the record they belong to.
"""

from dataclasses import dataclass, field
from typing import Any

from .base import Document
from .mapping import Row, set_default_fields


@dataclass
class Image:
    file_type: str = "image/jpeg"
    content: bytes = b""
    description: str = ""
    consuming_id: str | None = None
    id: str | None = None


@dataclass
class Consuming(Document):
    vehicle_id: str = ""
    total_km: float = 0.0
    last_liters: float = 0.0
    last_cost: float = 0.0
    add_info: dict[str, Any] = field(default_factory=dict)
    images: list[Image] = field(default_factory=list)


def consuming_from_row(row: Row) -> Consuming:
    consuming = Consuming(
        vehicle_id=row.get_str("vehicle_id", ""),
        total_km=row.get_float("total_km", 0.0),
        last_liters=row.get_float("last_liters", 0.0),
        last_cost=row.get_float("last_cost", 0.0),
        add_info=dict(row.raw("add_info", {})),
    )
    set_default_fields(consuming, row)
    return consuming


def consuming_payload(consuming: Consuming) -> dict[str, Any]:
    return {
        "vehicle_id": consuming.vehicle_id,
        "total_km": consuming.total_km,
        "last_liters": consuming.last_liters,
        "last_cost": consuming.last_cost,
        "add_info": dict(consuming.add_info),
    }


def image_from_row(row: Row) -> Image:
    return Image(
        id=row.get_id(),
        consuming_id=row.get_id("consuming_id"),
        file_type=row.get_str("file_type", "image/jpeg"),
        content=bytes(row.raw("content", b"")),
        description=row.get_str("description", ""),
    )


def image_payload(image: Image, consuming_id: Any) -> dict[str, Any]:
    return {
        "consuming_id": consuming_id,
        "file_type": image.file_type,
        "content": image.content,
        "description": image.description,
    }
