"""
Row accessor used by the per-entity mapping functions.

A ``Row`` wraps the raw BSON document returned by the driver and converts
columns to the types documents use. Missing and null columns map to the
given default instead of failing, so mapping functions stay total and free
of I/O.
"""

from collections.abc import Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar

from bson import ObjectId

from ..exceptions import InvalidArgumentError
from .base import Document, from_storage_time

E = TypeVar("E", bound=Enum)


def to_object_id(value: str | ObjectId | None) -> ObjectId | None:
    """
    Convert an opaque id string to an ObjectId.

    Returns None when the value is not a valid ObjectId, which callers treat
    as "matches nothing".
    """
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def reference_id(argument: str, value: str | ObjectId | None) -> ObjectId | None:
    """
    Stored form of a reference field.

    None stays None. A malformed id is rejected rather than stored as null.

    Raises:
        InvalidArgumentError: If ``value`` is not a valid ObjectId
    """
    if value is None:
        return None
    object_id = to_object_id(value)
    if object_id is None:
        raise InvalidArgumentError(
            f"{argument} '{value}' is not a valid document id", argument=argument, value=value
        )
    return object_id


class Row:
    """Typed, null-tolerant read access to one stored document."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any]):
        self._data = data

    def __contains__(self, name: str) -> bool:
        return self._data.get(name) is not None

    def raw(self, name: str, default: Any = None) -> Any:
        value = self._data.get(name)
        return default if value is None else value

    def get_id(self, name: str = "_id") -> str | None:
        value = self._data.get(name)
        return None if value is None else str(value)

    def get_str(self, name: str, default: str | None = None) -> str | None:
        value = self._data.get(name)
        return default if value is None else str(value)

    def get_int(self, name: str, default: int | None = None) -> int | None:
        value = self._data.get(name)
        return default if value is None else int(value)

    def get_float(self, name: str, default: float | None = None) -> float | None:
        value = self._data.get(name)
        return default if value is None else float(value)

    def get_bool(self, name: str, default: bool = False) -> bool:
        value = self._data.get(name)
        return default if value is None else bool(value)

    def get_datetime(self, name: str) -> datetime | None:
        """Stored naive UTC datetime as an aware UTC datetime."""
        return from_storage_time(self._data.get(name))

    def get_date(self, name: str) -> date | None:
        value = self._data.get(name)
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        return value

    def get_enum(self, name: str, enum_type: type[E], default: E) -> E:
        value = self._data.get(name)
        if value is None:
            return default
        try:
            return enum_type(value)
        except ValueError:
            return default

    def get_localized(self, name: str) -> dict[str, str]:
        """Localized text column; absent or empty maps to an empty mapping."""
        value = self._data.get(name)
        if not value:
            return {}
        return {str(code): str(text) for code, text in value.items()}

    def get_list(self, name: str) -> list[Any]:
        value = self._data.get(name)
        return list(value) if value else []


def set_default_fields(document: Document, row: Row) -> None:
    """Copy id and audit fields from a row onto a document."""
    document.id = row.get_id()
    document.author = row.get_int("author")
    document.reg_date = row.get_datetime("reg_date")
    document.last_mod_user = row.get_int("last_mod_user")
    document.last_mod_date = row.get_datetime("last_mod_date")
