"""
Base document model.

Every persisted business record carries an opaque id and the four audit
fields. Subclass ``Document`` as a dataclass for each entity; give every
entity field a default so audit fields can stay first.

Example:
    @dataclass
    class Role(Document):
        identifier: str = ""
        loc_name: dict[str, str] = field(default_factory=dict)
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from enum import Enum

PrincipalId = int
"""Stable numeric id of an authenticated actor, resolved upstream."""


class LanguageCode(str, Enum):
    """Language codes used as keys of localized text fields."""

    ENG = "ENG"
    RUS = "RUS"
    KAZ = "KAZ"
    POR = "POR"
    SPA = "SPA"
    DEU = "DEU"


LocalizedText = dict[str, str]
"""Mapping from language code to text; keys unique, order irrelevant."""


@dataclass
class Document:
    """
    Base class for persisted documents.

    ``id`` and the audit fields are assigned by the repository layer and are
    ignored when a caller hands a document to ``insert`` or ``update``.
    """

    id: str | None = None
    author: PrincipalId | None = None
    reg_date: datetime | None = None
    last_mod_user: PrincipalId | None = None
    last_mod_date: datetime | None = field(default=None)


def utc_now() -> datetime:
    """
    Current instant as an aware UTC datetime, truncated to milliseconds so it
    survives a round trip through BSON unchanged.
    """
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=(now.microsecond // 1000) * 1000)


def to_storage_time(value: datetime | date | None) -> datetime | None:
    """
    Convert an instant to the naive UTC datetime the store persists.

    Naive inputs are taken to already be UTC; plain dates become midnight.
    """
    if value is None:
        return None
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage_time(value: datetime | None) -> datetime | None:
    """Reconstitute a stored naive UTC datetime as an aware UTC datetime."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
