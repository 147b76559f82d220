"""
Scope objects.

A scope narrows ``list`` and ``count`` identically. Every field defaults to
None, which imposes no constraint; a None field never means "match null".
"""

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, TypeVar

from ..database.scoped_query import combine_filters, reference_filter
from ..documents.base import to_storage_time
from ..documents.project import ProjectStatus
from ..documents.task import TaskStatus
from ..exceptions import InvalidArgumentError

E = TypeVar("E", bound=Enum)


def parse_enum(argument: str, enum_type: type[E], value: Any) -> E | None:
    """
    Coerce a status-like value to ``enum_type``.

    Raises:
        InvalidArgumentError: For a value that is not a member
    """
    if value is None or isinstance(value, enum_type):
        return value
    try:
        return enum_type(str(value).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_type)
        raise InvalidArgumentError(
            f"Unknown {argument} '{value}' (expected one of: {allowed})",
            argument=argument,
            value=value,
        ) from None


def keyword_filter(keyword: str | None, *fields: str) -> dict[str, Any]:
    """Case-insensitive substring match of ``keyword`` on any of ``fields``."""
    if keyword is None or not keyword.strip():
        return {}
    pattern = {"$regex": re.escape(keyword.strip()), "$options": "i"}
    if len(fields) == 1:
        return {fields[0]: pattern}
    return {"$or": [{f: pattern} for f in fields]}


@dataclass(frozen=True)
class ProjectScope:
    status: Any = None
    keyword: str | None = None

    def to_filter(self) -> dict[str, Any]:
        status = parse_enum("status", ProjectStatus, self.status)
        return combine_filters(
            {"status": status.value} if status is not None else None,
            keyword_filter(self.keyword, "name"),
        )


@dataclass(frozen=True)
class TaskScope:
    """
    Task filter.

    ``start_date`` bounds the task's start date from below and ``end_date``
    bounds its target date from above. A malformed ``project_id`` matches
    no task.
    """

    status: Any = None
    priority: int | None = None
    assignee: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    keyword: str | None = None
    project_id: str | None = None

    def to_filter(self) -> dict[str, Any]:
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise InvalidArgumentError(
                f"start_date {self.start_date} is after end_date {self.end_date}",
                argument="start_date",
                value=str(self.start_date),
            )
        status = parse_enum("status", TaskStatus, self.status)
        return combine_filters(
            {"status": status.value} if status is not None else None,
            {"priority": self.priority} if self.priority is not None else None,
            {"assignee": self.assignee} if self.assignee is not None else None,
            {"start_date": {"$gte": to_storage_time(self.start_date)}} if self.start_date else None,
            {"target_date": {"$lte": to_storage_time(self.end_date)}} if self.end_date else None,
            keyword_filter(self.keyword, "title", "body"),
            (
                reference_filter("project_id", self.project_id)
                if self.project_id is not None
                else None
            ),
        )


@dataclass(frozen=True)
class LabelScope:
    category: str | None = None
    include_hidden: bool = True

    def to_filter(self) -> dict[str, Any]:
        return combine_filters(
            {"category": self.category} if self.category is not None else None,
            None if self.include_hidden else {"hidden": {"$ne": True}},
        )


@dataclass(frozen=True)
class ConsumingScope:
    vehicle_id: str | None = None

    def to_filter(self) -> dict[str, Any]:
        return {"vehicle_id": self.vehicle_id} if self.vehicle_id is not None else {}
