"""Task documents. Tasks are governed by row-level security."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from .base import Document, to_storage_time
from .mapping import Row, reference_id, set_default_fields


class TaskStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
    CANCELLED = "CANCELLED"


@dataclass
class Task(Document):
    reg_number: str = ""
    title: str = ""
    body: str = ""
    project_id: str | None = None
    parent_id: str | None = None
    assignee: int | None = None
    status: TaskStatus = TaskStatus.DRAFT
    priority: int = 0
    start_date: date | None = None
    target_date: date | None = None
    labels: list[str] = field(default_factory=list)


def task_from_row(row: Row) -> Task:
    task = Task(
        reg_number=row.get_str("reg_number", ""),
        title=row.get_str("title", ""),
        body=row.get_str("body", ""),
        project_id=row.get_id("project_id"),
        parent_id=row.get_id("parent_id"),
        assignee=row.get_int("assignee"),
        status=row.get_enum("status", TaskStatus, TaskStatus.UNKNOWN),
        priority=row.get_int("priority", 0),
        start_date=row.get_date("start_date"),
        target_date=row.get_date("target_date"),
        labels=[str(label) for label in row.get_list("labels")],
    )
    set_default_fields(task, row)
    return task


def task_payload(task: Task) -> dict[str, Any]:
    return {
        "reg_number": task.reg_number,
        "title": task.title,
        "body": task.body,
        "project_id": reference_id("project_id", task.project_id),
        "parent_id": reference_id("parent_id", task.parent_id),
        "assignee": task.assignee,
        "status": TaskStatus(task.status).value,
        "priority": task.priority,
        "start_date": to_storage_time(task.start_date),
        "target_date": to_storage_time(task.target_date),
        "labels": [reference_id("labels", label) for label in task.labels],
    }
