"""Project documents. Projects are governed by row-level security."""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any

from ..constants import DEFAULT_PROJECT_POSITION
from .base import Document, LanguageCode, to_storage_time
from .mapping import Row, set_default_fields


class ProjectStatus(str, Enum):
    UNKNOWN = "UNKNOWN"
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    DONE = "DONE"


@dataclass
class Project(Document):
    name: str = ""
    status: ProjectStatus = ProjectStatus.DRAFT
    finish_date: date | None = None
    position: int = DEFAULT_PROJECT_POSITION
    primary_lang: LanguageCode = LanguageCode.ENG
    manager: int | None = None
    coder: int | None = None
    tester: int | None = None


def project_from_row(row: Row) -> Project:
    project = Project(
        name=row.get_str("name", ""),
        status=row.get_enum("status", ProjectStatus, ProjectStatus.UNKNOWN),
        finish_date=row.get_date("finish_date"),
        position=row.get_int("position", DEFAULT_PROJECT_POSITION),
        primary_lang=row.get_enum("primary_lang", LanguageCode, LanguageCode.ENG),
        manager=row.get_int("manager"),
        coder=row.get_int("coder"),
        tester=row.get_int("tester"),
    )
    set_default_fields(project, row)
    return project


def project_payload(project: Project) -> dict[str, Any]:
    return {
        "name": project.name,
        "status": ProjectStatus(project.status).value,
        "finish_date": to_storage_time(project.finish_date),
        "position": project.position,
        "primary_lang": LanguageCode(project.primary_lang).value,
        "manager": project.manager,
        "coder": project.coder,
        "tester": project.tester,
    }
