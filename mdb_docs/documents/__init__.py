"""
Documents and their row mapping.

Each entity module defines a dataclass, a pure ``*_from_row`` mapping
function and a ``*_payload`` function producing the stored fields.
"""

from .base import Document, LanguageCode, LocalizedText, PrincipalId, utc_now
from .consuming import Consuming, Image
from .department import Department
from .label import Label
from .mapping import Row, to_object_id
from .project import Project, ProjectStatus
from .rls import Capability, RLSRecord
from .role import Role
from .task import Task, TaskStatus

__all__ = [
    "Document",
    "LanguageCode",
    "LocalizedText",
    "PrincipalId",
    "utc_now",
    "Row",
    "to_object_id",
    "Capability",
    "RLSRecord",
    "Role",
    "Department",
    "Label",
    "Project",
    "ProjectStatus",
    "Task",
    "TaskStatus",
    "Consuming",
    "Image",
]
