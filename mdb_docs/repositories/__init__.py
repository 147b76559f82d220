"""
MDB Docs repositories

Every entity repository implements the same six-operation contract
(``list``, ``count``, ``find_by_id``, ``insert``, ``update``, ``delete``).
RLS-governed repositories also store and report per-document access
records.

Usage:
    from mdb_docs.repositories import UnitOfWork, ProjectScope

    uow = UnitOfWork(client, db)
    project_id = await uow.projects.insert(project, principal)
    async for project in uow.projects.list(10, 0, principal, ProjectScope(status="ACTIVE")):
        ...
"""

from .access import DocumentAccess
from .base import Repository, RLSRepository, validate_window
from .consumings import ConsumingRepository
from .departments import DepartmentRepository
from .gated import GatedAccess
from .labels import LabelRepository
from .projects import ProjectRepository
from .rls import AccessGate
from .roles import RoleRepository
from .scopes import ConsumingScope, LabelScope, ProjectScope, TaskScope
from .tasks import TaskRepository
from .unit_of_work import UnitOfWork

__all__ = [
    "Repository",
    "RLSRepository",
    "validate_window",
    "DocumentAccess",
    "GatedAccess",
    "AccessGate",
    "RoleRepository",
    "DepartmentRepository",
    "LabelRepository",
    "ProjectRepository",
    "TaskRepository",
    "ConsumingRepository",
    "ProjectScope",
    "TaskScope",
    "LabelScope",
    "ConsumingScope",
    "UnitOfWork",
]
