"""
Unit of Work

Gives request-scoped access to the entity repositories. Repositories are
created lazily on first attribute access and cached until ``dispose``.
"""

import logging
from typing import Any

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from ..constants import (
    CONSUMINGS_COLLECTION,
    DEPARTMENTS_COLLECTION,
    LABELS_COLLECTION,
    PROJECTS_COLLECTION,
    ROLES_COLLECTION,
    TASKS_COLLECTION,
)
from .base import Repository
from .consumings import ConsumingRepository
from .departments import DepartmentRepository
from .labels import LabelRepository
from .projects import ProjectRepository
from .roles import RoleRepository
from .tasks import TaskRepository

logger = logging.getLogger(__name__)

RepositoryFactory = type[Repository]

DEFAULT_REGISTRY: dict[str, RepositoryFactory] = {
    ROLES_COLLECTION: RoleRepository,
    DEPARTMENTS_COLLECTION: DepartmentRepository,
    LABELS_COLLECTION: LabelRepository,
    PROJECTS_COLLECTION: ProjectRepository,
    TASKS_COLLECTION: TaskRepository,
    CONSUMINGS_COLLECTION: ConsumingRepository,
}


class UnitOfWork:
    """
    Repository access for one request.

    Usage:
        uow = UnitOfWork(client, db)
        async for project in uow.projects.list(10, 0, principal):
            ...
        role = await uow.roles.find_by_id(role_id)

    Attribute names are collection names; an unknown name raises
    ``AttributeError``.
    """

    def __init__(
        self,
        client: AsyncIOMotorClient,
        db: AsyncIOMotorDatabase,
        registry: dict[str, RepositoryFactory] | None = None,
    ):
        self._client = client
        self._db = db
        self._registry: dict[str, RepositoryFactory] = dict(registry or DEFAULT_REGISTRY)
        self._repositories: dict[str, Repository] = {}

    def register(self, name: str, factory: RepositoryFactory) -> None:
        """Register a repository class under a collection name."""
        self._registry[name] = factory
        self._repositories.pop(name, None)

    def repository(self, name: str) -> Repository:
        """
        Get or create the repository registered under ``name``.

        Raises:
            KeyError: If no repository is registered under ``name``
        """
        if name in self._repositories:
            return self._repositories[name]

        factory = self._registry[name]
        repo = factory(self._client, self._db)
        self._repositories[name] = repo

        logger.debug(f"Created repository for '{name}' ({factory.__name__})")
        return repo

    def __getattr__(self, name: str) -> Any:
        # Prevent recursion on private attributes
        if name.startswith("_"):
            raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")
        try:
            return self.repository(name)
        except KeyError:
            raise AttributeError(
                f"'{type(self).__name__}' has no repository '{name}'"
            ) from None

    @property
    def db(self) -> AsyncIOMotorDatabase:
        """The underlying database, for operations the repositories do not cover."""
        return self._db

    def dispose(self) -> None:
        self._repositories.clear()
        logger.debug("UnitOfWork disposed")
