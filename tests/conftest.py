"""
Pytest configuration and shared fixtures for MDB_DOCS tests.

This module provides:
- Mock motor client/database/collection fixtures
- A fake client session recording commits and aborts
- Test data factories
- Testcontainers fixtures for integration tests
"""

from __future__ import annotations

import copy
import dataclasses
import os
from collections.abc import AsyncIterator, Callable
from typing import Any, TypeVar
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection

from mdb_docs.config import get_settings
from mdb_docs.documents import Document, PrincipalId, Project, ProjectStatus, Role, utc_now
from mdb_docs.observability import get_metrics_collector
from mdb_docs.repositories.base import Repository, validate_window

T = TypeVar("T", bound=Document)

# ============================================================================
# MOCK MONGODB FIXTURES
# ============================================================================


class FakeCursor:
    """Stand-in for a motor cursor / command cursor over a fixed list of documents."""

    def __init__(self, docs: list[dict[str, Any]] | None = None, error: Exception | None = None):
        self._docs = list(docs or [])
        self._error = error

    def sort(self, *args, **kwargs) -> "FakeCursor":
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self._error is not None:
            raise self._error
        for doc in self._docs:
            yield doc

    async def to_list(self, length: int | None = None) -> list[dict[str, Any]]:
        if self._error is not None:
            raise self._error
        return self._docs if length is None else self._docs[:length]


class FakeTransaction:
    def __init__(self, session: "FakeSession"):
        self._session = session

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is None:
            self._session.committed += 1
        else:
            self._session.aborted += 1
        return False


class FakeSession:
    """Client session whose transactions record commit/abort counts."""

    def __init__(self):
        self.committed = 0
        self.aborted = 0
        self.ended = False

    def start_transaction(self) -> FakeTransaction:
        return FakeTransaction(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.ended = True
        return False


def make_collection(name: str) -> MagicMock:
    collection = MagicMock(spec=AsyncIOMotorCollection)
    collection.name = name
    collection.aggregate = MagicMock(side_effect=lambda *a, **kw: FakeCursor([]))
    collection.find = MagicMock(side_effect=lambda *a, **kw: FakeCursor([]))
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.insert_many = AsyncMock(return_value=MagicMock(inserted_ids=[]))
    collection.update_one = AsyncMock(
        return_value=MagicMock(matched_count=1, modified_count=1, upserted_id=None)
    )
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=0))
    collection.count_documents = AsyncMock(return_value=1)
    collection.create_indexes = AsyncMock(side_effect=lambda models: [m.document["name"] for m in models])
    return collection


class MockDatabase:
    """Database whose collections are created on first access and then reused."""

    def __init__(self, name: str = "test_db"):
        self.name = name
        self._collections: dict[str, MagicMock] = {}

    def __getitem__(self, name: str) -> MagicMock:
        if name not in self._collections:
            self._collections[name] = make_collection(name)
        return self._collections[name]


class InMemoryRepository(Repository[T]):
    """
    Dict-backed repository.

    Honors the contract (ordering by insertion, audit stamping, unbounded
    ``limit=0``, idempotent delete) without a database. Scope arguments are
    predicates over documents.
    """

    def __init__(self, entity_class: type[T]):
        self._entity_class = entity_class
        self._storage: dict[str, T] = {}
        self._counter = 0
        self.entity_name = entity_class.__name__.lower()

    def _matching(self, scope: tuple[Callable[[T], bool], ...]) -> list[T]:
        return [doc for doc in self._storage.values() if all(pred(doc) for pred in scope)]

    def list(self, limit: int = 0, offset: int = 0, *scope: Any) -> AsyncIterator[T]:
        validate_window(limit, offset)
        docs = self._matching(scope)
        if limit > 0:
            docs = docs[offset : offset + limit]
        return self._stream([copy.deepcopy(d) for d in docs])

    async def _stream(self, docs: list[T]) -> AsyncIterator[T]:
        for doc in docs:
            yield doc

    async def count(self, *scope: Any) -> int:
        return len(self._matching(scope))

    async def find_by_id(self, id: str, *scope: Any) -> T | None:
        doc = self._storage.get(id)
        if doc is None or not all(pred(doc) for pred in scope):
            return None
        return copy.deepcopy(doc)

    async def insert(self, document: T, principal: PrincipalId) -> str:
        self._counter += 1
        id = str(self._counter)
        now = utc_now()
        self._storage[id] = dataclasses.replace(
            copy.deepcopy(document),
            id=id,
            author=principal,
            reg_date=now,
            last_mod_user=principal,
            last_mod_date=now,
        )
        return id

    async def update(self, id: str, document: T, principal: PrincipalId) -> int:
        current = self._storage.get(id)
        if current is None:
            return 0
        self._storage[id] = dataclasses.replace(
            copy.deepcopy(document),
            id=id,
            author=current.author,
            reg_date=current.reg_date,
            last_mod_user=principal,
            last_mod_date=utc_now(),
        )
        return 1

    async def delete(self, id: str, *scope: Any) -> int:
        return 1 if self._storage.pop(id, None) is not None else 0

    def clear(self) -> None:
        """Clear all documents (useful for test setup)."""
        self._storage.clear()
        self._counter = 0


@pytest.fixture
def in_memory_repository() -> type[InMemoryRepository]:
    """Repository class backed by a dict, for pagination and unit-of-work tests."""
    return InMemoryRepository


@pytest.fixture
def fake_cursor() -> type[FakeCursor]:
    """Cursor class for configuring ``aggregate``/``find`` results in tests."""
    return FakeCursor


@pytest.fixture
def mock_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def mock_mongo_client(mock_session: FakeSession) -> MagicMock:
    """Create a mock motor client handing out ``mock_session``."""
    client = MagicMock(spec=AsyncIOMotorClient)
    client.admin = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    client.start_session = AsyncMock(return_value=mock_session)
    client.close = MagicMock()
    return client


@pytest.fixture
def mock_mongo_database() -> MockDatabase:
    return MockDatabase()


# ============================================================================
# TEST DATA FACTORIES
# ============================================================================


@pytest.fixture
def principal() -> int:
    return 101


@pytest.fixture
def other_principal() -> int:
    return 202


@pytest.fixture
def sample_project() -> Project:
    return Project(name="proj-1", status=ProjectStatus.ACTIVE, manager=101)


@pytest.fixture
def sample_role() -> Role:
    return Role(
        identifier="supervisor",
        loc_name={"ENG": "Supervisor", "KAZ": "Супервайзер"},
        loc_descr={"ENG": "Supervises the work"},
    )


# ============================================================================
# ENVIRONMENT & GLOBAL STATE
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch):
    """Reset environment variables and cached settings before each test."""
    for var in [
        "MONGO_URI",
        "DB_NAME",
        "MONGO_MAX_POOL_SIZE",
        "MONGO_MIN_POOL_SIZE",
        "MONGO_SERVER_SELECTION_TIMEOUT_MS",
        "DEFAULT_PAGE_SIZE",
    ]:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(autouse=True)
def reset_observability():
    get_metrics_collector().reset()
    yield
    get_metrics_collector().reset()


# ============================================================================
# TESTCONTAINERS FIXTURES (Real MongoDB for Integration Tests)
# ============================================================================


@pytest.fixture(scope="session")
def mongodb_container():
    """
    Start a MongoDB Atlas Local container (a single-node replica set, so
    transactions work). Session-scoped: started once for all integration tests.
    """
    try:
        from testcontainers.mongodb import MongoDbContainer
    except ImportError:
        pytest.skip("testcontainers not installed. Install with: pip install -e '.[test]'")

    try:
        container = MongoDbContainer(image="mongodb/mongodb-atlas-local:latest")
        container.start()
    except Exception as e:  # docker missing or not running
        pytest.skip(f"Docker not available for MongoDB container: {e}")

    yield container
    container.stop()


@pytest.fixture
def mongodb_connection_string(mongodb_container) -> str:
    exposed_port = mongodb_container.get_exposed_port(27017)
    return f"mongodb://localhost:{exposed_port}/?directConnection=true"


@pytest.fixture
async def connection_manager(mongodb_connection_string):
    """An initialized ConnectionManager on a throwaway database."""
    from mdb_docs.core import ConnectionManager

    db_name = f"test_docs_{os.getpid()}_{ObjectId()}"
    manager = ConnectionManager(
        mongo_uri=mongodb_connection_string,
        db_name=db_name,
        max_pool_size=5,
        min_pool_size=1,
    )
    await manager.initialize()
    yield manager
    await manager.mongo_client.drop_database(db_name)
    await manager.shutdown()


@pytest.fixture
def uow(connection_manager):
    unit_of_work = connection_manager.unit_of_work()
    yield unit_of_work
    unit_of_work.dispose()
