"""
Unit tests for the FastAPI adapter.

Tests the dependencies and exception handlers in mdb_docs.dependencies.
"""

from unittest.mock import MagicMock

import pytest
from fastapi import Depends, FastAPI, HTTPException
from fastapi.testclient import TestClient

from mdb_docs.dependencies import (
    PageRequest,
    get_connection_manager,
    get_page_request,
    get_unit_of_work,
    register_exception_handlers,
)
from mdb_docs.exceptions import (
    DocumentModificationAccessError,
    InvalidArgumentError,
    PersistenceError,
)
from mdb_docs.observability import get_correlation_id
from mdb_docs.repositories import UnitOfWork


@pytest.fixture
def mock_request():
    request = MagicMock()
    request.app.state = MagicMock()
    return request


@pytest.fixture
def app():
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/denied")
    async def denied():
        raise DocumentModificationAccessError("Principal 2 may not edit this document")

    @app.get("/invalid")
    async def invalid():
        raise InvalidArgumentError("offset must be >= 0, got -1", argument="offset", value=-1)

    @app.get("/broken")
    async def broken():
        raise PersistenceError("Failed to insert document", operation="insert")

    @app.get("/page")
    async def page(paging: PageRequest = Depends(get_page_request)):
        return {"page": paging.page, "size": paging.size}

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


class TestExceptionHandlers:
    def test_access_denied_is_forbidden(self, client):
        response = client.get("/denied")
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_invalid_argument_is_bad_request(self, client):
        response = client.get("/invalid")
        assert response.status_code == 400
        assert response.json()["argument"] == "offset"

    def test_persistence_error_is_internal(self, client):
        response = client.get("/broken")
        assert response.status_code == 500
        assert "insert" not in response.json()["detail"]


class TestPageRequest:
    def test_defaults_to_configured_size(self, client, monkeypatch):
        monkeypatch.setenv("DEFAULT_PAGE_SIZE", "15")
        assert client.get("/page").json() == {"page": 1, "size": 15}

    def test_explicit(self, client):
        assert client.get("/page?page=3&size=20").json() == {"page": 3, "size": 20}

    def test_page_below_one_rejected(self, client):
        assert client.get("/page?page=0").status_code == 422


class TestConnectionDependencies:
    async def test_missing_manager(self, mock_request):
        mock_request.app.state.connection = None
        with pytest.raises(HTTPException) as exc_info:
            await get_connection_manager(mock_request)
        assert exc_info.value.status_code == 503

    async def test_uninitialized_manager(self, mock_request):
        mock_request.app.state.connection = MagicMock(initialized=False)
        with pytest.raises(HTTPException):
            await get_connection_manager(mock_request)

    async def test_unit_of_work_disposed_after_request(
        self, mock_request, mock_mongo_client, mock_mongo_database
    ):
        uow = UnitOfWork(mock_mongo_client, mock_mongo_database)
        manager = MagicMock(initialized=True)
        manager.unit_of_work.return_value = uow
        mock_request.app.state.connection = manager
        mock_request.headers = {"X-Correlation-ID": "req-1"}

        dependency = get_unit_of_work(mock_request)
        yielded = await dependency.__anext__()
        first = yielded.projects
        assert get_correlation_id() == "req-1"
        with pytest.raises(StopAsyncIteration):
            await dependency.__anext__()

        assert yielded is uow
        assert uow.projects is not first
        assert get_correlation_id() is None
