"""
FastAPI adapter for MDB Docs

Provides request-scoped dependencies and the translation of repository
errors into HTTP responses. Routing stays with the application.

Usage:
    from fastapi import Depends, FastAPI
    from mdb_docs.dependencies import (
        PageRequest,
        get_page_request,
        get_unit_of_work,
        register_exception_handlers,
    )

    app = FastAPI()
    app.state.connection = manager  # an initialized ConnectionManager
    register_exception_handlers(app)

    @app.get("/roles")
    async def list_roles(
        paging: PageRequest = Depends(get_page_request),
        uow: UnitOfWork = Depends(get_unit_of_work),
    ):
        return await fetch_page(uow.roles, paging.page, paging.size)
"""

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from .config import get_settings
from .constants import MAX_PAGE_SIZE
from .core.connection import ConnectionManager
from .exceptions import (
    DocumentModificationAccessError,
    InvalidArgumentError,
    PersistenceError,
)
from .observability import clear_correlation_id, set_correlation_id
from .repositories import UnitOfWork

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageRequest:
    page: int
    size: int


async def get_connection_manager(request: Request) -> ConnectionManager:
    """The ConnectionManager stored on ``app.state.connection``."""
    manager = getattr(request.app.state, "connection", None)
    if manager is None or not manager.initialized:
        raise HTTPException(503, "Database connection not initialized")
    return manager


async def get_unit_of_work(request: Request) -> AsyncIterator[UnitOfWork]:
    """
    A UnitOfWork for the duration of one request.

    Repository log records of the request share one correlation id, taken
    from the ``X-Correlation-ID`` header when the client sends one.
    """
    manager = await get_connection_manager(request)
    set_correlation_id(request.headers.get("X-Correlation-ID"))
    uow = manager.unit_of_work()
    try:
        yield uow
    finally:
        uow.dispose()
        clear_correlation_id()


async def get_page_request(
    page: int = Query(1, ge=1),
    size: int | None = Query(None, ge=0, le=MAX_PAGE_SIZE),
) -> PageRequest:
    """Page parameters; a missing size falls back to the configured default."""
    if size is None:
        size = get_settings().default_page_size
    return PageRequest(page=page, size=size)


async def _access_denied(request: Request, exc: DocumentModificationAccessError) -> JSONResponse:
    return JSONResponse(
        status_code=403,
        content={"detail": exc.message, "error": "forbidden"},
    )


async def _invalid_argument(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": exc.message, "error": "bad_request", "argument": exc.argument},
    )


async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    # Already logged where it was raised; the details stay server-side.
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "error": "internal"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Translate repository errors into 403 / 400 / 500 responses."""
    app.add_exception_handler(DocumentModificationAccessError, _access_denied)
    app.add_exception_handler(InvalidArgumentError, _invalid_argument)
    app.add_exception_handler(PersistenceError, _persistence_error)
    logger.debug("Registered MDB Docs exception handlers")
