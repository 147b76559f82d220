"""
MDB_DOCS - asynchronous document access for MongoDB

Entity repositories with a uniform contract (list, count, find_by_id,
insert, update, delete), audit stamping, transactional writes and
per-document row-level security.
"""

from .config import Settings, get_settings
from .core import ConnectionManager
from .exceptions import (
    ConfigurationError,
    DocsEngineError,
    DocumentModificationAccessError,
    InitializationError,
    InvalidArgumentError,
    PersistenceError,
)
from .pagination import Page, calc_start_entry, count_max_page, fetch_page
from .repositories import UnitOfWork

__version__ = "0.1.0"

__all__ = [
    # Core
    "ConnectionManager",
    "UnitOfWork",
    "Settings",
    "get_settings",
    # Pagination
    "Page",
    "fetch_page",
    "count_max_page",
    "calc_start_entry",
    # Errors
    "DocsEngineError",
    "InitializationError",
    "ConfigurationError",
    "InvalidArgumentError",
    "DocumentModificationAccessError",
    "PersistenceError",
]
