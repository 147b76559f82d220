"""
Constants for MDB_DOCS.

This module contains all shared constants used across the codebase to avoid
magic numbers and improve maintainability.
"""

from typing import Final

# ============================================================================
# DATABASE CONSTANTS
# ============================================================================

DEFAULT_MAX_POOL_SIZE: Final[int] = 50
"""Default maximum MongoDB connection pool size."""

DEFAULT_MIN_POOL_SIZE: Final[int] = 10
"""Default minimum MongoDB connection pool size."""

DEFAULT_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 5000
"""Default server selection timeout in milliseconds."""

MIN_SERVER_SELECTION_TIMEOUT_MS: Final[int] = 1000
"""Lowest accepted server selection timeout in milliseconds."""

DEFAULT_MAX_IDLE_TIME_MS: Final[int] = 45000
"""Default maximum idle time before closing connections (milliseconds)."""

APP_NAME: Final[str] = "MDB_DOCS"
"""Application name reported to MongoDB."""

# ============================================================================
# COLLECTION NAMES
# ============================================================================

ROLES_COLLECTION: Final[str] = "roles"
DEPARTMENTS_COLLECTION: Final[str] = "departments"
LABELS_COLLECTION: Final[str] = "labels"
PROJECTS_COLLECTION: Final[str] = "projects"
TASKS_COLLECTION: Final[str] = "tasks"
CONSUMINGS_COLLECTION: Final[str] = "consumings"
CONSUMING_IMAGES_COLLECTION: Final[str] = "consuming_images"

READERS_SUFFIX: Final[str] = "_readers"
"""Suffix of the companion collection holding RLS records for an entity."""


def readers_collection(entity_collection: str) -> str:
    """Name of the RLS companion collection for an entity collection."""
    return f"{entity_collection}{READERS_SUFFIX}"


RLS_COLLECTIONS: Final[tuple[str, ...]] = (
    PROJECTS_COLLECTION,
    TASKS_COLLECTION,
)
"""Entity collections governed by row-level security."""

# ============================================================================
# FIELD NAMES
# ============================================================================

AUTHOR_FIELD: Final[str] = "author"
REG_DATE_FIELD: Final[str] = "reg_date"
LAST_MOD_USER_FIELD: Final[str] = "last_mod_user"
LAST_MOD_DATE_FIELD: Final[str] = "last_mod_date"

AUDIT_FIELDS: Final[frozenset[str]] = frozenset(
    {AUTHOR_FIELD, REG_DATE_FIELD, LAST_MOD_USER_FIELD, LAST_MOD_DATE_FIELD}
)
"""Fields owned by audit stamping; never taken from caller payloads."""

IMMUTABLE_FIELDS: Final[frozenset[str]] = frozenset({"_id", AUTHOR_FIELD, REG_DATE_FIELD})
"""Fields that must never appear in an update's $set."""

RLS_JOIN_FIELD: Final[str] = "_rls"
"""Temporary field the scoped-query join writes matched RLS records into."""

# ============================================================================
# PAGINATION CONSTANTS
# ============================================================================

DEFAULT_PAGE_SIZE: Final[int] = 10
"""Default page size when the caller does not specify one."""

MAX_PAGE_SIZE: Final[int] = 1000
"""Largest page size accepted from request parameters."""

# ============================================================================
# ENTITY DEFAULTS
# ============================================================================

DEFAULT_PROJECT_POSITION: Final[int] = 999
"""Position assigned to projects without an explicit rank."""
