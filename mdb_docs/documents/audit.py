"""
Audit stamping.

The repository layer, never the caller, decides the audit fields. Insert
sets all four from one reference instant; update only refreshes the
modifier pair and never mentions author or registration date.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from ..constants import (
    AUDIT_FIELDS,
    AUTHOR_FIELD,
    IMMUTABLE_FIELDS,
    LAST_MOD_DATE_FIELD,
    LAST_MOD_USER_FIELD,
    REG_DATE_FIELD,
)
from .base import PrincipalId, to_storage_time


def creation_stamp(principal: PrincipalId, now: datetime) -> dict[str, Any]:
    """Audit fields for a new document."""
    stored = to_storage_time(now)
    return {
        AUTHOR_FIELD: principal,
        REG_DATE_FIELD: stored,
        LAST_MOD_USER_FIELD: principal,
        LAST_MOD_DATE_FIELD: stored,
    }


def modification_stamp(principal: PrincipalId, now: datetime) -> dict[str, Any]:
    """Audit fields refreshed by a successful mutation."""
    return {
        LAST_MOD_USER_FIELD: principal,
        LAST_MOD_DATE_FIELD: to_storage_time(now),
    }


def strip_managed_fields(payload: Mapping[str, Any]) -> dict[str, Any]:
    """Drop id and audit keys a caller payload may carry."""
    return {k: v for k, v in payload.items() if k not in AUDIT_FIELDS and k not in IMMUTABLE_FIELDS}


def stamp_for_insert(
    payload: Mapping[str, Any], principal: PrincipalId, now: datetime
) -> dict[str, Any]:
    """Document body to insert: caller payload plus the creation stamp."""
    return {**strip_managed_fields(payload), **creation_stamp(principal, now)}


def stamp_for_update(
    payload: Mapping[str, Any], principal: PrincipalId, now: datetime
) -> dict[str, Any]:
    """
    ``$set`` body of an update. Author and registration date are absent even
    when the caller's payload contains them.
    """
    return {**strip_managed_fields(payload), **modification_stamp(principal, now)}
