"""
Contextual logging for MDB_DOCS.

Two pieces of context ride along with every record written through
``ContextualLoggerAdapter``:

- the correlation id of the current request, set once per request by the
  FastAPI dependency;
- the document context (entity, acting principal, document id) of the
  repository write in progress, scoped with ``document_context``.

Both live in context variables, so concurrent requests on one event loop
never see each other's values.
"""

import contextvars
import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any

_correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)

_document_context: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar(
    "document_context", default={}
)


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """
    Bind a correlation id to the current context.

    Args:
        correlation_id: Id received from the caller; a UUID4 is generated when None

    Returns:
        The id now in effect
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    _correlation_id.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    _correlation_id.set(None)


@contextmanager
def document_context(entity: str, **fields: Any) -> Iterator[dict[str, Any]]:
    """
    Attach a document context to log records for the duration of a block.

    Nested blocks extend the enclosing context. None-valued fields are
    dropped. On exit the enclosing context is restored exactly.

    Example:
        with document_context("projects", principal=7, document_id=project_id):
            ...
    """
    context = {
        **_document_context.get(),
        "entity": entity,
        **{name: value for name, value in fields.items() if value is not None},
    }
    token = _document_context.set(context)
    try:
        yield context
    finally:
        _document_context.reset(token)


def current_document_context() -> dict[str, Any]:
    return dict(_document_context.get())


def get_logging_context() -> dict[str, Any]:
    """Correlation id and document context of the current task, plus a UTC timestamp."""
    context: dict[str, Any] = {"timestamp": datetime.now(timezone.utc).isoformat()}

    correlation_id = get_correlation_id()
    if correlation_id:
        context["correlation_id"] = correlation_id

    context.update(_document_context.get())
    return context


class ContextualLoggerAdapter(logging.LoggerAdapter):
    """Merges the logging context into ``extra``; explicit extras win."""

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        kwargs["extra"] = {**get_logging_context(), **(kwargs.get("extra") or {})}
        return msg, kwargs


def get_logger(name: str) -> ContextualLoggerAdapter:
    return ContextualLoggerAdapter(logging.getLogger(name), {})


def log_operation(
    logger: logging.Logger | logging.LoggerAdapter,
    operation: str,
    level: int = logging.INFO,
    success: bool = True,
    duration_ms: float | None = None,
    **context: Any,
) -> None:
    """
    Write one structured record for a completed repository operation.

    The record's extras carry ``operation``, ``success``, the rounded
    ``duration_ms`` when given, and any additional ``context``.

    Args:
        logger: Plain logger or contextual adapter
        operation: Qualified name, e.g. ``"projects.insert"``
        level: Log level
        success: Whether the operation completed
        duration_ms: Elapsed time in milliseconds
        **context: Extra fields (document_id, affected, ...)
    """
    extra = {**get_logging_context(), "operation": operation, "success": success, **context}
    outcome = "completed" if success else "failed"
    message = f"{operation} {outcome}"

    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)
        message += f" in {duration_ms:.2f}ms"

    logger.log(level, message, extra=extra)
