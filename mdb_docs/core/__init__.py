"""Connection lifecycle."""

from .connection import ConnectionManager

__all__ = ["ConnectionManager"]
