"""
Database layer.

Provides the scoped query builder shared by every repository, the
transaction boundary for multi-document writes and index bootstrap.
"""

from .indexes import ensure_indexes
from .scoped_query import ScopedQuery, combine_filters
from .transaction import transaction

__all__ = [
    "ScopedQuery",
    "combine_filters",
    "transaction",
    "ensure_indexes",
]
