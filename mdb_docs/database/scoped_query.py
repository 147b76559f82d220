"""
Scoped query builder.

Every listing, count and lookup is expressed as one aggregation pipeline
built from (base collection, access collection, join predicate, filter). For
RLS-governed entities the access collection is joined on the document id and
restricted to the reading principal, so ``list`` and ``count`` can never
disagree on which documents are visible.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pymongo import ASCENDING

from ..constants import RLS_JOIN_FIELD
from ..documents.mapping import to_object_id

MATCH_NOTHING: Mapping[str, Any] = {"_id": {"$in": []}}


def reference_filter(field_name: str, value: Any) -> dict[str, Any]:
    """
    Equality on a reference field.

    A malformed id matches no document. It never turns into a null match.
    """
    object_id = to_object_id(value)
    if object_id is None:
        return dict(MATCH_NOTHING)
    return {field_name: object_id}


def combine_filters(*filters: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    AND together the non-empty filters.

    An empty result means "no constraint".
    """
    parts = [dict(f) for f in filters if f]
    if not parts:
        return {}
    if len(parts) == 1:
        return parts[0]
    return {"$and": parts}


@dataclass(frozen=True)
class ScopedQuery:
    """
    Read of ``base`` documents matching ``filter``, optionally restricted to
    those with a record for ``reader`` in the ``access`` collection.

    Attributes:
        base: Entity collection name
        filter: MongoDB filter on entity fields; empty matches everything
        order: Sort specification; ``_id`` is appended as a tiebreaker
        access: RLS companion collection, or None for unrestricted entities
        reader: Principal whose records the join keeps (required with ``access``)
        join_field: Field of the access record holding the document id
    """

    base: str
    filter: Mapping[str, Any] = field(default_factory=dict)
    order: tuple[tuple[str, int], ...] = ()
    access: str | None = None
    reader: Any = None
    join_field: str = "entity_id"

    def __post_init__(self) -> None:
        if self.access is not None and self.reader is None:
            raise ValueError(f"Scoped read of '{self.base}' through '{self.access}' needs a reader")

    @property
    def is_restricted(self) -> bool:
        return self.access is not None

    def with_filter(self, extra: Mapping[str, Any] | None) -> "ScopedQuery":
        return ScopedQuery(
            base=self.base,
            filter=combine_filters(self.filter, extra),
            order=self.order,
            access=self.access,
            reader=self.reader,
            join_field=self.join_field,
        )

    def _match_stage(self) -> list[dict[str, Any]]:
        return [{"$match": dict(self.filter)}] if self.filter else []

    def _join_stages(self) -> list[dict[str, Any]]:
        if self.access is None:
            return []
        return [
            {
                "$lookup": {
                    "from": self.access,
                    "let": {"doc_id": "$_id"},
                    "pipeline": [
                        {
                            "$match": {
                                "$expr": {
                                    "$and": [
                                        {"$eq": [f"${self.join_field}", "$$doc_id"]},
                                        {"$eq": ["$reader", self.reader]},
                                    ]
                                }
                            }
                        },
                        {"$limit": 1},
                    ],
                    "as": RLS_JOIN_FIELD,
                }
            },
            {"$match": {RLS_JOIN_FIELD: {"$ne": []}}},
            {"$project": {RLS_JOIN_FIELD: 0}},
        ]

    def _sort_spec(self) -> dict[str, int]:
        spec = dict(self.order)
        spec.setdefault("_id", ASCENDING)
        return spec

    def list_pipeline(self, limit: int = 0, offset: int = 0) -> list[dict[str, Any]]:
        """
        Pipeline for a window of the ordered result.

        ``limit == 0`` reads everything and ignores ``offset``.
        """
        pipeline = self._match_stage() + self._join_stages()
        pipeline.append({"$sort": self._sort_spec()})
        if limit > 0:
            if offset > 0:
                pipeline.append({"$skip": offset})
            pipeline.append({"$limit": limit})
        return pipeline

    def count_pipeline(self) -> list[dict[str, Any]]:
        """Pipeline yielding ``{"count": n}``, or nothing when n is 0."""
        return self._match_stage() + self._join_stages() + [{"$count": "count"}]

    def by_id_pipeline(self, object_id: Any) -> list[dict[str, Any]]:
        """Pipeline for a single document, still subject to the scope."""
        scoped = self.with_filter({"_id": object_id})
        return scoped._match_stage() + scoped._join_stages() + [{"$limit": 1}]
