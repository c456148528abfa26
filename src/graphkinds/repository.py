"""Generic CRUD and search engine shared by every entity kind.

Public API:
    EntityRepository: Operations over one node kind.
    EdgeRepository: EntityRepository for edge kinds, mapping endpoints too.
    repository_for: Pick the right repository class for a kind.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from .db.base import Connection
from .exceptions import ConfigurationError
from .models import EdgeEntity, Entity
from .queries import AqlQuery, documents
from .schema import RESERVED_FIELDS, EntityKind
from .settings import settings

logger = logging.getLogger(__name__)

#: Result size of `find_many` when the caller gives none.
DEFAULT_FIND_LIMIT = 10


@dataclass(frozen=True)
class KindHandles:
    """Resolved store handles for one kind."""

    collection: Any
    view: Any = None


class EntityRepository:
    """CRUD, lookup and relevance search for one EntityKind.

    The kind says *which* collection and view to use; the connection says
    *how* to reach them. Handles are resolved lazily by `ensure_ready`.

    "Not found" is always ``None`` or ``[]``. ConfigurationError and
    StoreError propagate unchanged.

    Args:
        kind: The schema descriptor of the records handled here.
        connection: Store connection shared by all repositories.
        default_limit: Bound for `all()`; defaults to ``settings.default_limit``.
    """

    def __init__(
        self,
        kind: EntityKind,
        connection: Connection,
        *,
        default_limit: int | None = None,
    ) -> None:
        self.kind = kind
        self.connection = connection
        self.default_limit = default_limit or settings.default_limit
        self._handles: KindHandles | None = None
        self._ready_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.collection_name!r})"

    # ── plumbing ──────────────────────────────────────────────

    def ensure_ready(self) -> KindHandles:
        """Resolve (once) and return the collection and view handles.

        The handles are published in a single assignment, so concurrent
        callers observe either nothing or the complete value.
        """
        handles = self._handles
        if handles is not None:
            return handles

        with self._ready_lock:
            if self._handles is None:
                collection = self._resolve_collection()
                view = None
                if self.kind.view_name:
                    view = self.connection.resolve_view(self.kind.view_name)
                self._handles = KindHandles(collection=collection, view=view)
                logger.debug("Resolved handles for %s", self.kind.collection_name)
            return self._handles

    def _resolve_collection(self) -> Any:
        return self.connection.resolve_collection(self.kind.collection_name)

    def execute(self, query: AqlQuery) -> list[Any]:
        """Run a composed query and return all of its rows."""
        logger.debug("AQL on %s: %s | %s", self.kind.collection_name, query.text, query.bind_vars)
        rows = self.connection.execute_query(query.text, query.bind_vars)
        if rows is None:
            logger.error("Store returned no cursor for a query on %s", self.kind.collection_name)
            return []
        return list(rows)

    def map_row(self, row: Mapping[str, Any]) -> Entity:
        """Split a raw document into identity fields and features."""
        features = {k: v for k, v in row.items() if k not in RESERVED_FIELDS}
        return Entity(
            id=row.get("_id", ""),
            key=row.get("_key", ""),
            rev=row.get("_rev"),
            features=features,
        )

    def _first(self, query: AqlQuery) -> Entity | None:
        rows = self.execute(query)
        return self.map_row(rows[0]) if rows and rows[0] else None

    def _many(self, query: AqlQuery) -> list[Entity]:
        return [self.map_row(row) for row in self.execute(query) if row]

    # ── basics ────────────────────────────────────────────────

    def count(self) -> int:
        self.ensure_ready()
        rows = self.execute(documents.count(self.kind))
        return int(rows[0]) if rows else 0

    def all(self, limit: int | None = None) -> list[Entity]:
        """Up to `limit` records, never more than the configured bound."""
        self.ensure_ready()
        return self._many(
            documents.full_all(self.kind, limit or self.default_limit, bound=self.default_limit)
        )

    def all_unbounded(self) -> list[Entity]:
        """Every record of the collection. Meant for maintenance jobs only."""
        self.ensure_ready()
        logger.info("Fetching all records of %s without a limit", self.kind.collection_name)
        return self._many(documents.full_all(self.kind, unbounded=True))

    def indexes(self) -> list[dict[str, Any]]:
        self.ensure_ready()
        return self.connection.list_indexes(self.kind.collection_name)

    def force_view_sync(self) -> None:
        """Wait until recent writes are visible to relevance search."""
        self.ensure_ready()
        self.execute(documents.force_view_sync(self.kind.require_view()))

    # ── lookup ────────────────────────────────────────────────

    def by_key(self, key: str) -> Entity | None:
        found = self.by_keys([key], 1)
        return found[0] if found else None

    def by_keys(self, keys: Iterable[str], limit: int | None = None) -> list[Entity]:
        keys = list(keys)
        if not keys:
            return []
        self.ensure_ready()
        return self._many(documents.point_lookup(self.kind, keys, limit or len(keys)))

    def by_field(self, field: str, value: Any) -> Entity | None:
        self.ensure_ready()
        return self._first(documents.field_lookup(self.kind, field, value))

    def by_label(self, label: Any) -> Entity | None:
        return self.by_field(self.kind.label_field, label)

    # ── relevance search ──────────────────────────────────────

    def find_one(self, search: str) -> Entity | None:
        found = self.find_many(search, 1)
        return found[0] if found else None

    def find_many(self, search: str, limit: int = DEFAULT_FIND_LIMIT) -> list[Entity]:
        """Records matching `search`, most relevant first."""
        self.kind.require_search_fields()
        self.ensure_ready()
        return self._many(documents.search_by_relevance(self.kind, search, limit))

    # ── writes ────────────────────────────────────────────────

    def create(self, data: Mapping[str, Any]) -> Entity | None:
        """Insert a new record; a conflicting key raises StoreError."""
        self.ensure_ready()
        return self._first(documents.create(self.kind, data))

    def upsert(self, data: Mapping[str, Any]) -> Entity | None:
        """Insert or update the record identified by the kind's unique fields."""
        query = documents.upsert(self.kind, data, self.kind.unique_fields)
        self.ensure_ready()
        return self._first(query)

    def update(self, key: str, data: Mapping[str, Any] | None = None) -> Entity | None:
        """Merge `data` into the record; an empty `data` returns it unchanged."""
        self.ensure_ready()
        return self._first(documents.update(self.kind, key, data or {}))

    def delete(self, key: str) -> str | None:
        """Remove the record and return its key, or None if there was none."""
        # A concurrent removal between the check and the REMOVE yields no rows.
        if self.by_key(key) is None:
            return None
        rows = self.execute(documents.delete(self.kind, key))
        return rows[0] if rows else None

    # ── maintenance ───────────────────────────────────────────

    def truncate(self) -> None:
        self.ensure_ready()
        self.execute(documents.truncate(self.kind))
        logger.info("Truncated collection %s", self.kind.collection_name)

    def drop(self) -> bool:
        with self._ready_lock:
            self._handles = None
        return self.connection.drop_collection(self.kind.collection_name)


class EdgeRepository(EntityRepository):
    """Repository for an edge kind; rows map to EdgeEntity."""

    def __init__(self, kind: EntityKind, connection: Connection, **kwargs: Any) -> None:
        if not kind.is_edge:
            raise ConfigurationError(f"Kind '{kind.collection_name}' is not an edge kind")
        super().__init__(kind, connection, **kwargs)

    def _resolve_collection(self) -> Any:
        return self.connection.resolve_edge_collection(self.kind.collection_name)

    def map_row(self, row: Mapping[str, Any]) -> EdgeEntity:
        features = {k: v for k, v in row.items() if k not in RESERVED_FIELDS}
        return EdgeEntity(
            id=row.get("_id", ""),
            key=row.get("_key", ""),
            rev=row.get("_rev"),
            features=features,
            from_id=row.get("_from", ""),
            to_id=row.get("_to", ""),
        )

    def by_nodes(self, from_id: str, to_id: str) -> EdgeEntity | None:
        """The first edge from `from_id` to `to_id`, if any."""
        self.ensure_ready()
        return self._first(documents.edge_by_nodes(self.kind, from_id, to_id))

    def create_between(
        self, from_id: str, to_id: str, features: Mapping[str, Any] | None = None
    ) -> EdgeEntity | None:
        return self.create({**(features or {}), "_from": from_id, "_to": to_id})


def repository_for(kind: EntityKind, connection: Connection, **kwargs: Any) -> EntityRepository:
    cls = EdgeRepository if kind.is_edge else EntityRepository
    return cls(kind, connection, **kwargs)


__all__ = ["EdgeRepository", "EntityRepository", "KindHandles", "repository_for"]
