"""Schema metadata for entity kinds and the traversal relation registry.

Public API:
    CollectionType: Whether a kind lives in a document or an edge collection.
    EntityKind: Immutable per-kind descriptor.
    TraversalRegistry: Thread-safe, append-only (kind, relation) -> edges map.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .exceptions import ConfigurationError, RelationNotConfiguredError
from .settings import settings

logger = logging.getLogger(__name__)

_FIELD_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)*$")

RESERVED_FIELDS = frozenset({"_id", "_key", "_rev", "_from", "_to"})

SCORERS = ("BM25", "TFIDF")


def validate_field_path(path: str) -> str:
    """Return *path* if it is a dotted identifier, else raise ConfigurationError.

    Field paths are rendered into AQL text, so only plain identifiers are
    accepted.
    """
    if not isinstance(path, str) or not _FIELD_PATH.match(path):
        raise ConfigurationError(f"Invalid field path: {path!r}")
    return path


class CollectionType(Enum):
    """Storage flavour of a kind."""

    NODE = "nodes"
    EDGE = "edges"


@dataclass(frozen=True)
class EntityKind:
    """Static descriptor of a class of records sharing one collection.

    Attributes:
        collection_name: Name of the backing collection (e.g. "skills").
        collection_type: NODE for document collections, EDGE for edges.
        label_field: The attribute that names a record (e.g. "title").
        search_fields: Ordered field paths matched by relevance search.
            The first one is the primary field that receives the exact
            match boost.
        unique_fields: Attributes identifying a record during upsert.
        projection_fields: Attributes collected in aggregated traversal
            results instead of whole documents.
        view_name: ArangoSearch view indexing this collection.
        analyzer: Text analyzer used to tokenize search input.
        scorer: Relevance scorer, "BM25" or "TFIDF".
    """

    collection_name: str
    collection_type: CollectionType = CollectionType.NODE
    label_field: str = "label"
    search_fields: tuple[str, ...] = ()
    unique_fields: frozenset[str] = frozenset()
    projection_fields: tuple[str, ...] = ()
    view_name: str | None = None
    analyzer: str = field(default_factory=lambda: settings.analyzer)
    scorer: str = "BM25"

    def __post_init__(self) -> None:
        if not self.collection_name:
            raise ConfigurationError("EntityKind requires a collection name")
        # Accept any iterable from callers but store immutable containers.
        object.__setattr__(self, "search_fields", tuple(self.search_fields))
        object.__setattr__(self, "unique_fields", frozenset(self.unique_fields))
        object.__setattr__(self, "projection_fields", tuple(self.projection_fields))

        validate_field_path(self.label_field)
        for path in (*self.search_fields, *self.unique_fields, *self.projection_fields):
            validate_field_path(path)
        if self.scorer not in SCORERS:
            raise ConfigurationError(f"Unsupported scorer: {self.scorer}")

    @property
    def is_edge(self) -> bool:
        return self.collection_type is CollectionType.EDGE

    @property
    def primary_search_field(self) -> str:
        return self.require_search_fields()[0]

    def require_search_fields(self) -> tuple[str, ...]:
        if not self.search_fields:
            raise ConfigurationError(
                f"Kind '{self.collection_name}' has no search fields configured"
            )
        return self.search_fields

    def require_view(self, override: str | None = None) -> str:
        view = override or self.view_name
        if not view:
            raise ConfigurationError(
                f"Kind '{self.collection_name}' has no search view configured"
            )
        return view


class TraversalRegistry:
    """Maps ``(kind, relation name)`` to the edge collection to traverse.

    Constructed once at startup and handed to every capability. Entries are
    append-only: re-registering an identical mapping is a no-op, while a
    conflicting mapping raises ConfigurationError. Writes are serialized per
    kind; reads of registered entries take no lock.
    """

    def __init__(self) -> None:
        self._relations: dict[str, dict[str, str]] = {}
        self._kind_locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, kind: str) -> threading.Lock:
        lock = self._kind_locks.get(kind)
        if lock is None:
            with self._guard:
                self._relations.setdefault(kind, {})
                lock = self._kind_locks.setdefault(kind, threading.Lock())
        return lock

    def register(self, kind: EntityKind | str, relation: str, edges: str) -> None:
        name = _kind_name(kind)
        if not relation or not edges:
            raise ConfigurationError("Relation name and edge collection must be non-empty")

        with self._lock_for(name):
            entries = self._relations[name]
            existing = entries.get(relation)
            if existing is None:
                entries[relation] = edges
                logger.debug("Registered relation %s.%s -> %s", name, relation, edges)
            elif existing != edges:
                raise ConfigurationError(
                    f"Relation '{relation}' of kind '{name}' is already bound to "
                    f"'{existing}', refusing to rebind it to '{edges}'"
                )

    def lookup(self, kind: EntityKind | str, relation: str) -> str:
        name = _kind_name(kind)
        edges = self._relations.get(name, {}).get(relation)
        if edges is None:
            raise RelationNotConfiguredError(name, relation)
        return edges

    def is_registered(self, kind: EntityKind | str, relation: str) -> bool:
        return relation in self._relations.get(_kind_name(kind), {})

    def relations(self, kind: EntityKind | str) -> Mapping[str, str]:
        return MappingProxyType(dict(self._relations.get(_kind_name(kind), {})))


def _kind_name(kind: EntityKind | str) -> str:
    return kind.collection_name if isinstance(kind, EntityKind) else kind


__all__ = [
    "CollectionType",
    "EntityKind",
    "RESERVED_FIELDS",
    "TraversalRegistry",
    "validate_field_path",
]
