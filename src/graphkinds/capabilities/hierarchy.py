"""Directional parent/child traversal over a single edge collection.

Edges point from the more specific record to the more general one, so
"subs" are found INBOUND and "supers" OUTBOUND.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..models import Entity
from ..queries import Direction
from ..queries import traversal as tq
from ..repository import EntityRepository
from ..schema import TraversalRegistry
from .base import Capability

HIERARCHY = "hierarchy"


@dataclass(frozen=True)
class HierarchyConfig:
    edges: str
    view: str | None = None


class Hierarchy(Capability):
    START_LIMIT = 5
    RESULT_LIMIT = 30

    def __init__(
        self,
        base: EntityRepository | Capability,
        config: HierarchyConfig,
        registry: TraversalRegistry,
    ) -> None:
        super().__init__(base, registry)
        self.config = config
        registry.register(self.kind, HIERARCHY, config.edges)

    @property
    def edges(self) -> str:
        return self.registry.lookup(self.kind, HIERARCHY)

    def get_subs(self, keys: Iterable[str], close: int = 1, far: int = 1) -> list[Entity]:
        """More specific records `close`..`far` levels below `keys`."""
        return self._get(keys, close, far, Direction.INBOUND)

    def get_supers(self, keys: Iterable[str], close: int = 1, far: int = 1) -> list[Entity]:
        """More general records `close`..`far` levels above `keys`."""
        return self._get(keys, close, far, Direction.OUTBOUND)

    def get_siblings(self, keys: Iterable[str]) -> list[Entity]:
        """Records sharing a direct parent with the first of `keys`."""
        keys = list(keys)
        if not keys:
            return []
        return self._entities(
            tq.siblings(self.kind, self.edges, keys, result_limit=self.RESULT_LIMIT)
        )

    def find_subs(self, search: str, close: int = 1, far: int = 1) -> list[Entity]:
        return self._find(search, close, far, Direction.INBOUND)

    def find_supers(self, search: str, close: int = 1, far: int = 1) -> list[Entity]:
        return self._find(search, close, far, Direction.OUTBOUND)

    def _get(self, keys: Iterable[str], close: int, far: int, direction: Direction) -> list[Entity]:
        keys = list(keys)
        if not keys:
            return []
        query = tq.traversal(
            self.kind,
            self.edges,
            keys,
            close,
            far,
            direction,
            start_limit=self.START_LIMIT,
            result_limit=self.RESULT_LIMIT,
        )
        return self._entities(query)

    def _find(self, search: str, close: int, far: int, direction: Direction) -> list[Entity]:
        query = tq.search_traversal(
            self.kind,
            self.edges,
            search,
            close,
            far,
            direction,
            start_limit=self.START_LIMIT,
            result_limit=self.RESULT_LIMIT,
            view=self.config.view,
        )
        return self._entities(query)
