"""Symmetric relatedness: walk an edge collection in both directions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..models import Entity
from ..queries import Direction
from ..queries import traversal as tq
from ..repository import EntityRepository
from ..schema import TraversalRegistry
from .base import Capability

RELATED = "related"


@dataclass(frozen=True)
class RelatedConfig:
    edges: str
    view: str | None = None


class Related(Capability):
    START_LIMIT = 30
    RESULT_LIMIT = 50

    def __init__(
        self,
        base: EntityRepository | Capability,
        config: RelatedConfig,
        registry: TraversalRegistry,
    ) -> None:
        super().__init__(base, registry)
        self.config = config
        registry.register(self.kind, RELATED, config.edges)

    @property
    def edges(self) -> str:
        return self.registry.lookup(self.kind, RELATED)

    def get_related(self, keys: Iterable[str], distance: int = 1) -> list[Entity]:
        """Records at most `distance` hops away from `keys`, either direction."""
        keys = list(keys)
        if not keys:
            return []
        query = tq.traversal(
            self.kind,
            self.edges,
            keys,
            1,
            distance,
            Direction.ANY,
            start_limit=min(len(keys), self.START_LIMIT),
            result_limit=self.RESULT_LIMIT,
        )
        return self._entities(query)

    def find_related(self, search: str, distance: int = 1) -> list[Entity]:
        query = tq.search_traversal(
            self.kind,
            self.edges,
            search,
            1,
            distance,
            Direction.ANY,
            start_limit=self.START_LIMIT,
            result_limit=self.RESULT_LIMIT,
            view=self.config.view,
        )
        return self._entities(query)
