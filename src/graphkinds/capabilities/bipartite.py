"""Two-sided relations, e.g. jobs requiring skills.

Records on the same side are *peers*; records on the opposite side are
*others*. Direction is irrelevant within a bipartite subgraph, so every
walk is ANY. Distances are counted in peer steps and translated into hops:
``2 * d - 1`` to reach the other side, ``2 * d`` to come back to this one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from ..models import Entity, OtherGroup, PeerPath
from ..queries import Direction
from ..queries import traversal as tq
from ..repository import EntityRepository
from ..schema import TraversalRegistry
from .base import Capability


@dataclass(frozen=True)
class BipartiteConfig:
    """Maps each opposite-side kind to the edge collection linking to it."""

    links: Mapping[str, str] = field(default_factory=dict)
    view: str | None = None


class Bipartite(Capability):
    GET_RESULT_LIMIT = 30
    FIND_OTHER_START_LIMIT = 30
    FIND_OTHER_RESULT_LIMIT = 50
    FIND_PEER_START_LIMIT = 10
    FIND_PEER_RESULT_LIMIT = 30

    def __init__(
        self,
        base: EntityRepository | Capability,
        config: BipartiteConfig,
        registry: TraversalRegistry,
    ) -> None:
        super().__init__(base, registry)
        self.config = config
        for other, edges in config.links.items():
            registry.register(self.kind, other, edges)

    def edges_to(self, other: str) -> str:
        """Edge collection linking this kind to `other`."""
        return self.registry.lookup(self.kind, other)

    # ── by key ────────────────────────────────────────────────

    def get_other(self, keys: Iterable[str], other: str, distance: int = 1) -> list[Entity]:
        """Distinct records of `other` reached from `keys`."""
        keys = list(keys)
        edges = self.edges_to(other)
        if not keys:
            return []
        hops = tq.other_side_hops(distance)
        query = tq.traversal(
            self.kind,
            edges,
            keys,
            hops,
            hops,
            Direction.ANY,
            start_limit=min(len(keys), self.GET_RESULT_LIMIT),
            result_limit=self.GET_RESULT_LIMIT,
        )
        return self._entities(query)

    def get_peers(self, keys: Iterable[str], other: str, distance: int = 1) -> list[PeerPath]:
        """Paths to same-side records linked through `other`."""
        keys = list(keys)
        edges = self.edges_to(other)
        if not keys:
            return []
        query = tq.peers(
            self.kind,
            edges,
            keys,
            tq.peer_hops(distance),
            start_limit=min(len(keys), self.GET_RESULT_LIMIT),
            result_limit=self.GET_RESULT_LIMIT,
        )
        return [self._peer_path(row) for row in self._rows(query)]

    # ── by search ─────────────────────────────────────────────

    def find_other(self, search: str, other: str, distance: int = 1) -> list[OtherGroup]:
        """Relevance hits for `search`, each with the `other` records it links to."""
        query = tq.search_others(
            self.kind,
            self.edges_to(other),
            search,
            tq.other_side_hops(distance),
            start_limit=self.FIND_OTHER_START_LIMIT,
            result_limit=self.FIND_OTHER_RESULT_LIMIT,
            view=self.config.view,
        )
        return [
            OtherGroup(source=row["source"], targets=list(row.get("targets") or []))
            for row in self._rows(query)
        ]

    def find_peers(self, search: str, other: str, distance: int = 1) -> list[PeerPath]:
        query = tq.search_peers(
            self.kind,
            self.edges_to(other),
            search,
            tq.peer_hops(distance),
            start_limit=self.FIND_PEER_START_LIMIT,
            result_limit=self.FIND_PEER_RESULT_LIMIT,
            view=self.config.view,
        )
        return [self._peer_path(row) for row in self._rows(query)]

    @staticmethod
    def _peer_path(row: Mapping[str, Any]) -> PeerPath:
        return PeerPath(
            edge_keys=list(row.get("edges") or []),
            vertex_keys=list(row.get("vertices") or []),
            fields=dict(row.get("fields") or {}),
        )
