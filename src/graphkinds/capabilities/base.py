from __future__ import annotations

from typing import Any

from ..models import Entity
from ..queries import AqlQuery
from ..repository import EntityRepository
from ..schema import EntityKind, TraversalRegistry


class Capability:
    """Adds traversal operations on top of a repository without touching it.

    Capabilities wrap a repository or another capability; attribute lookups
    they cannot answer fall through to the wrapped object, so stacking
    ``Related(Hierarchy(repo, ...), ...)`` keeps every operation reachable.
    """

    def __init__(self, base: EntityRepository | "Capability", registry: TraversalRegistry) -> None:
        self.base = base
        self.registry = registry

    def __getattr__(self, name: str) -> Any:
        if name == "base":
            raise AttributeError(name)
        return getattr(self.base, name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.base!r})"

    @property
    def repository(self) -> EntityRepository:
        base = self.base
        while isinstance(base, Capability):
            base = base.base
        return base

    @property
    def kind(self) -> EntityKind:
        return self.repository.kind

    def _entities(self, query: AqlQuery) -> list[Entity]:
        repo = self.repository
        repo.ensure_ready()
        return [repo.map_row(row) for row in repo.execute(query) if row]

    def _rows(self, query: AqlQuery) -> list[Any]:
        repo = self.repository
        repo.ensure_ready()
        return [row for row in repo.execute(query) if row]
