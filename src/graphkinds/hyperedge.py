"""Hyperedges spanning three nodes through a synthetic hub node.

A hyperedge is purely logical: a hub record plus three edges

    from_node --from_edge--> hub
    info_node --info_edge--> hub
    hub       --to_edge----> to_node

It has no collection of its own and cannot be queried back; it only exists
as the value returned by `HyperedgeComposer.compose`.

The four records are written one after another, not in a transaction.
A failing step, or one the store answers with no record, is recorded
and the remaining steps still run; nothing is rolled back. Callers
inspect `CompositionResult.errors` and clean up themselves if they need to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Mapping

from .exceptions import (
    CompositionStepError,
    ConfigurationError,
    PartialCompositionError,
    StoreError,
)
from .models import EdgeEntity, Entity
from .repository import EdgeRepository, EntityRepository

logger = logging.getLogger(__name__)


class InfoEdgePolicy(Enum):
    """How the info edge is resolved.

    ALWAYS_CREATE suits info edges without a uniqueness guarantee on their
    endpoints: every composition adds a new edge and duplicates are fine.
    LOOKUP_OR_CREATE reuses an existing edge between the same endpoints.
    """

    ALWAYS_CREATE = "always_create"
    LOOKUP_OR_CREATE = "lookup_or_create"


@dataclass
class HyperedgeComposite:
    """Best-effort aggregate; unresolved parts are None."""

    from_node: Entity
    info_node: Entity
    to_node: Entity
    hub: Entity | None = None
    from_edge: EdgeEntity | None = None
    info_edge: EdgeEntity | None = None
    to_edge: EdgeEntity | None = None

    @property
    def complete(self) -> bool:
        return None not in (self.hub, self.from_edge, self.info_edge, self.to_edge)


@dataclass
class CompositionResult:
    composite: HyperedgeComposite
    errors: list[CompositionStepError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def error(self) -> PartialCompositionError | None:
        return PartialCompositionError(self.errors) if self.errors else None

    def raise_for_errors(self) -> HyperedgeComposite:
        if self.errors:
            raise PartialCompositionError(self.errors)
        return self.composite


class HyperedgeComposer:
    """Creates and attaches the records of a three-node hyperedge.

    Args:
        hub: Repository of the hub kind. Its kind must declare unique
            fields, since the hub is resolved by upsert.
        from_edges: Edge repository for ``from_node -> hub``.
        info_edges: Edge repository for ``info_node -> hub``.
        to_edges: Edge repository for ``hub -> to_node``.
        info_edge_policy: Whether the info edge is looked up before creation.
    """

    def __init__(
        self,
        hub: EntityRepository,
        from_edges: EdgeRepository,
        info_edges: EdgeRepository,
        to_edges: EdgeRepository,
        info_edge_policy: InfoEdgePolicy = InfoEdgePolicy.ALWAYS_CREATE,
    ) -> None:
        if not hub.kind.unique_fields:
            raise ConfigurationError(
                f"Hub kind '{hub.kind.collection_name}' needs unique fields to be upserted"
            )
        for repo in (from_edges, info_edges, to_edges):
            if not repo.kind.is_edge:
                raise ConfigurationError(f"'{repo.kind.collection_name}' is not an edge kind")
        self.hub = hub
        self.from_edges = from_edges
        self.info_edges = info_edges
        self.to_edges = to_edges
        self.info_edge_policy = info_edge_policy

    def compose(
        self,
        from_node: Entity,
        info_node: Entity,
        to_node: Entity,
        hub_features: Mapping[str, Any],
        info_edge_features: Mapping[str, Any] | None = None,
    ) -> CompositionResult:
        """Resolve the hub and the three edges; report per-step failures.

        Raises:
            ConfigurationError: A node reference is missing, or
                `hub_features` lacks a unique field of the hub kind. Nothing
                has been written in that case.
        """
        for name, node in (("from_node", from_node), ("info_node", info_node), ("to_node", to_node)):
            if node is None or not node.id:
                raise ConfigurationError(f"Hyperedge requires an existing {name}")
        missing = [f for f in sorted(self.hub.kind.unique_fields) if hub_features.get(f) is None]
        if missing:
            raise ConfigurationError(f"Hub features lack unique field(s): {', '.join(missing)}")

        composite = HyperedgeComposite(from_node=from_node, info_node=info_node, to_node=to_node)
        errors: list[CompositionStepError] = []

        def attempt(step: str, action: Callable[[], Any]) -> Any:
            try:
                record = action()
                if record is not None:
                    return record
                errors.append(CompositionStepError(step, "store returned no record"))
            except CompositionStepError as e:
                errors.append(e)
            except StoreError as e:
                errors.append(CompositionStepError(step, str(e), cause=e))
            logger.warning("Hyperedge step '%s' failed: %s", step, errors[-1])
            return None

        composite.hub = attempt("hub", lambda: self.hub.upsert(hub_features))

        def hub_id(step: str) -> str:
            if composite.hub is None:
                raise CompositionStepError(step, "hub node is unresolved")
            return composite.hub.id

        composite.from_edge = attempt(
            "from_edge",
            lambda: self._lookup_or_create(self.from_edges, from_node.id, hub_id("from_edge")),
        )
        composite.info_edge = attempt(
            "info_edge",
            lambda: self._resolve_info_edge(info_node.id, hub_id("info_edge"), info_edge_features),
        )
        composite.to_edge = attempt(
            "to_edge",
            lambda: self._lookup_or_create(self.to_edges, hub_id("to_edge"), to_node.id),
        )

        return CompositionResult(composite=composite, errors=errors)

    def _resolve_info_edge(
        self, from_id: str, to_id: str, features: Mapping[str, Any] | None
    ) -> EdgeEntity | None:
        if self.info_edge_policy is InfoEdgePolicy.ALWAYS_CREATE:
            return self.info_edges.create_between(from_id, to_id, features)
        return self._lookup_or_create(self.info_edges, from_id, to_id, features)

    @staticmethod
    def _lookup_or_create(
        edges: EdgeRepository,
        from_id: str,
        to_id: str,
        features: Mapping[str, Any] | None = None,
    ) -> EdgeEntity | None:
        existing = edges.by_nodes(from_id, to_id)
        if existing is not None:
            return existing
        return edges.create_between(from_id, to_id, features)

    # ── maintenance ───────────────────────────────────────────

    def count(self) -> int:
        """Number of hyperedges, i.e. of hub records."""
        return self.hub.count()

    def truncate_all(self) -> None:
        for repo in self._repositories():
            repo.truncate()

    def drop_all(self) -> None:
        for repo in self._repositories():
            repo.drop()

    def _repositories(self) -> tuple[EntityRepository, ...]:
        return (self.hub, self.from_edges, self.info_edges, self.to_edges)


__all__ = [
    "CompositionResult",
    "HyperedgeComposer",
    "HyperedgeComposite",
    "InfoEdgePolicy",
]
