"""
graphkinds - typed entity kinds, traversals and hyperedges over ArangoDB
"""

from __future__ import annotations

import logging

from .capabilities import (
    Bipartite,
    BipartiteConfig,
    Capability,
    Hierarchy,
    HierarchyConfig,
    Related,
    RelatedConfig,
)
from .db import ArangoConnection, Connection
from .exceptions import (
    CompositionStepError,
    ConfigurationError,
    GraphKindsError,
    PartialCompositionError,
    RelationNotConfiguredError,
    StoreError,
)
from .hyperedge import CompositionResult, HyperedgeComposer, HyperedgeComposite, InfoEdgePolicy
from .models import EdgeEntity, Entity, OtherGroup, PeerPath
from .repository import EdgeRepository, EntityRepository, repository_for
from .schema import CollectionType, EntityKind, TraversalRegistry
from .settings import GraphKindsSettings, settings

__version__ = "0.1.0"


def configure_logging(level: str | None = None) -> None:
    level = (level or settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


__all__ = [
    "ArangoConnection",
    "Bipartite",
    "BipartiteConfig",
    "Capability",
    "CollectionType",
    "CompositionResult",
    "CompositionStepError",
    "ConfigurationError",
    "Connection",
    "EdgeEntity",
    "EdgeRepository",
    "Entity",
    "EntityKind",
    "EntityRepository",
    "GraphKindsError",
    "GraphKindsSettings",
    "Hierarchy",
    "HierarchyConfig",
    "HyperedgeComposer",
    "HyperedgeComposite",
    "InfoEdgePolicy",
    "OtherGroup",
    "PartialCompositionError",
    "PeerPath",
    "Related",
    "RelatedConfig",
    "RelationNotConfiguredError",
    "StoreError",
    "TraversalRegistry",
    "configure_logging",
    "repository_for",
    "settings",
]
