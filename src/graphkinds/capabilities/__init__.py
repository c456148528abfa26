"""Traversal capabilities attachable to any node kind.

Public API:
    Capability: Base wrapper forwarding to the wrapped repository.
    Hierarchy / HierarchyConfig: sub, super and sibling traversal.
    Bipartite / BipartiteConfig: other-side and peer traversal.
    Related / RelatedConfig: undirected relatedness.
"""

from .base import Capability
from .bipartite import Bipartite, BipartiteConfig
from .hierarchy import HIERARCHY, Hierarchy, HierarchyConfig
from .related import RELATED, Related, RelatedConfig

__all__ = [
    "Capability",
    "Bipartite",
    "BipartiteConfig",
    "HIERARCHY",
    "Hierarchy",
    "HierarchyConfig",
    "RELATED",
    "Related",
    "RelatedConfig",
]
