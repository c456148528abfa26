from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True, slots=True)
class Entity:
    """A record read from a node collection.

    `key` is the caller-visible identifier, unique within its collection;
    `id` is the fully qualified ``collection/key`` reference and `rev` the
    revision token assigned by the store on write. Every other attribute
    lives in `features`, a read-only view over a private copy; use
    `to_json()` for a mutable dict.
    """

    id: str
    key: str
    rev: str | None = None
    features: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "features", MappingProxyType(dict(self.features)))

    @property
    def collection(self) -> str:
        return self.id.split("/", 1)[0]

    def get(self, name: str, default: Any = None) -> Any:
        return self.features.get(name, default)

    def to_json(self) -> dict[str, Any]:
        return dict(self.features)


@dataclass(frozen=True, slots=True)
class EdgeEntity(Entity):
    """A record read from an edge collection, connecting two node ids."""

    from_id: str = ""
    to_id: str = ""


@dataclass(frozen=True, slots=True)
class PeerPath:
    """One aggregated path returned by a bipartite peer traversal.

    `fields` maps each projected attribute to its values along the path,
    aligned with `vertex_keys`.
    """

    edge_keys: list[str]
    vertex_keys: list[str]
    fields: dict[str, list[Any]] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class OtherGroup:
    """A search hit and the distinct records reached on the other side."""

    source: dict[str, Any]
    targets: list[dict[str, Any]] = field(default_factory=list)
