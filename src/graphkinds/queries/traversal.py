"""AQL composers for multi-hop graph walks.

Every walk starts from a bounded seed set (records picked by key, or the
best hits of a relevance search) and caps the number of rows it returns.

Public API:
    traversal, search_traversal, siblings, peers, search_peers, search_others,
    other_side_hops, peer_hops
"""

from __future__ import annotations

from typing import Iterable

from ..schema import EntityKind
from .base import (
    AqlQuery,
    Direction,
    build,
    hop_range,
    keys_seed,
    path_projection,
    positive,
    projection,
    search_seed,
)


def other_side_hops(distance: int) -> int:
    """Hops needed to land on the opposite side of a bipartite relation.

    Peers on the same side are two hops apart (through the other side), so
    reaching the other side `distance` peers away takes one hop less.
    """
    return 2 * positive(distance, "distance") - 1


def peer_hops(distance: int) -> int:
    """Hops needed to come back to the same side `distance` peers away."""
    return 2 * positive(distance, "distance")


def _walk(direction: Direction, doc: str = "d", vertex: str = "v") -> list[str]:
    return [
        f"  FOR {vertex}, e, p IN @min_hops..@max_hops {direction.value}",
        f"    {doc}",
        "    @@edges",
        "    LIMIT @result_limit",
    ]


def traversal(
    kind: EntityKind,
    edges: str,
    start_keys: Iterable[str],
    min_hops: int,
    max_hops: int,
    direction: Direction,
    *,
    start_limit: int,
    result_limit: int,
) -> AqlQuery:
    """Distinct vertices reachable from the records with `start_keys`."""
    min_hops, max_hops = hop_range(min_hops, max_hops)
    seed, bind_vars = keys_seed(kind)
    bind_vars.update(
        {
            "keys": list(start_keys),
            "start_limit": positive(start_limit, "start_limit"),
            "@edges": edges,
            "min_hops": min_hops,
            "max_hops": max_hops,
            "result_limit": positive(result_limit, "result_limit"),
        }
    )
    return build(*seed, *_walk(direction), "    RETURN DISTINCT v", **bind_vars)


def search_traversal(
    kind: EntityKind,
    edges: str,
    search: str,
    min_hops: int,
    max_hops: int,
    direction: Direction,
    *,
    start_limit: int,
    result_limit: int,
    view: str | None = None,
) -> AqlQuery:
    """Distinct vertices reachable from the best relevance hits for `search`."""
    min_hops, max_hops = hop_range(min_hops, max_hops)
    seed, bind_vars = search_seed(kind, view)
    bind_vars.update(
        {
            "search": search,
            "start_limit": positive(start_limit, "start_limit"),
            "@edges": edges,
            "min_hops": min_hops,
            "max_hops": max_hops,
            "result_limit": positive(result_limit, "result_limit"),
        }
    )
    return build(*seed, *_walk(direction), "    RETURN DISTINCT v", **bind_vars)


def siblings(kind: EntityKind, edges: str, start_keys: Iterable[str], *, result_limit: int) -> AqlQuery:
    """Records sharing a parent with the first matching start record.

    Walks one hop up (OUTBOUND) and one hop down (INBOUND) and returns the
    lowest vertex of each down path, excluding the start record.
    """
    return build(
        "FOR d IN @@collection",
        "  FILTER d._key IN @keys",
        "  LIMIT 1",
        "  FOR up, e_up, p_up IN 1..1 OUTBOUND",
        "    d",
        "    @@edges",
        "    LIMIT @result_limit",
        "    FOR down, e_down, p_down IN 1..1 INBOUND",
        "      LAST(p_up.vertices)",
        "      @@edges",
        "      FILTER down._id != d._id",
        "      LIMIT @result_limit",
        "      RETURN DISTINCT LAST(p_down.vertices)",
        **{
            "@collection": kind.collection_name,
            "@edges": edges,
            "keys": list(start_keys),
            "result_limit": positive(result_limit, "result_limit"),
        },
    )


def _peer_tail(kind: EntityKind) -> list[str]:
    return [
        "  FOR o, e, p IN @min_hops..@max_hops ANY",
        "    d",
        "    @@edges",
        '    OPTIONS { uniqueVertices: "path" }',
        "    LIMIT @result_limit",
        "    COLLECT",
        "      edges = p.edges[*]._key,",
        "      vertices = p.vertices[*]._key,",
        f"      fields = {path_projection(kind.projection_fields)}",
        "    RETURN { edges: edges, vertices: vertices, fields: fields }",
    ]


def peers(
    kind: EntityKind,
    edges: str,
    start_keys: Iterable[str],
    hops: int,
    *,
    start_limit: int,
    result_limit: int,
) -> AqlQuery:
    """Paths of exactly `hops` hops from the start records, aggregated per path."""
    seed, bind_vars = keys_seed(kind)
    bind_vars.update(
        {
            "keys": list(start_keys),
            "start_limit": positive(start_limit, "start_limit"),
            "@edges": edges,
            "min_hops": positive(hops, "hops"),
            "max_hops": hops,
            "result_limit": positive(result_limit, "result_limit"),
        }
    )
    return build(*seed, *_peer_tail(kind), **bind_vars)


def search_peers(
    kind: EntityKind,
    edges: str,
    search: str,
    hops: int,
    *,
    start_limit: int,
    result_limit: int,
    view: str | None = None,
) -> AqlQuery:
    """Like `peers`, seeded by the best relevance hits for `search`."""
    seed, bind_vars = search_seed(kind, view)
    bind_vars.update(
        {
            "search": search,
            "start_limit": positive(start_limit, "start_limit"),
            "@edges": edges,
            "min_hops": positive(hops, "hops"),
            "max_hops": hops,
            "result_limit": positive(result_limit, "result_limit"),
        }
    )
    return build(*seed, *_peer_tail(kind), **bind_vars)


def search_others(
    kind: EntityKind,
    edges: str,
    search: str,
    hops: int,
    *,
    start_limit: int,
    result_limit: int,
    view: str | None = None,
) -> AqlQuery:
    """Relevance hits for `search`, each grouped with the distinct vertices
    `hops` hops away."""
    seed, bind_vars = search_seed(kind, view)
    bind_vars.update(
        {
            "search": search,
            "start_limit": positive(start_limit, "start_limit"),
            "@edges": edges,
            "min_hops": positive(hops, "hops"),
            "max_hops": hops,
            "result_limit": positive(result_limit, "result_limit"),
        }
    )
    fields = kind.projection_fields
    return build(
        *seed,
        *_walk(Direction.ANY),
        f"    COLLECT source = {projection('d', fields)} INTO groups = {projection('v', fields)}",
        "    RETURN { source: source, targets: UNIQUE(groups) }",
        **bind_vars,
    )
