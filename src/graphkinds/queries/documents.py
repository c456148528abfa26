"""AQL composers for single-collection document operations.

Public API:
    point_lookup, field_lookup, full_all, search_by_relevance,
    create, upsert, update, delete, count, truncate, edge_by_nodes,
    force_view_sync
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..exceptions import ConfigurationError
from ..schema import EntityKind, validate_field_path
from .base import DEFAULT_LIMIT, AqlQuery, build, positive, search_seed


def point_lookup(kind: EntityKind, keys: Iterable[str], limit: int) -> AqlQuery:
    """Up to `limit` records whose key is in `keys`."""
    return build(
        "FOR d IN @@collection",
        "  FILTER d._key IN @keys",
        "  LIMIT @limit",
        "  RETURN d",
        **{"@collection": kind.collection_name, "keys": list(keys), "limit": positive(limit, "limit")},
    )


def field_lookup(kind: EntityKind, field: str, value: Any) -> AqlQuery:
    """The first record where `field` equals `value`.

    There may be no unique index on `field`, hence the ``LIMIT 1``.
    """
    path = validate_field_path(field).split(".")
    return build(
        "FOR d IN @@collection",
        "  FILTER d.@field == @value",
        "  LIMIT 1",
        "  RETURN d",
        **{"@collection": kind.collection_name, "field": path, "value": value},
    )


def full_all(
    kind: EntityKind,
    limit: int = DEFAULT_LIMIT,
    *,
    bound: int = DEFAULT_LIMIT,
    unbounded: bool = False,
) -> AqlQuery:
    """Records of the collection, at most `bound` of them unless `unbounded`."""
    if unbounded:
        return build(
            "FOR d IN @@collection",
            "  RETURN d",
            **{"@collection": kind.collection_name},
        )
    return build(
        "FOR d IN @@collection",
        "  LIMIT @limit",
        "  RETURN d",
        **{"@collection": kind.collection_name, "limit": min(positive(limit, "limit"), positive(bound, "bound"))},
    )


def search_by_relevance(kind: EntityKind, text: str, limit: int, view: str | None = None) -> AqlQuery:
    """Full-text search over the kind's view, best matches first."""
    seed, bind_vars = search_seed(kind, view)
    bind_vars.update(search=text, start_limit=positive(limit, "limit"))
    return build(*seed, "  RETURN d", **bind_vars)


def create(kind: EntityKind, data: Mapping[str, Any]) -> AqlQuery:
    """Insert `data`, failing on a key collision instead of overwriting."""
    return build(
        "INSERT @data INTO @@collection",
        '  OPTIONS { overwriteMode: "conflict" }',
        "  RETURN NEW",
        **{"@collection": kind.collection_name, "data": dict(data)},
    )


def upsert(kind: EntityKind, data: Mapping[str, Any], unique_fields: Iterable[str]) -> AqlQuery:
    """Insert `data` or update the record matching its unique fields."""
    fields = sorted(unique_fields)
    if not fields:
        raise ConfigurationError(
            f"Kind '{kind.collection_name}' has no unique fields to upsert on"
        )
    missing = [f for f in fields if data.get(f) is None]
    if missing:
        raise ConfigurationError(
            f"Upsert into '{kind.collection_name}' is missing unique field(s): {', '.join(missing)}"
        )

    return build(
        "UPSERT @match",
        "  INSERT @data",
        "  UPDATE @data",
        "  IN @@collection",
        "  OPTIONS { exclusive: true, ignoreRevs: true }",
        "  RETURN NEW",
        **{
            "@collection": kind.collection_name,
            "match": {f: data[f] for f in fields},
            "data": dict(data),
        },
    )


def update(kind: EntityKind, key: str, data: Mapping[str, Any]) -> AqlQuery:
    """Merge `data` into the record with `key`; no rows when it is absent."""
    return build(
        "FOR d IN @@collection",
        "  FILTER d._key == @key",
        "  UPDATE d WITH @data IN @@collection",
        "  RETURN NEW",
        **{"@collection": kind.collection_name, "key": key, "data": dict(data)},
    )


def delete(kind: EntityKind, key: str) -> AqlQuery:
    """Remove the record with `key`; no rows when it is already gone."""
    return build(
        "REMOVE { _key: @key } IN @@collection",
        "  OPTIONS { ignoreErrors: true }",
        "  RETURN OLD._key",
        **{"@collection": kind.collection_name, "key": key},
    )


def count(kind: EntityKind) -> AqlQuery:
    return build("RETURN LENGTH(@@collection)", **{"@collection": kind.collection_name})


def truncate(kind: EntityKind) -> AqlQuery:
    return build(
        "FOR d IN @@collection",
        "  REMOVE d IN @@collection",
        **{"@collection": kind.collection_name},
    )


def edge_by_nodes(kind: EntityKind, from_id: str, to_id: str) -> AqlQuery:
    """The first edge connecting `from_id` to `to_id`.

    The store may hold no unique index on the endpoint pair, hence ``LIMIT 1``.
    """
    if not kind.is_edge:
        raise ConfigurationError(f"Kind '{kind.collection_name}' is not an edge kind")
    return build(
        "FOR d IN @@collection",
        "  FILTER d._from == @from AND d._to == @to",
        "  LIMIT 1",
        "  RETURN d",
        **{"@collection": kind.collection_name, "from": from_id, "to": to_id},
    )


def force_view_sync(view: str) -> AqlQuery:
    """Block until pending writes are visible in the search view."""
    return build(
        "FOR d IN @@view",
        "  SEARCH true OPTIONS { waitForSync: true }",
        "  LIMIT 1",
        "  RETURN d._key",
        **{"@view": view},
    )
