"""Building blocks shared by the AQL composers.

Collections, edge collections and views always travel as ``@@`` bind
parameters and caller values as ordinary bind parameters. The only text
spliced into a query is field paths from an EntityKind (validated
identifiers), the scorer name and a traversal direction keyword.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, NamedTuple

from ..exceptions import ConfigurationError
from ..schema import EntityKind, validate_field_path

DOC = "d"

#: Hard bound applied to `all` fetches unless the caller opts out.
DEFAULT_LIMIT = 30

#: Boost factor for an exact match of the first token on the primary field.
PRIMARY_BOOST = 2


class AqlQuery(NamedTuple):
    """A composed query: AQL text plus its bind parameters."""

    text: str
    bind_vars: dict[str, Any]


class Direction(Enum):
    """Edge direction for traversals, spelled as AQL keywords."""

    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"
    ANY = "ANY"


def build(*lines: str, **bind_vars: Any) -> AqlQuery:
    """Join non-empty query lines and wrap them with their bind parameters."""
    text = "\n".join(line for line in lines if line)
    return AqlQuery(text=text, bind_vars=bind_vars)


def positive(value: int, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool) or value < 1:
        raise ConfigurationError(f"'{name}' must be a positive integer, got {value!r}")
    return value


def hop_range(min_hops: int, max_hops: int) -> tuple[int, int]:
    if min_hops < 0 or max_hops < min_hops:
        raise ConfigurationError(f"Invalid hop range {min_hops}..{max_hops}")
    return min_hops, max_hops


def search_block(kind: EntityKind, doc: str = DOC) -> str:
    """Render the SEARCH clause matching `keywords` against every search field.

    The primary (first) search field receives a boost when it equals the
    first token exactly.
    """
    fields = kind.require_search_fields()
    matches = " OR ".join(f"{doc}.{path} IN keywords" for path in fields)
    boost = f"BOOST({doc}.{fields[0]} == keywords[0], {PRIMARY_BOOST})"
    return f"SEARCH ANALYZER({matches} OR {boost}, @analyzer)"


def search_seed(kind: EntityKind, view: str | None = None, doc: str = DOC) -> tuple[list[str], dict[str, Any]]:
    """Lines and bind parameters opening a relevance-ranked loop over a view.

    The caller supplies ``@search`` and ``@start_limit``.
    """
    block = search_block(kind, doc)
    lines = [
        "LET keywords = TOKENS(@search, @analyzer)",
        f"FOR {doc} IN @@view",
        f"  {block}",
        f"  SORT {kind.scorer}({doc}) DESC",
        "  LIMIT @start_limit",
    ]
    return lines, {"@view": kind.require_view(view), "analyzer": kind.analyzer}


def keys_seed(kind: EntityKind, doc: str = DOC) -> tuple[list[str], dict[str, Any]]:
    """Lines and bind parameters opening a loop over records picked by key.

    The caller supplies ``@keys`` and ``@start_limit``.
    """
    lines = [
        f"FOR {doc} IN @@collection",
        f"  FILTER {doc}._key IN @keys",
        "  LIMIT @start_limit",
    ]
    return lines, {"@collection": kind.collection_name}


def projection(var: str, fields: tuple[str, ...]) -> str:
    """Object literal picking `fields` (plus identity) from `var`, or `var` itself."""
    if not fields:
        return var
    parts = [f"_key: {var}._key", f"_id: {var}._id"]
    parts.extend(f'"{validate_field_path(f)}": {var}.{f}' for f in fields)
    return "{ " + ", ".join(parts) + " }"


def path_projection(fields: tuple[str, ...]) -> str:
    """Object literal collecting each field's values along a path `p`."""
    parts = [f'"{validate_field_path(f)}": p.vertices[*].{f}' for f in fields]
    return "{ " + ", ".join(parts) + " }"
