"""Pytest configuration and fixtures for graphkinds tests.

Unit tests never reach a store: they run against RecordingConnection,
which records every call and answers queries from a script.
"""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Callable

import pytest

from graphkinds.db.base import Connection
from graphkinds.repository import EdgeRepository, EntityRepository
from graphkinds.schema import CollectionType, EntityKind, TraversalRegistry


class RecordingConnection(Connection):
    """Connection test double.

    Each `execute_query` call answers with, in order of precedence:
    the next scripted response (an Exception instance is raised, anything
    else returned as is), the result of `responder(text, bind_vars)`, or
    an empty result.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.queries: list[tuple[str, dict[str, Any]]] = []
        self.responses: deque[Any] = deque()
        self.responder: Callable[[str, dict[str, Any]], Any] | None = None
        self.missing: set[str] = set()
        self.indexes: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def script(self, *responses: Any) -> "RecordingConnection":
        self.responses.extend(responses)
        return self

    def _record(self, method: str, arg: Any) -> None:
        with self._lock:
            self.calls.append((method, arg))

    def calls_to(self, method: str) -> list[Any]:
        return [arg for name, arg in self.calls if name == method]

    def resolve_collection(self, name: str) -> Any:
        self._record("resolve_collection", name)
        return f"collection:{name}"

    def resolve_edge_collection(self, name: str) -> Any:
        self._record("resolve_edge_collection", name)
        return f"edges:{name}"

    def resolve_view(self, name: str) -> Any:
        self._record("resolve_view", name)
        return f"view:{name}"

    def execute_query(self, query, bind_vars=None):
        bind_vars = dict(bind_vars or {})
        self._record("execute_query", query)
        with self._lock:
            self.queries.append((query, bind_vars))
            scripted = self.responses.popleft() if self.responses else _UNSET
        if scripted is _UNSET:
            scripted = self.responder(query, bind_vars) if self.responder else []
        if isinstance(scripted, BaseException):
            raise scripted
        return scripted

    def drop_collection(self, name: str) -> bool:
        self._record("drop_collection", name)
        return name not in self.missing

    def list_indexes(self, name: str):
        self._record("list_indexes", name)
        return list(self.indexes.get(name, []))


_UNSET = object()


def doc(collection: str, key: str, **features: Any) -> dict[str, Any]:
    """A raw document as the store would return it."""
    return {"_id": f"{collection}/{key}", "_key": key, "_rev": f"rev-{key}", **features}


def edge(collection: str, key: str, from_id: str, to_id: str, **features: Any) -> dict[str, Any]:
    return {**doc(collection, key, **features), "_from": from_id, "_to": to_id}


# ── fixtures ──────────────────────────────────────────────────


@pytest.fixture
def connection():
    return RecordingConnection()


@pytest.fixture
def registry():
    return TraversalRegistry()


@pytest.fixture
def skill_kind():
    return EntityKind(
        collection_name="skills",
        label_field="title",
        search_fields=("title", "description"),
        unique_fields={"title"},
        projection_fields=("title",),
        view_name="skills_view",
    )


@pytest.fixture
def job_kind():
    return EntityKind(
        collection_name="jobs",
        label_field="name",
        search_fields=("name",),
        unique_fields={"name"},
        projection_fields=("name",),
        view_name="jobs_view",
    )


@pytest.fixture
def bare_kind():
    """A kind with no search fields, unique fields or view."""
    return EntityKind(collection_name="notes")


@pytest.fixture
def link_kind():
    return EntityKind(collection_name="job_skill", collection_type=CollectionType.EDGE)


@pytest.fixture
def skills(skill_kind, connection):
    return EntityRepository(skill_kind, connection)


@pytest.fixture
def jobs(job_kind, connection):
    return EntityRepository(job_kind, connection)


@pytest.fixture
def links(link_kind, connection):
    return EdgeRepository(link_kind, connection)
