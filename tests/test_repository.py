"""Tests for EntityRepository and EdgeRepository against a recording connection.

Test categories:
- TestLookups: by_key, by_keys, by_field, by_label, row mapping
- TestBoundedFetches: all, all_unbounded, count
- TestSearch: find_many, find_one, configuration errors
- TestWrites: create, upsert, update, delete
- TestReadiness: lazy one-time handle resolution, drop, None cursors
- TestEdgeRepository: edge kinds, endpoint mapping, by_nodes, create_between
"""

from __future__ import annotations

import logging
import threading
import time

import pytest

from conftest import doc, edge
from graphkinds.exceptions import ConfigurationError, StoreError
from graphkinds.models import EdgeEntity, Entity
from graphkinds.repository import EdgeRepository, EntityRepository, repository_for


class TestLookups:
    def test_by_key_absent_returns_none(self, skills, connection):
        assert skills.by_key("missing") is None
        text, binds = connection.queries[0]
        assert binds["keys"] == ["missing"]
        assert binds["limit"] == 1

    def test_by_key_maps_row(self, skills, connection):
        connection.script([doc("skills", "go", title="Go", level=3)])
        entity = skills.by_key("go")
        assert entity == Entity(
            id="skills/go", key="go", rev="rev-go", features={"title": "Go", "level": 3}
        )
        assert entity.collection == "skills"
        assert entity.get("level") == 3
        assert entity.to_json() == {"title": "Go", "level": 3}

    def test_features_are_read_only(self, skills, connection):
        source = doc("skills", "go", title="Go", level=3)
        connection.script([source])
        entity = skills.by_key("go")
        with pytest.raises(TypeError):
            entity.features["level"] = 4
        source["level"] = 9
        copy = entity.to_json()
        copy["level"] = 5
        assert entity.get("level") == 3

    def test_by_keys_empty_makes_no_calls(self, skills, connection):
        assert skills.by_keys([]) == []
        assert connection.calls == []

    def test_by_keys_limit_defaults_to_key_count(self, skills, connection):
        connection.script([doc("skills", "a"), doc("skills", "b")])
        found = skills.by_keys(["a", "b", "c"])
        assert [e.key for e in found] == ["a", "b"]
        assert connection.queries[0][1]["limit"] == 3

    def test_by_label_uses_label_field(self, skills, connection):
        connection.script([doc("skills", "go", title="Go")])
        assert skills.by_label("Go").key == "go"
        assert connection.queries[0][1]["field"] == ["title"]
        assert connection.queries[0][1]["value"] == "Go"

    def test_by_field_absent(self, skills):
        assert skills.by_field("title", "Cobol") is None

    def test_null_rows_are_skipped(self, skills, connection):
        connection.script([None, doc("skills", "go")])
        assert [e.key for e in skills.by_keys(["x", "go"])] == ["go"]


class TestBoundedFetches:
    def test_all_is_clamped_to_default_limit(self, skill_kind, connection):
        repo = EntityRepository(skill_kind, connection, default_limit=5)
        repo.all(100)
        repo.all()
        assert connection.queries[0][1]["limit"] == 5
        assert connection.queries[1][1]["limit"] == 5

    def test_all_smaller_limit(self, skills, connection):
        skills.all(3)
        assert connection.queries[0][1]["limit"] == 3

    def test_all_unbounded(self, skills, connection):
        connection.script([doc("skills", str(i)) for i in range(100)])
        assert len(skills.all_unbounded()) == 100
        assert "LIMIT" not in connection.queries[0][0]

    def test_count(self, skills, connection):
        connection.script([7])
        assert skills.count() == 7

    def test_count_empty_result(self, skills):
        assert skills.count() == 0

    def test_indexes(self, skills, connection):
        connection.indexes["skills"] = [{"type": "primary", "fields": ["_key"]}]
        assert skills.indexes() == [{"type": "primary", "fields": ["_key"]}]


class TestSearch:
    def test_find_many_passes_limit(self, skills, connection):
        connection.script([doc("skills", "ml", title="Machine learning")])
        found = skills.find_many("machine learning", 5)
        assert [e.key for e in found] == ["ml"]
        assert connection.queries[0][1]["start_limit"] == 5
        assert connection.queries[0][1]["@view"] == "skills_view"

    def test_find_many_default_limit(self, skills, connection):
        skills.find_many("go")
        assert connection.queries[0][1]["start_limit"] == 10

    def test_find_one(self, skills, connection):
        connection.script([doc("skills", "go")])
        assert skills.find_one("go").key == "go"
        assert connection.queries[0][1]["start_limit"] == 1

    def test_find_one_no_hit(self, skills):
        assert skills.find_one("nothing") is None

    def test_find_many_without_search_fields(self, bare_kind, connection):
        repo = EntityRepository(bare_kind, connection)
        with pytest.raises(ConfigurationError):
            repo.find_many("go")
        assert connection.calls == []


class TestWrites:
    def test_create(self, skills, connection):
        connection.script([doc("skills", "go", title="Go")])
        created = skills.create({"title": "Go"})
        assert created.key == "go"
        assert connection.queries[0][1]["data"] == {"title": "Go"}

    def test_create_conflict_propagates(self, skills, connection):
        connection.script(StoreError("unique constraint violated"))
        with pytest.raises(StoreError):
            skills.create({"_key": "go", "title": "Go"})

    def test_upsert_returns_stored_record(self, skills, connection):
        connection.script([doc("skills", "go", title="Go", level=5)])
        stored = skills.upsert({"title": "Go", "level": 5})
        assert stored.get("level") == 5
        assert connection.queries[0][1]["match"] == {"title": "Go"}

    def test_upsert_missing_unique_field_makes_no_calls(self, skills, connection):
        with pytest.raises(ConfigurationError):
            skills.upsert({"level": 5})
        assert connection.calls == []

    def test_update_with_empty_data_returns_record(self, skills, connection):
        connection.script([doc("skills", "go", title="Go")])
        assert skills.update("go", {}).key == "go"
        assert connection.queries[0][1]["data"] == {}

    def test_update_absent(self, skills):
        assert skills.update("missing", {"level": 1}) is None

    def test_delete_absent_issues_no_remove(self, skills, connection):
        assert skills.delete("missing") is None
        assert len(connection.queries) == 1
        assert "REMOVE" not in connection.queries[0][0]

    def test_delete_present(self, skills, connection):
        connection.script([doc("skills", "go")], ["go"])
        assert skills.delete("go") == "go"
        assert "REMOVE" in connection.queries[1][0]

    def test_delete_raced_by_concurrent_removal(self, skills, connection):
        connection.script([doc("skills", "go")], [])
        assert skills.delete("go") is None
        assert "ignoreErrors: true" in connection.queries[1][0]


class TestReadiness:
    def test_handles_resolved_once(self, skills, connection):
        skills.by_key("a")
        skills.by_key("b")
        skills.find_many("c")
        assert connection.calls_to("resolve_collection") == ["skills"]
        assert connection.calls_to("resolve_view") == ["skills_view"]
        handles = skills.ensure_ready()
        assert handles.collection == "collection:skills"
        assert handles.view == "view:skills_view"

    def test_kind_without_view_resolves_collection_only(self, bare_kind, connection):
        EntityRepository(bare_kind, connection).ensure_ready()
        assert connection.calls_to("resolve_view") == []

    def test_concurrent_first_use_resolves_once(self, skill_kind, connection):
        original = connection.resolve_collection

        def slow_resolve(name):
            time.sleep(0.05)
            return original(name)

        connection.resolve_collection = slow_resolve
        repo = EntityRepository(skill_kind, connection)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(repo.ensure_ready())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert connection.calls_to("resolve_collection") == ["skills"]
        assert len({id(h) for h in results}) == 1

    def test_resolution_failure_propagates_and_retries(self, skill_kind, connection):
        calls = []

        def failing(name):
            calls.append(name)
            raise StoreError(f"Collection '{name}' does not exist")

        connection.resolve_collection = failing
        repo = EntityRepository(skill_kind, connection)
        with pytest.raises(StoreError):
            repo.by_key("go")
        with pytest.raises(StoreError):
            repo.by_key("go")
        assert calls == ["skills", "skills"]

    def test_drop_resets_handles(self, skills, connection):
        skills.ensure_ready()
        assert skills.drop() is True
        skills.ensure_ready()
        assert connection.calls_to("drop_collection") == ["skills"]
        assert connection.calls_to("resolve_collection") == ["skills", "skills"]

    def test_drop_missing_collection(self, skills, connection):
        connection.missing.add("skills")
        assert skills.drop() is False

    def test_none_cursor_is_empty_result(self, skills, connection, caplog):
        connection.script(None)
        with caplog.at_level(logging.ERROR, logger="graphkinds.repository"):
            assert skills.by_key("go") is None
        assert "no cursor" in caplog.text

    def test_truncate(self, skills, connection):
        skills.truncate()
        assert "REMOVE d IN @@collection" in connection.queries[0][0]


class TestEdgeRepository:
    def test_rejects_node_kind(self, skill_kind, connection):
        with pytest.raises(ConfigurationError):
            EdgeRepository(skill_kind, connection)

    def test_resolves_edge_collection(self, links, connection):
        links.ensure_ready()
        assert connection.calls_to("resolve_edge_collection") == ["job_skill"]
        assert connection.calls_to("resolve_collection") == []

    def test_map_row_includes_endpoints(self, links, connection):
        connection.script([edge("job_skill", "e1", "jobs/1", "skills/go", weight=2)])
        found = links.by_key("e1")
        assert isinstance(found, EdgeEntity)
        assert found.from_id == "jobs/1"
        assert found.to_id == "skills/go"
        assert found.features == {"weight": 2}

    def test_by_nodes(self, links, connection):
        assert links.by_nodes("jobs/1", "skills/go") is None
        binds = connection.queries[0][1]
        assert (binds["from"], binds["to"]) == ("jobs/1", "skills/go")

    def test_create_between(self, links, connection):
        connection.script([edge("job_skill", "e1", "jobs/1", "skills/go", weight=2)])
        created = links.create_between("jobs/1", "skills/go", {"weight": 2})
        assert created.key == "e1"
        assert connection.queries[0][1]["data"] == {
            "weight": 2,
            "_from": "jobs/1",
            "_to": "skills/go",
        }

    def test_repository_for(self, skill_kind, link_kind, connection):
        assert type(repository_for(skill_kind, connection)) is EntityRepository
        assert type(repository_for(link_kind, connection)) is EdgeRepository
