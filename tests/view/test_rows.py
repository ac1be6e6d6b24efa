"""Tests for list-view row computation."""

import pytest

from orgtree.tree.mutations import toggle_expand
from orgtree.view.rows import visible_rows


def _ids(rows):
    return [row.node_id for row in rows]


class TestUnfiltered:
    def test_all_expanded_shows_every_node(self, org_store):
        assert _ids(visible_rows(org_store)) == ["g1", "g2", "r1", "g3", "r2", "g4"]

    def test_collapsed_node_hides_children(self, org_store):
        store = toggle_expand(org_store, "g2").store
        rows = visible_rows(store)
        assert _ids(rows) == ["g1", "g2", "g3", "r2", "g4"]
        assert rows[1].expanded is False
        assert rows[1].has_children is True

    def test_collapsed_root_hides_whole_subtree(self, org_store):
        store = toggle_expand(org_store, "g1").store
        assert _ids(visible_rows(store)) == ["g1", "g4"]

    def test_row_fields(self, org_store):
        row = visible_rows(org_store, selected_id="r1")[2]
        assert row.to_dict() == {
            "node_id": "r1",
            "kind": "role",
            "name": "Developer",
            "depth": 2,
            "expanded": True,
            "editing": True,
            "has_children": False,
            "selected": True,
            "matched": True,
        }


class TestSearch:
    def test_match_shows_ancestors(self, org_store):
        rows = visible_rows(org_store, search="design")
        assert _ids(rows) == ["g1", "g3", "r2"]
        assert [row.matched for row in rows] == [False, False, True]

    def test_search_is_case_insensitive_and_trimmed(self, org_store):
        assert _ids(visible_rows(org_store, search="  BACKEND ")) == ["g1", "g2"]

    def test_match_inside_collapsed_subtree_is_reachable(self, org_store):
        store = toggle_expand(org_store, "g1").store
        rows = visible_rows(store, search="developer")
        assert _ids(rows) == ["g1", "g2", "r1"]
        assert rows[0].expanded is True

    def test_no_match_gives_no_rows(self, org_store):
        assert visible_rows(org_store, search="finance") == []


class TestKindFilter:
    def test_roles_only(self, org_store):
        rows = visible_rows(org_store, kind_filter="roles")
        assert [r.node_id for r in rows if r.matched] == ["r1", "r2"]

    def test_groups_only(self, org_store):
        rows = visible_rows(org_store, kind_filter="groups")
        assert _ids(rows) == ["g1", "g2", "g3", "g4"]
        assert all(row.matched for row in rows)

    def test_kind_and_search_combine(self, org_store):
        rows = visible_rows(org_store, search="e", kind_filter="roles")
        assert [r.node_id for r in rows if r.matched] == ["r1", "r2"]
        rows = visible_rows(org_store, search="sales", kind_filter="roles")
        assert rows == []

    def test_unknown_filter_raises(self, org_store):
        with pytest.raises(ValueError, match="Unknown kind filter"):
            visible_rows(org_store, kind_filter="people")
