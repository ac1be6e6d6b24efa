"""Tests for NodeStore lookup, iteration and invariant checking."""

import pytest

from orgtree.tree import NodeKind, NodeStore, NotFound, OrgNode, check_invariants
from orgtree.tree.store import MAX_DEPTH, seed_counters


class TestLookup:
    """Tests for find_by_id / get / contains."""

    def test_find_by_id_returns_node(self, org_store):
        node = org_store.find_by_id("g2")
        assert node.name == "Backend"
        assert node.kind is NodeKind.GROUP
        assert node.depth == 1

    def test_find_by_id_missing_raises_not_found(self, org_store):
        with pytest.raises(NotFound) as exc_info:
            org_store.find_by_id("g99")
        assert exc_info.value.node_id == "g99"

    def test_not_found_is_a_key_error(self, org_store):
        with pytest.raises(KeyError):
            org_store.find_by_id("nope")

    def test_get_returns_none_for_missing(self, org_store):
        assert org_store.get("nope") is None
        assert org_store.get("r1").name == "Developer"

    def test_contains(self, org_store):
        assert "r2" in org_store
        assert "r3" not in org_store
        assert org_store.contains("g4")


class TestPaths:
    """Tests for path_to / parent_of / is_descendant."""

    def test_path_to_root_is_empty(self, org_store):
        assert org_store.path_to("g1") == []

    def test_path_to_nested_node_is_root_first(self, org_store):
        assert org_store.path_to("r1") == ["g1", "g2"]

    def test_path_to_missing_raises(self, org_store):
        with pytest.raises(NotFound):
            org_store.path_to("missing")

    def test_parent_of(self, org_store):
        assert org_store.parent_of("g1") is None
        assert org_store.parent_of("r2").id == "g3"

    def test_is_descendant(self, org_store):
        assert org_store.is_descendant("g1", "r1")
        assert not org_store.is_descendant("g2", "r2")
        assert not org_store.is_descendant("g1", "g1")
        assert not org_store.is_descendant("g1", "missing")


class TestIteration:
    """Tests for flatten / all_nodes / counts."""

    def test_flatten_is_preorder_with_depths(self, org_store):
        flat = [(node.id, depth) for node, depth in org_store.flatten()]
        assert flat == [
            ("g1", 0),
            ("g2", 1),
            ("r1", 2),
            ("g3", 1),
            ("r2", 2),
            ("g4", 0),
        ]

    def test_counts(self, org_store):
        assert org_store.node_count() == 6
        assert org_store.root_count() == 2

    def test_iter_edges(self, org_store):
        assert list(org_store.iter_edges()) == [
            ("g1", "g2"),
            ("g1", "g3"),
            ("g2", "r1"),
            ("g3", "r2"),
        ]

    def test_empty_store(self, empty_store):
        assert empty_store.node_count() == 0
        assert empty_store.flatten() == []


class TestViewState:
    """The view side-table defaults to expanded, not editing."""

    def test_unknown_id_uses_defaults(self, empty_store):
        view = empty_store.view_of("anything")
        assert view.expanded is True
        assert view.editing is False


class TestStructuralEquality:
    def test_equal_ignores_view_state(self, org_store):
        other = NodeStore(roots=org_store.roots)
        assert org_store.structurally_equal(other)

    def test_different_names_are_not_equal(self, org_store):
        renamed = NodeStore(
            roots=(OrgNode("g1", NodeKind.GROUP, "Other"),) + org_store.roots[1:]
        )
        assert not org_store.structurally_equal(renamed)


class TestIdAllocation:
    def test_ids_are_per_kind_sequences(self, empty_store):
        group_id, counters = empty_store.allocate_id(NodeKind.GROUP)
        assert group_id == "g1"
        store = NodeStore(counters=counters)
        role_id, _ = store.allocate_id(NodeKind.ROLE)
        assert role_id == "r1"

    def test_allocation_skips_ids_in_use(self):
        store = NodeStore(roots=(OrgNode("g1", NodeKind.GROUP, "Imported"),))
        new_id, counters = store.allocate_id(NodeKind.GROUP)
        assert new_id == "g2"
        assert counters["group"] == 2

    def test_seed_counters_from_existing_ids(self):
        counters = seed_counters(["g3", "r7", "g12", "custom-id", "gx"])
        assert counters == {"group": 12, "role": 7}


class TestCheckInvariants:
    def test_valid_forest_has_no_problems(self, org_store):
        assert check_invariants(org_store.roots) == []

    def test_detects_duplicate_ids(self):
        child = OrgNode("x", NodeKind.ROLE, "A", depth=1)
        root = OrgNode("x", NodeKind.GROUP, "B", children=(child,))
        assert any("duplicate id" in p for p in check_invariants([root]))

    def test_detects_bad_depth(self):
        child = OrgNode("r1", NodeKind.ROLE, "A", depth=3)
        root = OrgNode("g1", NodeKind.GROUP, "B", children=(child,))
        assert any("depth 3, expected 1" in p for p in check_invariants([root]))

    def test_detects_role_with_children(self):
        leaf = OrgNode("r2", NodeKind.ROLE, "Leaf", depth=2)
        role = OrgNode("r1", NodeKind.ROLE, "Owner", depth=1, children=(leaf,))
        root = OrgNode("g1", NodeKind.GROUP, "Root", children=(role,))
        assert any("role 'r1' owns" in p for p in check_invariants([root]))

    def test_detects_role_at_root(self):
        problems = check_invariants([OrgNode("r1", NodeKind.ROLE, "Loose")])
        assert any("root level" in p for p in problems)

    def test_detects_empty_name(self):
        problems = check_invariants([OrgNode("g1", NodeKind.GROUP, "   ")])
        assert any("empty name" in p for p in problems)

    def test_detects_nesting_beyond_max_depth(self):
        node = OrgNode(f"g{MAX_DEPTH + 2}", NodeKind.GROUP, "Leaf", depth=MAX_DEPTH + 1)
        for depth in range(MAX_DEPTH, -1, -1):
            node = OrgNode(f"g{depth + 1}", NodeKind.GROUP, "Level", depth=depth, children=(node,))
        problems = check_invariants([node])
        assert problems == [f"node 'g{MAX_DEPTH + 2}' is nested deeper than {MAX_DEPTH} levels"]
