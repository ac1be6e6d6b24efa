"""Tests for ViewController command handling."""

import json

import pytest

from orgtree.snapshot import serialize
from orgtree.view import ViewController


class TestCommands:
    def test_build_from_scratch(self):
        ctl = ViewController()
        g1 = ctl.add_root_group("Engineering")
        g2 = ctl.add_child_group(g1, "Backend")
        r1 = ctl.add_role(g2, "Developer")
        assert (g1, g2, r1) == ("g1", "g2", "r1")
        assert ctl.store.find_by_id(r1).depth == 2
        assert ctl.notifications == []

    def test_default_names_come_from_config(self, config):
        config["editor"]["default_group_name"] = "Team"
        config["editor"]["default_role_name"] = "Member"
        ctl = ViewController(config=config)
        g1 = ctl.add_root_group()
        r1 = ctl.add_role(g1)
        assert ctl.store.find_by_id(g1).name == "Team"
        assert ctl.store.find_by_id(r1).name == "Member"

    def test_rename_flow(self, controller):
        assert controller.start_rename("g4")
        assert controller.store.is_editing("g4")
        assert controller.commit_rename("g4", "  Revenue ")
        assert controller.store.find_by_id("g4").name == "Revenue"
        assert not controller.store.is_editing("g4")

    def test_cancel_rename_keeps_name(self, controller):
        controller.start_rename("g4")
        assert controller.cancel_rename("g4")
        assert controller.store.find_by_id("g4").name == "Sales"

    def test_toggle_leaf_reports_unchanged(self, controller):
        assert controller.toggle_expand("r1") is False
        assert controller.toggle_expand("g1") is True


class TestErrorHandling:
    def test_stale_id_is_silent_no_op(self, controller):
        before = controller.store
        assert controller.delete("g99") is False
        assert controller.commit_rename("g99", "x") is False
        assert controller.store is before
        assert controller.notifications == []

    def test_cycle_becomes_notification(self, controller):
        before = serialize(controller.store)
        assert controller.reparent("g1", "g2") is False
        assert serialize(controller.store) == before
        [note] = controller.notifications
        assert note.level == "error"
        assert note.operation == "reparent"
        assert "g2" in note.message

    def test_role_parent_becomes_notification(self, controller):
        assert controller.add_role("r1") is None
        [note] = controller.drain_notifications()
        assert note.operation == "add_child"
        assert controller.notifications == []

    def test_connect_from_role_is_rejected(self, controller):
        assert controller.connect("r1", "g4") is False
        assert controller.notifications[0].operation == "connect"

    def test_move_role_to_root_is_rejected(self, controller):
        assert controller.move_to_root("r2") is False
        assert controller.notifications[0].level == "error"


class TestViewState:
    def test_delete_clears_selection_and_positions(self, controller):
        controller.select("r1")
        controller.move_node("r1", 10, 20)
        controller.move_node("g4", 30, 40)
        assert controller.delete("g2")
        assert controller.selected_id is None
        assert "r1" not in controller.positions
        assert "g4" in controller.positions

    def test_select_missing_is_rejected(self, controller):
        assert controller.select("missing") is False
        assert controller.select(None) is True

    def test_move_node_keeps_tree(self, controller):
        before = controller.store
        assert controller.move_node("g1", 5, 5)
        assert controller.store is before
        assert controller.graph().find_node("g1").manual

    def test_move_missing_node(self, controller):
        assert controller.move_node("nope", 1, 1) is False

    def test_rows_follow_search_and_filter(self, controller):
        controller.set_search("developer")
        assert [r.node_id for r in controller.rows()] == ["g1", "g2", "r1"]
        controller.set_search("")
        controller.set_kind_filter("roles")
        assert [r.node_id for r in controller.rows() if r.matched] == ["r1", "r2"]

    def test_unknown_kind_filter_raises(self, controller):
        with pytest.raises(ValueError):
            controller.set_kind_filter("everything")

    def test_hide_role_names(self, controller):
        controller.set_show_role_names(False)
        assert controller.graph().find_node("r1").label == ""

    def test_connect_updates_graph(self, controller):
        assert controller.connect("g4", "g3")
        graph = controller.graph()
        assert graph.find_edge("g4", "g3") is not None
        assert graph.find_edge("g1", "g3") is None


class TestSnapshots:
    def test_export_and_load_round_trip(self, controller):
        data = controller.export_snapshot()
        other = ViewController()
        assert other.load_snapshot(data)
        assert other.store.structurally_equal(controller.store)

    def test_load_accepts_json_text(self, controller):
        text = json.dumps(controller.export_snapshot())
        other = ViewController()
        assert other.load_snapshot(text)
        assert other.store.node_count() == 6

    def test_corrupt_snapshot_keeps_store(self, controller):
        before = controller.store
        assert controller.load_snapshot({"nodes": [{"id": "r1", "type": "role"}]}) is False
        assert controller.store is before
        assert controller.notifications[0].operation == "load_snapshot"

    def test_invalid_json_keeps_store(self, controller):
        before = controller.store
        assert controller.load_snapshot("{not json") is False
        assert controller.store is before

    def test_load_resets_selection(self, controller):
        controller.select("g1")
        controller.move_node("g1", 1, 1)
        controller.load_snapshot(controller.export_snapshot())
        assert controller.selected_id is None
        assert len(controller.positions) == 0

    def test_save_writes_file_and_notifies(self, controller, tmp_path):
        target = tmp_path / "org.json"
        assert controller.save(target) == target
        assert json.loads(target.read_text())["nodes"][0]["id"] == "g1"
        assert controller.notifications[-1].level == "info"

    def test_save_failure_notifies(self, controller, tmp_path):
        target = tmp_path / "missing-dir" / "org.json"
        assert controller.save(target) is None
        assert controller.notifications[-1].level == "error"
