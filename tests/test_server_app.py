"""Tests for the Flask editor REST API server."""

import json

import pytest

pytest.importorskip("flask")
pytest.importorskip("flask_cors")

from orgtree.server.app import create_app  # noqa: E402
from orgtree.view import ViewController  # noqa: E402

# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def export_path(tmp_path):
    return tmp_path / "org-hierarchy.json"


@pytest.fixture
def app(controller, export_path):
    """Flask app over the reference organization."""
    app = create_app(controller, export_path=export_path)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


# ─────────────────────────────────────────────────────────────────────────────
# App factory
# ─────────────────────────────────────────────────────────────────────────────


class TestAppFactory:
    def test_creates_flask_app(self, controller):
        from flask import Flask

        assert isinstance(create_app(controller), Flask)

    def test_cors_headers_present(self, client):
        response = client.get("/api/tree", headers={"Origin": "http://localhost:3000"})
        assert "Access-Control-Allow-Origin" in response.headers

    def test_index_renders_rows(self, client):
        response = client.get("/")
        assert response.status_code == 200
        html = response.get_data(as_text=True)
        assert "Engineering" in html
        assert 'data-node-id="r2"' in html

    def test_index_escapes_node_names(self, client, controller):
        controller.commit_rename("g1", "<script>alert(1)</script>")
        html = client.get("/").get_data(as_text=True)
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
        assert "<script>alert(1)</script>" not in html


# ─────────────────────────────────────────────────────────────────────────────
# GET endpoints
# ─────────────────────────────────────────────────────────────────────────────


class TestReadEndpoints:
    def test_tree(self, client):
        data = client.get("/api/tree").get_json()
        assert [row["node_id"] for row in data["rows"]] == ["g1", "g2", "r1", "g3", "r2", "g4"]
        assert data["node_count"] == 6
        assert data["kind_filter"] == "all"

    def test_graph(self, client):
        data = client.get("/api/graph").get_json()
        assert len(data["nodes"]) == 6
        assert {"id": "eg1-g2", "source": "g1", "target": "g2"} in data["edges"]

    def test_node_details(self, client):
        data = client.get("/api/node/r1").get_json()
        assert data["parentId"] == "g2"
        assert data["path"] == ["g1", "g2"]
        assert data["depth"] == 2

    def test_missing_node_is_404(self, client):
        assert client.get("/api/node/g99").status_code == 404

    def test_export_is_attachment(self, client):
        response = client.get("/api/export")
        assert "attachment" in response.headers["Content-Disposition"]
        assert "org-hierarchy.json" in response.headers["Content-Disposition"]
        assert len(json.loads(response.get_data(as_text=True))["nodes"]) == 6


# ─────────────────────────────────────────────────────────────────────────────
# Mutation endpoints
# ─────────────────────────────────────────────────────────────────────────────


class TestMutationEndpoints:
    def test_add_root(self, client, controller):
        data = client.post("/api/mutate/add-root", json={"name": "Legal"}).get_json()
        assert data["success"] is True
        assert controller.store.find_by_id(data["node_id"]).name == "Legal"

    def test_add_child_role(self, client, controller):
        response = client.post(
            "/api/mutate/add-child", json={"parent_id": "g4", "kind": "role", "name": "Rep"}
        )
        node_id = response.get_json()["node_id"]
        assert controller.store.parent_of(node_id).id == "g4"

    def test_add_child_under_role_fails_with_notification(self, client):
        response = client.post("/api/mutate/add-child", json={"parent_id": "r1", "kind": "role"})
        assert response.status_code == 400
        data = response.get_json()
        assert data["success"] is False
        assert data["notifications"][0]["level"] == "error"

    def test_add_child_unknown_kind(self, client):
        response = client.post("/api/mutate/add-child", json={"parent_id": "g1", "kind": "team"})
        assert response.status_code == 400

    def test_missing_parameters(self, client):
        response = client.post("/api/mutate/delete", json={})
        assert response.status_code == 400
        assert "node_id required" in response.get_json()["error"]

    def test_non_object_body_counts_as_empty(self, client, controller):
        response = client.post("/api/mutate/delete", json=["g1"])
        assert response.status_code == 400
        assert "node_id required" in response.get_json()["error"]
        assert "g1" in controller.store

    @pytest.mark.parametrize(
        "route, payload",
        [
            ("rename", {"node_id": "g1", "name": 5}),
            ("rename", {"node_id": ["g1"], "name": "Eng"}),
            ("add-root", {"name": 5}),
            ("add-child", {"parent_id": "g1", "kind": "role", "name": {"x": 1}}),
            ("toggle", {"node_id": 7}),
            ("reparent", {"node_id": "g2", "new_parent_id": 3}),
            ("search", {"text": 42}),
        ],
    )
    def test_non_string_fields_are_rejected(self, client, controller, route, payload):
        before = controller.store
        response = client.post(f"/api/mutate/{route}", json=payload)
        assert response.status_code == 400
        assert "must be strings" in response.get_json()["error"]
        assert controller.store is before

    def test_rename(self, client, controller):
        client.post("/api/mutate/rename", json={"node_id": "g4", "name": " Revenue "})
        assert controller.store.find_by_id("g4").name == "Revenue"

    def test_delete(self, client, controller):
        assert client.post("/api/mutate/delete", json={"node_id": "g2"}).status_code == 200
        assert "r1" not in controller.store

    def test_delete_stale_id_is_harmless(self, client):
        response = client.post("/api/mutate/delete", json={"node_id": "g99"})
        assert response.status_code == 200
        assert response.get_json()["success"] is False

    def test_reparent_cycle_is_rejected(self, client, controller):
        response = client.post(
            "/api/mutate/reparent", json={"node_id": "g1", "new_parent_id": "g3"}
        )
        assert response.status_code == 400
        assert controller.store.parent_of("g3").id == "g1"

    def test_connect(self, client, controller):
        client.post("/api/mutate/connect", json={"source": "g4", "target": "g2"})
        assert controller.store.parent_of("g2").id == "g4"

    def test_move_is_view_only(self, client, controller):
        before = controller.store
        response = client.post("/api/mutate/move", json={"node_id": "g1", "x": 5, "y": "7"})
        assert response.status_code == 200
        assert controller.store is before
        assert controller.positions.get("g1") == (5.0, 7.0)

    def test_move_rejects_non_numbers(self, client):
        response = client.post("/api/mutate/move", json={"node_id": "g1", "x": "a", "y": 1})
        assert response.status_code == 400

    def test_toggle(self, client, controller):
        client.post("/api/mutate/toggle", json={"node_id": "g1"})
        assert controller.store.is_expanded("g1") is False

    def test_search_and_filter(self, client):
        client.post("/api/mutate/search", json={"text": "design", "kind": "roles"})
        rows = client.get("/api/tree").get_json()["rows"]
        assert [row["node_id"] for row in rows] == ["g1", "g3", "r2"]

    def test_unknown_filter(self, client):
        response = client.post("/api/mutate/search", json={"kind": "people"})
        assert response.status_code == 400


# ─────────────────────────────────────────────────────────────────────────────
# Persistence
# ─────────────────────────────────────────────────────────────────────────────


class TestSave:
    def test_save_writes_export_path(self, client, export_path):
        data = client.post("/api/save").get_json()
        assert data["success"] is True
        assert data["path"] == str(export_path)
        assert export_path.exists()
        assert data["notifications"][0]["level"] == "info"

    def test_save_without_export_path(self, controller):
        client = create_app(controller).test_client()
        assert client.post("/api/save").status_code == 400
