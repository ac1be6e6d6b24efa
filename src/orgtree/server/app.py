"""orgtree.server.app - Flask app factory and REST API routes.

This is a THIN REST wrapper: every route delegates to the session's
ViewController. No tree logic is duplicated here.

Mutating routes answer with::

    {"success": bool, "notifications": [...]}

and status 400 when the command produced an error notification.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from flask import Flask, Response, jsonify, render_template, request
from flask_cors import CORS

from orgtree.snapshot import dumps
from orgtree.view.controller import ViewController


def create_app(
    controller: ViewController,
    config: dict[str, Any] | None = None,
    export_path: Path | None = None,
) -> Flask:
    """Create the Flask application with REST API routes.

    Args:
        controller: The editing session to expose.
        config: orgtree configuration dict (defaults to the controller's).
        export_path: File that ``POST /api/save`` writes to. Saving is
            disabled when None.

    Returns:
        Configured Flask application.
    """
    templates_dir = Path(__file__).parent.parent / "html" / "templates"
    app = Flask(__name__, template_folder=str(templates_dir))
    CORS(app)

    config = config if config is not None else controller.config
    snapshot_settings = config.get("snapshot", {})

    def _payload() -> dict[str, Any]:
        """Request JSON body; anything but an object counts as empty."""
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def _respond(success: bool, **extra: Any):
        notes = [n.to_dict() for n in controller.drain_notifications()]
        failed = any(n["level"] == "error" for n in notes)
        body = {"success": success and not failed, "notifications": notes, **extra}
        return jsonify(body), 400 if failed else 200

    def _missing(*names: str):
        return jsonify({"success": False, "error": f"{', '.join(names)} required"}), 400

    def _not_text(data: dict[str, Any], *names: str):
        """Return a 400 response if a given field is present but not a string."""
        bad = [n for n in names if data.get(n) is not None and not isinstance(data[n], str)]
        if bad:
            return jsonify({"success": False, "error": f"{', '.join(bad)} must be strings"}), 400
        return None

    # ─────────────────────────────────────────────────────────────────
    # Template route
    # ─────────────────────────────────────────────────────────────────

    @app.route("/")
    def index():
        """Serve the list view of the current forest."""
        from orgtree import __version__

        return render_template(
            "editor.html",
            rows=controller.rows(),
            search=controller.search_text,
            kind_filter=controller.kind_filter,
            node_count=controller.store.node_count(),
            version=__version__,
        )

    # ─────────────────────────────────────────────────────────────────
    # Read-only GET endpoints
    # ─────────────────────────────────────────────────────────────────

    @app.route("/api/tree")
    def api_tree():
        """GET /api/tree - Visible list-view rows."""
        return jsonify(
            {
                "rows": [row.to_dict() for row in controller.rows()],
                "search": controller.search_text,
                "kind_filter": controller.kind_filter,
                "selected": controller.selected_id,
                "node_count": controller.store.node_count(),
            }
        )

    @app.route("/api/graph")
    def api_graph():
        """GET /api/graph - Positioned node/edge projection."""
        return jsonify(controller.graph().to_dict())

    @app.route("/api/node/<node_id>")
    def api_node(node_id: str):
        """GET /api/node/<node_id> - Details of one node."""
        store = controller.store
        node = store.get(node_id)
        if node is None:
            return jsonify({"error": f"Node '{node_id}' not found"}), 404
        parent = store.parent_of(node_id)
        view = store.view_of(node_id)
        return jsonify(
            {
                "id": node.id,
                "type": node.kind.value,
                "name": node.name,
                "depth": node.depth,
                "parentId": parent.id if parent else None,
                "path": store.path_to(node_id),
                "children": [child.id for child in node.children],
                "expanded": view.expanded,
                "editing": view.editing,
            }
        )

    @app.route("/api/notifications")
    def api_notifications():
        """GET /api/notifications - Pending notifications (drains them)."""
        return jsonify([n.to_dict() for n in controller.drain_notifications()])

    @app.route("/api/export")
    def api_export():
        """GET /api/export - Snapshot JSON as a file download."""
        filename = snapshot_settings.get("export_filename", "org-hierarchy.json")
        body = dumps(
            controller.store,
            indent=snapshot_settings.get("indent", 2),
            include_edges=bool(snapshot_settings.get("include_edges", True)),
        )
        return Response(
            body,
            mimetype="application/json",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    # ─────────────────────────────────────────────────────────────────
    # Mutation endpoints
    # ─────────────────────────────────────────────────────────────────

    def _single_node(command: Callable[[str], bool]):
        data = _payload()
        error = _not_text(data, "node_id")
        if error:
            return error
        if not data.get("node_id"):
            return _missing("node_id")
        return _respond(command(data["node_id"]))

    @app.route("/api/mutate/add-root", methods=["POST"])
    def api_add_root():
        data = _payload()
        error = _not_text(data, "name")
        if error:
            return error
        node_id = controller.add_root_group(data.get("name"))
        return _respond(node_id is not None, node_id=node_id)

    @app.route("/api/mutate/add-child", methods=["POST"])
    def api_add_child():
        data = _payload()
        error = _not_text(data, "parent_id", "kind", "name")
        if error:
            return error
        parent_id = data.get("parent_id")
        kind = data.get("kind", "group")
        if not parent_id:
            return _missing("parent_id")
        if kind == "group":
            node_id = controller.add_child_group(parent_id, data.get("name"))
        elif kind == "role":
            node_id = controller.add_role(parent_id, data.get("name"))
        else:
            return jsonify({"success": False, "error": f"Unknown kind: {kind}"}), 400
        return _respond(node_id is not None, node_id=node_id)

    @app.route("/api/mutate/rename", methods=["POST"])
    def api_rename():
        data = _payload()
        error = _not_text(data, "node_id", "name")
        if error:
            return error
        if not data.get("node_id") or "name" not in data:
            return _missing("node_id", "name")
        return _respond(controller.commit_rename(data["node_id"], data["name"]))

    @app.route("/api/mutate/start-rename", methods=["POST"])
    def api_start_rename():
        return _single_node(controller.start_rename)

    @app.route("/api/mutate/cancel-rename", methods=["POST"])
    def api_cancel_rename():
        return _single_node(controller.cancel_rename)

    @app.route("/api/mutate/toggle", methods=["POST"])
    def api_toggle():
        return _single_node(controller.toggle_expand)

    @app.route("/api/mutate/delete", methods=["POST"])
    def api_delete():
        return _single_node(controller.delete)

    @app.route("/api/mutate/reparent", methods=["POST"])
    def api_reparent():
        data = _payload()
        error = _not_text(data, "node_id", "new_parent_id")
        if error:
            return error
        if not data.get("node_id") or not data.get("new_parent_id"):
            return _missing("node_id", "new_parent_id")
        return _respond(controller.reparent(data["node_id"], data["new_parent_id"]))

    @app.route("/api/mutate/move-to-root", methods=["POST"])
    def api_move_to_root():
        return _single_node(controller.move_to_root)

    @app.route("/api/mutate/connect", methods=["POST"])
    def api_connect():
        data = _payload()
        error = _not_text(data, "source", "target")
        if error:
            return error
        if not data.get("source") or not data.get("target"):
            return _missing("source", "target")
        return _respond(controller.connect(data["source"], data["target"]))

    @app.route("/api/mutate/move", methods=["POST"])
    def api_move():
        data = _payload()
        error = _not_text(data, "node_id")
        if error:
            return error
        if not data.get("node_id") or "x" not in data or "y" not in data:
            return _missing("node_id", "x", "y")
        try:
            x, y = float(data["x"]), float(data["y"])
        except (TypeError, ValueError):
            return jsonify({"success": False, "error": "x and y must be numbers"}), 400
        return _respond(controller.move_node(data["node_id"], x, y))

    @app.route("/api/mutate/select", methods=["POST"])
    def api_select():
        data = _payload()
        error = _not_text(data, "node_id")
        if error:
            return error
        return _respond(controller.select(data.get("node_id")))

    @app.route("/api/mutate/search", methods=["POST"])
    def api_search():
        data = _payload()
        error = _not_text(data, "text", "kind")
        if error:
            return error
        controller.set_search(data.get("text", ""))
        if "kind" in data:
            try:
                controller.set_kind_filter(data["kind"])
            except ValueError as e:
                return jsonify({"success": False, "error": str(e)}), 400
        if "show_role_names" in data:
            controller.set_show_role_names(bool(data["show_role_names"]))
        return _respond(True)

    @app.route("/api/save", methods=["POST"])
    def api_save():
        """POST /api/save - Write the snapshot to the session's export path."""
        if export_path is None:
            return jsonify({"success": False, "error": "no export path configured"}), 400
        written = controller.save(export_path)
        return _respond(written is not None, path=str(written) if written else None)

    return app
