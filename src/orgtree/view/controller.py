"""ViewController - UI-facing state of one editing session.

Translates UI commands into mutation calls, keeps the resulting store, and
holds the state that belongs to the screen rather than to the tree:
selection, search text, kind filter, role-name visibility and manual
canvas positions.

Errors never escape a command. A stale id (``NotFound``) is a silent
no-op; structural errors become non-blocking notifications and leave the
store untouched.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from orgtree.config import DEFAULT_CONFIG
from orgtree.graph.positions import PositionTable
from orgtree.graph.projector import Projection, connect, project
from orgtree.snapshot import deserialize, export_to_file, loads, serialize
from orgtree.tree import mutations
from orgtree.tree.errors import CorruptSnapshot, HierarchyError, NotFound
from orgtree.tree.mutations import Mutation
from orgtree.tree.OrgNode import NodeKind
from orgtree.tree.store import NodeStore
from orgtree.view.rows import KIND_FILTERS, TreeRow, visible_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    """A user-visible, non-blocking message.

    Attributes:
        level: "error" or "info".
        message: Text shown to the user.
        operation: Command that produced it.
    """

    level: str
    message: str
    operation: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level, "message": self.message, "operation": self.operation}


class ViewController:
    """Owns the NodeStore and view state for one editing session.

    Example:
        >>> ctl = ViewController()
        >>> g1 = ctl.add_root_group("Engineering")
        >>> ctl.add_role(g1, "Developer")
        'r1'
    """

    def __init__(self, store: NodeStore | None = None, config: dict[str, Any] | None = None) -> None:
        self.config: dict[str, Any] = config if config is not None else copy.deepcopy(DEFAULT_CONFIG)
        self.store: NodeStore = store if store is not None else NodeStore.empty()
        self.positions = PositionTable()
        self.selected_id: str | None = None
        self.search_text: str = ""
        self.kind_filter: str = "all"
        self.show_role_names: bool = bool(self._editor_setting("show_role_names", True))
        self._notifications: list[Notification] = []

    # ─────────────────────────────────────────────────────────────────────────
    # Internal helpers
    # ─────────────────────────────────────────────────────────────────────────

    def _editor_setting(self, key: str, default: Any) -> Any:
        return self.config.get("editor", {}).get(key, default)

    def _notify(self, level: str, message: str, operation: str) -> None:
        self._notifications.append(Notification(level, message, operation))

    def _apply(self, operation: Callable[..., Mutation], *args: Any) -> Mutation | None:
        """Run a mutation against the current store.

        Returns:
            The Mutation, or None when the command failed or referenced a
            missing node.
        """
        name = operation.__name__
        try:
            mutation = operation(self.store, *args)
        except NotFound as e:
            logger.debug("%s ignored: %s", name, e)
            return None
        except HierarchyError as e:
            logger.warning("%s rejected: %s", name, e)
            self._notify("error", str(e), name)
            return None

        if mutation.changed:
            self.store = mutation.store
            self._after_change()
        return mutation

    def _after_change(self) -> None:
        self.positions.prune(self.store)
        if self.selected_id is not None and self.selected_id not in self.store:
            self.selected_id = None

    # ─────────────────────────────────────────────────────────────────────────
    # Structural commands
    # ─────────────────────────────────────────────────────────────────────────

    def add_root_group(self, name: str | None = None) -> str | None:
        """Add a root-level group. Returns the new id."""
        name = name or self._editor_setting("default_group_name", mutations.DEFAULT_GROUP_NAME)
        mutation = self._apply(mutations.add_root_group, name)
        return mutation.target_id if mutation else None

    def add_child_group(self, parent_id: str, name: str | None = None) -> str | None:
        """Add a group under ``parent_id``. Returns the new id, or None on failure."""
        name = name or self._editor_setting("default_group_name", mutations.DEFAULT_GROUP_NAME)
        mutation = self._apply(mutations.add_child, parent_id, NodeKind.GROUP, name)
        return mutation.target_id if mutation else None

    def add_role(self, parent_id: str, name: str | None = None) -> str | None:
        """Add a role under ``parent_id``. Returns the new id, or None on failure."""
        name = name or self._editor_setting("default_role_name", mutations.DEFAULT_ROLE_NAME)
        mutation = self._apply(mutations.add_child, parent_id, NodeKind.ROLE, name)
        return mutation.target_id if mutation else None

    def delete(self, node_id: str) -> bool:
        mutation = self._apply(mutations.delete, node_id)
        return bool(mutation and mutation.changed)

    def reparent(self, node_id: str, new_parent_id: str) -> bool:
        mutation = self._apply(mutations.reparent, node_id, new_parent_id)
        return bool(mutation and mutation.changed)

    def move_to_root(self, node_id: str) -> bool:
        mutation = self._apply(mutations.move_to_root, node_id)
        return bool(mutation and mutation.changed)

    def connect(self, source_id: str, target_id: str) -> bool:
        """Handle a connection drawn on the canvas from source to target."""
        mutation = self._apply(connect, source_id, target_id)
        return bool(mutation and mutation.changed)

    # ─────────────────────────────────────────────────────────────────────────
    # Rename and expansion
    # ─────────────────────────────────────────────────────────────────────────

    def start_rename(self, node_id: str) -> bool:
        return self._apply(mutations.start_editing, node_id) is not None

    def commit_rename(self, node_id: str, raw_name: str) -> bool:
        return self._apply(mutations.rename, node_id, raw_name) is not None

    def cancel_rename(self, node_id: str) -> bool:
        return self._apply(mutations.cancel_editing, node_id) is not None

    def toggle_expand(self, node_id: str) -> bool:
        mutation = self._apply(mutations.toggle_expand, node_id)
        return bool(mutation and mutation.changed)

    # ─────────────────────────────────────────────────────────────────────────
    # Pure view state
    # ─────────────────────────────────────────────────────────────────────────

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        """Place a node on the canvas by hand. The tree is not changed."""
        if node_id not in self.store:
            return False
        self.positions.move(node_id, x, y)
        return True

    def select(self, node_id: str | None) -> bool:
        if node_id is not None and node_id not in self.store:
            return False
        self.selected_id = node_id
        return True

    def set_search(self, text: str) -> None:
        self.search_text = text or ""

    def set_kind_filter(self, kind_filter: str) -> None:
        """Restrict matches to "all", "groups" or "roles".

        Raises:
            ValueError: If kind_filter is unknown.
        """
        if kind_filter not in KIND_FILTERS:
            raise ValueError(f"Unknown kind filter: {kind_filter}")
        self.kind_filter = kind_filter

    def set_show_role_names(self, show: bool) -> None:
        self.show_role_names = bool(show)

    # ─────────────────────────────────────────────────────────────────────────
    # Snapshot boundary
    # ─────────────────────────────────────────────────────────────────────────

    def load_snapshot(self, data: dict[str, Any] | str) -> bool:
        """Replace the session's forest with a snapshot.

        On a corrupt snapshot the current forest is kept and an error
        notification is recorded.

        Args:
            data: Parsed snapshot dict, or its JSON text.
        """
        try:
            store = loads(data) if isinstance(data, str) else deserialize(data)
        except CorruptSnapshot as e:
            logger.warning("Snapshot rejected: %s", e)
            self._notify("error", str(e), "load_snapshot")
            return False
        self.store = store
        self.positions.clear()
        self.selected_id = None
        return True

    def export_snapshot(self) -> dict[str, Any]:
        """Serialize the current forest in the snapshot format."""
        include_edges = bool(self.config.get("snapshot", {}).get("include_edges", True))
        return serialize(self.store, include_edges=include_edges)

    def save(self, path: Path | str) -> Path | None:
        """Write the current forest to ``path``.

        Returns:
            The written path, or None when writing failed (a notification
            is recorded).
        """
        settings = self.config.get("snapshot", {})
        try:
            written = export_to_file(
                self.store,
                path,
                indent=settings.get("indent", 2),
                include_edges=bool(settings.get("include_edges", True)),
            )
        except OSError as e:
            logger.warning("Save to %s failed: %s", path, e)
            self._notify("error", f"Could not save: {e}", "save")
            return None
        self._notify("info", f"Saved {self.store.node_count()} nodes", "save")
        return written

    # ─────────────────────────────────────────────────────────────────────────
    # Rendering
    # ─────────────────────────────────────────────────────────────────────────

    def rows(self) -> list[TreeRow]:
        """Rows of the list view under the current search and filter."""
        return visible_rows(self.store, self.search_text, self.kind_filter, self.selected_id)

    def graph(self) -> Projection:
        """Canvas projection of the current forest."""
        return project(self.store, self.positions, self.config, self.show_role_names)

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def drain_notifications(self) -> list[Notification]:
        """Return pending notifications and clear them."""
        pending, self._notifications = self._notifications, []
        return pending
