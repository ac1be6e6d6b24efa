"""Mutation operations for the organization forest.

Every operation takes the current NodeStore plus explicit arguments and
returns a Mutation whose ``store`` is a new NodeStore. The input store is
never modified: an operation either returns a complete, invariant-preserving
forest or raises one of the errors from ``orgtree.tree.errors``.

Recursive edits are single-pass top-down rewrites (see ``_rewrite``): the
matching node is transformed and every ancestor on its path is rebuilt
with the rewritten children. Subtrees off the path are shared.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Callable, Mapping

from orgtree.tree.errors import CycleDetected, InvalidParent
from orgtree.tree.OrgNode import NodeKind, NodeView, OrgNode
from orgtree.tree.store import MAX_DEPTH, NodeStore

DEFAULT_GROUP_NAME = "New Group"
DEFAULT_ROLE_NAME = "New Role"

DEFAULT_NAMES = {NodeKind.GROUP: DEFAULT_GROUP_NAME, NodeKind.ROLE: DEFAULT_ROLE_NAME}


@dataclass(frozen=True)
class Mutation:
    """Result of one mutation.

    Attributes:
        operation: Operation name (e.g. "add_child", "reparent").
        target_id: Primary node of the operation. For additions this is
            the id of the newly created node.
        store: The resulting NodeStore.
        changed: False when the operation was a no-op and `store` is the
            input store itself.
    """

    operation: str
    target_id: str
    store: NodeStore
    changed: bool = True

    def __str__(self) -> str:
        return f"{self.operation}({self.target_id})"


# ─────────────────────────────────────────────────────────────────────────────
# Internal helpers
# ─────────────────────────────────────────────────────────────────────────────

Transform = Callable[[OrgNode], "OrgNode | None"]


def _rewrite(
    nodes: tuple[OrgNode, ...], target_id: str, transform: Transform
) -> tuple[tuple[OrgNode, ...], bool]:
    """Rebuild ``nodes`` with ``transform`` applied to the node ``target_id``.

    ``transform`` returns the replacement node, or None to drop the node
    (and with it its subtree).

    Returns:
        Tuple of (rewritten nodes, whether the target was found). When the
        target is not found the original tuple is returned as-is.
    """
    for i, node in enumerate(nodes):
        if node.id == target_id:
            new_node = transform(node)
            head, tail = nodes[:i], nodes[i + 1 :]
            if new_node is None:
                return head + tail, True
            return head + (new_node,) + tail, True
        if node.children:
            children, found = _rewrite(node.children, target_id, transform)
            if found:
                return nodes[:i] + (replace(node, children=children),) + nodes[i + 1 :], True
    return nodes, False


def _set_view(view: Mapping[str, NodeView], node_id: str, **changes: bool) -> dict[str, NodeView]:
    """Return a copy of the view side-table with one entry updated."""
    updated = dict(view)
    updated[node_id] = replace(view.get(node_id, NodeView()), **changes)
    return updated


def _clean_name(raw: str | None, fallback: str) -> str:
    name = (raw or "").strip()
    return name or fallback


def _unchanged(operation: str, target_id: str, store: NodeStore) -> Mutation:
    return Mutation(operation, target_id, store, changed=False)


def _require_group(store: NodeStore, parent_id: str) -> OrgNode:
    parent = store.get(parent_id)
    if parent is None:
        raise InvalidParent(parent_id, "no such node")
    if not parent.kind.can_own_children():
        raise InvalidParent(parent_id, "roles cannot own children")
    return parent


# ─────────────────────────────────────────────────────────────────────────────
# Creation
# ─────────────────────────────────────────────────────────────────────────────


def add_root_group(store: NodeStore, name: str = DEFAULT_GROUP_NAME) -> Mutation:
    """Append a new root-level group.

    The group starts expanded and in rename mode so the UI can offer an
    immediate rename.

    Args:
        store: Current forest.
        name: Initial name; blank falls back to the default group name.

    Returns:
        Mutation whose target_id is the new group's id.
    """
    node_id, counters = store.allocate_id(NodeKind.GROUP)
    node = OrgNode(id=node_id, kind=NodeKind.GROUP, name=_clean_name(name, DEFAULT_GROUP_NAME))
    view = _set_view(store.view, node_id, expanded=True, editing=True)
    return Mutation(
        "add_root_group",
        node_id,
        NodeStore(roots=store.roots + (node,), view=view, counters=counters),
    )


def add_child(
    store: NodeStore,
    parent_id: str,
    kind: NodeKind | str,
    name: str | None = None,
) -> Mutation:
    """Append a new group or role as the last child of a group.

    The parent is forced expanded so the new node is visible.

    Args:
        store: Current forest.
        parent_id: Id of the owning group.
        kind: NodeKind (or its value, "group" / "role") of the new node.
        name: Initial name; None or blank uses the kind's default name.

    Returns:
        Mutation whose target_id is the new node's id.

    Raises:
        InvalidParent: If parent_id is missing, names a role, or sits at
            ``MAX_DEPTH``.
    """
    kind = NodeKind(kind)
    parent = _require_group(store, parent_id)
    if parent.depth + 1 > MAX_DEPTH:
        raise InvalidParent(parent_id, f"nesting deeper than {MAX_DEPTH} levels")

    node_id, counters = store.allocate_id(kind)
    child = OrgNode(
        id=node_id,
        kind=kind,
        name=_clean_name(name, DEFAULT_NAMES[kind]),
        depth=parent.depth + 1,
    )
    roots, _ = _rewrite(
        store.roots, parent_id, lambda p: replace(p, children=p.children + (child,))
    )
    view = _set_view(store.view, parent_id, expanded=True)
    view = _set_view(view, node_id, expanded=True, editing=True)
    return Mutation("add_child", node_id, NodeStore(roots=roots, view=view, counters=counters))


# ─────────────────────────────────────────────────────────────────────────────
# Rename and view state
# ─────────────────────────────────────────────────────────────────────────────


def rename(store: NodeStore, node_id: str, raw_name: str | None) -> Mutation:
    """Commit a rename.

    The name is trimmed; an empty result keeps the previous name. Rename
    mode is always cleared.

    Raises:
        NotFound: If node_id is missing.
    """
    node = store.find_by_id(node_id)
    new_name = (raw_name or "").strip()

    roots = store.roots
    if new_name and new_name != node.name:
        roots, _ = _rewrite(roots, node_id, lambda n: replace(n, name=new_name))
    view = _set_view(store.view, node_id, editing=False)
    return Mutation("rename", node_id, NodeStore(roots=roots, view=view, counters=store.counters))


def start_editing(store: NodeStore, node_id: str) -> Mutation:
    """Put a node into rename mode.

    Raises:
        NotFound: If node_id is missing.
    """
    store.find_by_id(node_id)
    view = _set_view(store.view, node_id, editing=True)
    return Mutation(
        "start_editing", node_id, NodeStore(roots=store.roots, view=view, counters=store.counters)
    )


def cancel_editing(store: NodeStore, node_id: str) -> Mutation:
    """Leave rename mode without changing the name.

    Raises:
        NotFound: If node_id is missing.
    """
    store.find_by_id(node_id)
    view = _set_view(store.view, node_id, editing=False)
    return Mutation(
        "cancel_editing", node_id, NodeStore(roots=store.roots, view=view, counters=store.counters)
    )


def toggle_expand(store: NodeStore, node_id: str) -> Mutation:
    """Flip a node's expanded flag.

    Nodes without children have nothing to expand; for them this is a
    no-op rather than an error.

    Raises:
        NotFound: If node_id is missing.
    """
    node = store.find_by_id(node_id)
    if node.is_leaf:
        return _unchanged("toggle_expand", node_id, store)
    view = _set_view(store.view, node_id, expanded=not store.is_expanded(node_id))
    return Mutation(
        "toggle_expand", node_id, NodeStore(roots=store.roots, view=view, counters=store.counters)
    )


# ─────────────────────────────────────────────────────────────────────────────
# Structural edits
# ─────────────────────────────────────────────────────────────────────────────


def delete(store: NodeStore, node_id: str) -> Mutation:
    """Remove a node together with its entire subtree.

    Root groups may be deleted like any other node. View state of every
    removed node is dropped; allocation counters are kept so removed ids
    are never handed out again.

    Raises:
        NotFound: If node_id is missing.
    """
    node = store.find_by_id(node_id)
    removed = {n.id for n in node.walk()}

    roots, _ = _rewrite(store.roots, node_id, lambda n: None)
    view = {k: v for k, v in store.view.items() if k not in removed}
    return Mutation("delete", node_id, NodeStore(roots=roots, view=view, counters=store.counters))


def reparent(store: NodeStore, node_id: str, new_parent_id: str) -> Mutation:
    """Move a node (and its subtree) to the end of another group's children.

    Depths of the moved node and every descendant are recomputed. Moving a
    node under its current parent leaves the forest unchanged.

    Raises:
        NotFound: If node_id is missing.
        InvalidParent: If new_parent_id is missing or names a role, or if
            the moved subtree would reach below ``MAX_DEPTH``.
        CycleDetected: If new_parent_id is node_id or one of its descendants.
    """
    node = store.find_by_id(node_id)
    target = _require_group(store, new_parent_id)
    if new_parent_id == node_id or store.is_descendant(node_id, new_parent_id):
        raise CycleDetected(node_id, new_parent_id)
    height = max(n.depth for n in node.walk()) - node.depth
    if target.depth + 1 + height > MAX_DEPTH:
        raise InvalidParent(new_parent_id, f"nesting deeper than {MAX_DEPTH} levels")

    current_parent = store.parent_of(node_id)
    if current_parent is not None and current_parent.id == new_parent_id:
        return _unchanged("reparent", node_id, store)

    moved = node.with_depth(target.depth + 1)
    roots, _ = _rewrite(store.roots, node_id, lambda n: None)
    roots, _ = _rewrite(roots, new_parent_id, lambda p: replace(p, children=p.children + (moved,)))
    view = _set_view(store.view, new_parent_id, expanded=True)
    return Mutation("reparent", node_id, NodeStore(roots=roots, view=view, counters=store.counters))


def move_to_root(store: NodeStore, node_id: str) -> Mutation:
    """Detach a subtree and append it as a new root.

    Raises:
        NotFound: If node_id is missing.
        InvalidParent: If node_id names a role (roles cannot stand as roots).
    """
    node = store.find_by_id(node_id)
    if not node.kind.can_own_children():
        raise InvalidParent(node_id, "roles cannot be placed at the root level")
    if store.parent_of(node_id) is None:
        return _unchanged("move_to_root", node_id, store)

    roots, _ = _rewrite(store.roots, node_id, lambda n: None)
    roots = roots + (node.with_depth(0),)
    return Mutation(
        "move_to_root", node_id, NodeStore(roots=roots, view=store.view, counters=store.counters)
    )


__all__ = [
    "DEFAULT_GROUP_NAME",
    "DEFAULT_ROLE_NAME",
    "Mutation",
    "add_root_group",
    "add_child",
    "rename",
    "start_editing",
    "cancel_editing",
    "toggle_expand",
    "delete",
    "reparent",
    "move_to_root",
]
