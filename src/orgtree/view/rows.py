"""List-view rows - Flatten the forest into visible rows.

Without a filter, children of collapsed nodes are hidden. With a search
text or kind filter, every matching node is shown together with all of
its ancestors, which are displayed expanded so each match is reachable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from orgtree.tree.OrgNode import NodeKind, OrgNode
from orgtree.tree.store import NodeStore

KIND_FILTERS = {
    "all": None,
    "groups": NodeKind.GROUP,
    "roles": NodeKind.ROLE,
}


@dataclass(frozen=True)
class TreeRow:
    """One row of the list view.

    Attributes:
        node_id: Id of the node shown.
        kind: "group" or "role".
        name: Display name.
        depth: Indentation level.
        expanded: Whether the row is shown expanded.
        editing: Whether the row is in rename mode.
        has_children: Whether an expand/collapse caret applies.
        selected: Whether this is the current selection.
        matched: True when the row matches the active filter (always True
            when no filter is active).
    """

    node_id: str
    kind: str
    name: str
    depth: int
    expanded: bool
    editing: bool
    has_children: bool
    selected: bool = False
    matched: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _matches(node: OrgNode, needle: str, kind: NodeKind | None) -> bool:
    if kind is not None and node.kind is not kind:
        return False
    return not needle or needle in node.name.lower()


def visible_rows(
    store: NodeStore,
    search: str = "",
    kind_filter: str = "all",
    selected_id: str | None = None,
) -> list[TreeRow]:
    """Compute the rows of the list view.

    Args:
        store: The forest.
        search: Case-insensitive substring to match against names.
        kind_filter: "all", "groups" or "roles".
        selected_id: Currently selected node, if any.

    Returns:
        Rows in pre-order.

    Raises:
        ValueError: If kind_filter is not a known filter.
    """
    if kind_filter not in KIND_FILTERS:
        raise ValueError(f"Unknown kind filter: {kind_filter}")
    needle = search.strip().lower()
    kind = KIND_FILTERS[kind_filter]
    filtering = bool(needle) or kind is not None

    rows: list[TreeRow] = []

    if not filtering:

        def _emit(node: OrgNode) -> None:
            expanded = store.is_expanded(node.id)
            rows.append(_row(store, node, expanded, selected_id, matched=True))
            if expanded:
                for child in node.children:
                    _emit(child)

        for root in store.roots:
            _emit(root)
        return rows

    matched_ids = {node.id for node in store.all_nodes() if _matches(node, needle, kind)}
    shown_ids = set(matched_ids)
    for node_id in matched_ids:
        shown_ids.update(store.path_to(node_id))

    for node in store.all_nodes():
        if node.id in shown_ids:
            rows.append(
                _row(
                    store,
                    node,
                    expanded=any(child.id in shown_ids for child in node.children),
                    selected_id=selected_id,
                    matched=node.id in matched_ids,
                )
            )
    return rows


def _row(
    store: NodeStore, node: OrgNode, expanded: bool, selected_id: str | None, matched: bool
) -> TreeRow:
    return TreeRow(
        node_id=node.id,
        kind=node.kind.value,
        name=node.name,
        depth=node.depth,
        expanded=expanded,
        editing=store.is_editing(node.id),
        has_children=not node.is_leaf,
        selected=node.id == selected_id,
        matched=matched,
    )
