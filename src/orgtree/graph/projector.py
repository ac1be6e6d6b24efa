"""Graph Projector - Derive a positioned node/edge graph from the forest.

The forest is authoritative; the projection is recomputed from it on
demand. Edits made on the canvas travel the other way only through
``connect`` / ``reconcile_edges``, which turn a drawn connection into a
``reparent`` mutation. A freestanding edge is never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from orgtree.config import DEFAULT_CONFIG
from orgtree.graph.positions import Point, PositionTable
from orgtree.graph.relations import VisualEdge
from orgtree.tree.mutations import Mutation, reparent
from orgtree.tree.OrgNode import OrgNode
from orgtree.tree.store import NodeStore


@dataclass(frozen=True)
class VisualNode:
    """A node as rendered on the canvas.

    Attributes:
        id: Same id as the tree node.
        kind: "group" or "role".
        label: Text shown on the node (empty for hidden role names).
        x: Canvas x coordinate.
        y: Canvas y coordinate.
        child_count: Number of direct children in the tree.
        expanded: View state of the tree node.
        manual: True when the position was placed by hand.
    """

    id: str
    kind: str
    label: str
    x: float
    y: float
    child_count: int = 0
    expanded: bool = True
    manual: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the node shape canvas libraries consume."""
        return {
            "id": self.id,
            "type": self.kind,
            "position": {"x": self.x, "y": self.y},
            "data": {
                "name": self.label,
                "childCount": self.child_count,
                "expanded": self.expanded,
            },
        }


@dataclass(frozen=True)
class Projection:
    """Complete rendered graph: one visual node per tree node, one edge per link."""

    nodes: tuple[VisualNode, ...] = ()
    edges: tuple[VisualEdge, ...] = ()
    _by_id: dict[str, VisualNode] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._by_id.update({node.id: node for node in self.nodes})

    def find_node(self, node_id: str) -> VisualNode | None:
        return self._by_id.get(node_id)

    def find_edge(self, source: str, target: str) -> VisualEdge | None:
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


# ─────────────────────────────────────────────────────────────────────────────
# Layout
# ─────────────────────────────────────────────────────────────────────────────


def layout_positions(
    store: NodeStore, layout: Mapping[str, Any] | None = None
) -> dict[str, Point]:
    """Compute default canvas positions for every node.

    Leaves take consecutive horizontal slots across the whole forest, each
    parent is centred above its children, and each level sits one
    ``level_gap`` below its parent.

    Args:
        store: The forest to lay out.
        layout: The ``[layout]`` config table (defaults when None).

    Returns:
        Dict of node id -> (x, y).
    """
    settings = {**DEFAULT_CONFIG["layout"], **(layout or {})}
    origin_x = float(settings["origin_x"])
    origin_y = float(settings["origin_y"])
    sibling_gap = float(settings["sibling_gap"])
    level_gap = float(settings["level_gap"])

    positions: dict[str, Point] = {}
    next_slot = 0

    def _place(node: OrgNode) -> float:
        nonlocal next_slot
        y = origin_y + node.depth * level_gap
        if node.children:
            xs = [_place(child) for child in node.children]
            x = (xs[0] + xs[-1]) / 2
        else:
            x = origin_x + next_slot * sibling_gap
            next_slot += 1
        positions[node.id] = (x, y)
        return x

    for root in store.roots:
        _place(root)
    return positions


# ─────────────────────────────────────────────────────────────────────────────
# Tree -> Graph
# ─────────────────────────────────────────────────────────────────────────────


def project(
    store: NodeStore,
    positions: PositionTable | Mapping[str, Point] | None = None,
    config: Mapping[str, Any] | None = None,
    show_role_names: bool | None = None,
) -> Projection:
    """Project the forest into a renderable graph.

    Nodes appear in pre-order; edges in pre-order of their parent. The
    result depends only on the inputs, so projecting twice gives equal
    projections.

    Args:
        store: The forest to project.
        positions: Manual positions overriding the computed layout.
        config: Full configuration (uses ``[layout]`` and ``[editor]``).
        show_role_names: Whether role labels are shown. None reads
            ``editor.show_role_names`` from config.

    Returns:
        The Projection.
    """
    config = config or DEFAULT_CONFIG
    if show_role_names is None:
        show_role_names = bool(config.get("editor", {}).get("show_role_names", True))
    manual = positions.as_dict() if isinstance(positions, PositionTable) else dict(positions or {})
    computed = layout_positions(store, config.get("layout"))

    nodes: list[VisualNode] = []
    edges: list[VisualEdge] = []
    for node in store.all_nodes():
        x, y = manual.get(node.id, computed[node.id])
        nodes.append(
            VisualNode(
                id=node.id,
                kind=node.kind.value,
                label=node.name if (node.is_group or show_role_names) else "",
                x=x,
                y=y,
                child_count=node.child_count(),
                expanded=store.is_expanded(node.id),
                manual=node.id in manual,
            )
        )
        for child in node.children:
            edges.append(VisualEdge.between(node.id, child.id))
    return Projection(nodes=tuple(nodes), edges=tuple(edges))


# ─────────────────────────────────────────────────────────────────────────────
# Graph -> Tree
# ─────────────────────────────────────────────────────────────────────────────


def connect(store: NodeStore, source_id: str, target_id: str) -> Mutation:
    """Reconcile a connection drawn from ``source_id`` to ``target_id``.

    The source becomes the target's parent. Drawing an edge that already
    exists is a no-op.

    Raises:
        NotFound: If target_id is missing.
        InvalidParent: If source_id is missing or is a role.
        CycleDetected: If source_id lies inside target_id's subtree.
    """
    mutation = reparent(store, target_id, source_id)
    return Mutation("connect", target_id, mutation.store, changed=mutation.changed)


def reconcile_edges(
    store: NodeStore, edges: Iterable[VisualEdge | Mapping[str, Any]]
) -> NodeStore:
    """Apply a canvas edge list to the forest.

    Each edge with no matching parent -> child relationship is turned into
    a reparent. Edges already present in the tree are ignored. Either all
    edges are applied or, when one fails, the error propagates and the
    caller keeps its original store.

    Returns:
        The reconciled NodeStore.
    """
    current = store
    for raw in edges:
        edge = raw if isinstance(raw, VisualEdge) else VisualEdge.from_dict(raw)
        parent = current.parent_of(edge.target) if edge.target in current else None
        if parent is not None and parent.id == edge.source:
            continue
        current = connect(current, edge.source, edge.target).store
    return current


__all__ = [
    "VisualNode",
    "Projection",
    "layout_positions",
    "project",
    "connect",
    "reconcile_edges",
]
