"""Graph module - Canvas projection of the organization forest.

Exports:
- VisualNode: Positioned node for canvas rendering
- VisualEdge: Rendered parent -> child edge
- Projection: Complete rendered graph
- PositionTable: Manual canvas positions (view state)
- edge_id: Deterministic edge id derivation
- project: Tree -> graph projection
- connect / reconcile_edges: Graph -> tree reconciliation
"""

from orgtree.graph.positions import PositionTable
from orgtree.graph.projector import (
    Projection,
    VisualNode,
    connect,
    layout_positions,
    project,
    reconcile_edges,
)
from orgtree.graph.relations import VisualEdge, edge_id

__all__ = [
    "VisualNode",
    "VisualEdge",
    "Projection",
    "PositionTable",
    "edge_id",
    "layout_positions",
    "project",
    "connect",
    "reconcile_edges",
]
