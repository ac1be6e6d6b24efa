"""Tree module - The authoritative organization forest.

Exports:
- NodeKind: Enum of node types (group, role)
- OrgNode: Immutable tree node
- NodeView: Per-node view state (expanded / editing)
- NodeStore: Immutable forest container with indexed lookup
- Mutation: Result record of a mutation operation
- HierarchyError and its subclasses: the error taxonomy

Mutation operations live in orgtree.tree.mutations.
"""

from orgtree.tree.errors import (
    CorruptSnapshot,
    CycleDetected,
    HierarchyError,
    InvalidParent,
    NotFound,
)
from orgtree.tree.mutations import Mutation
from orgtree.tree.OrgNode import NodeKind, NodeView, OrgNode
from orgtree.tree.store import NodeStore, check_invariants

__all__ = [
    "NodeKind",
    "OrgNode",
    "NodeView",
    "NodeStore",
    "Mutation",
    "check_invariants",
    "HierarchyError",
    "NotFound",
    "InvalidParent",
    "CycleDetected",
    "CorruptSnapshot",
]
