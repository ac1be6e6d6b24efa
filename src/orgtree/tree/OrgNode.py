"""OrgNode - Node representation for the organization hierarchy.

This module provides the core data structures of the hierarchy:
- NodeKind: Enum of node types (group, role)
- OrgNode: Immutable tree node owning its ordered children
- NodeView: Per-node view state (expanded / editing), kept in a side-table
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, Iterator


class NodeKind(Enum):
    """Types of nodes in the organization hierarchy."""

    GROUP = "group"
    ROLE = "role"

    def can_own_children(self) -> bool:
        """Check if nodes of this kind may own children.

        Returns:
            True for groups. Roles are always structural leaves.
        """
        return self is NodeKind.GROUP

    @property
    def label(self) -> str:
        """Display name ("Group" / "Role")."""
        return self.value.capitalize()


@dataclass(frozen=True)
class OrgNode:
    """A node in the organization hierarchy.

    Nodes are immutable values. Mutations build new nodes along the
    path from a root to the changed node; untouched subtrees are shared
    between the old and the new forest.

    Attributes:
        id: Unique identifier, stable for the node's lifetime.
        kind: Group or role.
        name: Display name, never empty.
        depth: Distance from the root (roots have depth 0).
        children: Owned child nodes in display order.
    """

    id: str
    kind: NodeKind
    name: str
    depth: int = 0
    children: tuple[OrgNode, ...] = field(default=(), repr=False)

    # Iterator access
    def iter_children(self) -> Iterator[OrgNode]:
        """Iterate over child nodes."""
        yield from self.children

    def child_count(self) -> int:
        """Return number of children."""
        return len(self.children)

    @property
    def is_leaf(self) -> bool:
        """True if this node has no children."""
        return len(self.children) == 0

    @property
    def is_group(self) -> bool:
        return self.kind is NodeKind.GROUP

    @property
    def is_role(self) -> bool:
        return self.kind is NodeKind.ROLE

    def walk(self, order: str = "pre") -> Iterator[OrgNode]:
        """Iterate over this node and descendants.

        Args:
            order: Traversal order:
                - "pre": Parent first (depth-first, pre-order)
                - "post": Children first (depth-first, post-order)
                - "level": Breadth-first (level order)

        Yields:
            OrgNode instances in the specified order.
        """
        if order == "pre":
            yield from self._walk_preorder()
        elif order == "post":
            yield from self._walk_postorder()
        elif order == "level":
            yield from self._walk_level()
        else:
            raise ValueError(f"Unknown traversal order: {order}")

    def _walk_preorder(self) -> Iterator[OrgNode]:
        yield self
        for child in self.children:
            yield from child._walk_preorder()

    def _walk_postorder(self) -> Iterator[OrgNode]:
        for child in self.children:
            yield from child._walk_postorder()
        yield self

    def _walk_level(self) -> Iterator[OrgNode]:
        queue: deque[OrgNode] = deque([self])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    def descendant_ids(self) -> list[str]:
        """Return ids of all descendants (excluding this node), pre-order."""
        return [n.id for n in self.walk() if n is not self]

    def find(self, predicate: Callable[[OrgNode], bool]) -> Iterator[OrgNode]:
        """Find this node and descendants matching predicate.

        Args:
            predicate: Function that returns True for matching nodes.

        Yields:
            Matching OrgNode instances in pre-order.
        """
        for node in self.walk():
            if predicate(node):
                yield node

    def with_depth(self, depth: int) -> OrgNode:
        """Return this subtree re-rooted at ``depth``.

        Every descendant's depth is recomputed from the new value. The
        subtree is returned unchanged (same object) when the depth already
        matches.
        """
        if depth == self.depth:
            return self
        return replace(
            self,
            depth=depth,
            children=tuple(child.with_depth(depth + 1) for child in self.children),
        )


@dataclass(frozen=True)
class NodeView:
    """View state for one node.

    Attributes:
        expanded: Whether the node's children are shown in list views.
        editing: True exactly while a rename is in progress.
    """

    expanded: bool = True
    editing: bool = False


DEFAULT_VIEW = NodeView()
