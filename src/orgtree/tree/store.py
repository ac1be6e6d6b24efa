"""NodeStore - Immutable container for the organization forest.

Provides indexed, read-only access to the forest plus the view-state
side-table and id allocation counters. All changes go through
``orgtree.tree.mutations`` and produce a new NodeStore.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cached_property
from typing import Iterable, Iterator, Mapping

from orgtree.tree.errors import NotFound
from orgtree.tree.OrgNode import DEFAULT_VIEW, NodeKind, NodeView, OrgNode

# Fresh ids are "<prefix><n>", e.g. g1, g2, r1.
ID_PREFIXES = {NodeKind.GROUP: "g", NodeKind.ROLE: "r"}

# Deepest depth a node may have. Tree walks recurse once per level, so the
# limit keeps every traversal well inside the interpreter recursion limit.
MAX_DEPTH = 200

_ALLOCATED_ID_RE = re.compile(r"^([gr])(\d+)$")


@dataclass(frozen=True)
class _IndexEntry:
    node: OrgNode
    parent_id: str | None


@dataclass(frozen=True)
class NodeStore:
    """The canonical forest of groups and roles at one instant.

    Attributes:
        roots: Root-level nodes in display order.
        view: Side-table of view state keyed by node id. Ids without an
            entry use the defaults (expanded, not editing).
        counters: Highest number handed out per kind ("group" / "role").
    """

    roots: tuple[OrgNode, ...] = ()
    view: Mapping[str, NodeView] = field(default_factory=dict)
    counters: Mapping[str, int] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> NodeStore:
        """Create a store with no nodes."""
        return cls()

    @cached_property
    def _index(self) -> dict[str, _IndexEntry]:
        index: dict[str, _IndexEntry] = {}

        def _visit(node: OrgNode, parent_id: str | None) -> None:
            index[node.id] = _IndexEntry(node, parent_id)
            for child in node.children:
                _visit(child, node.id)

        for root in self.roots:
            _visit(root, None)
        return index

    # ─────────────────────────────────────────────────────────────────────────
    # Lookup
    # ─────────────────────────────────────────────────────────────────────────

    def find_by_id(self, node_id: str) -> OrgNode:
        """Find node by ID.

        Args:
            node_id: The node ID to find.

        Returns:
            The matching OrgNode.

        Raises:
            NotFound: If no node has this id.
        """
        entry = self._index.get(node_id)
        if entry is None:
            raise NotFound(node_id)
        return entry.node

    def get(self, node_id: str) -> OrgNode | None:
        """Find node by ID, returning None when missing."""
        entry = self._index.get(node_id)
        return entry.node if entry else None

    def contains(self, node_id: str) -> bool:
        return node_id in self._index

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def parent_of(self, node_id: str) -> OrgNode | None:
        """Return the parent node, or None for a root.

        Raises:
            NotFound: If no node has this id.
        """
        entry = self._index.get(node_id)
        if entry is None:
            raise NotFound(node_id)
        if entry.parent_id is None:
            return None
        return self._index[entry.parent_id].node

    def path_to(self, node_id: str) -> list[str]:
        """Return the ancestor ids of a node, root first.

        The node itself is not included; a root yields an empty list.

        Raises:
            NotFound: If no node has this id.
        """
        entry = self._index.get(node_id)
        if entry is None:
            raise NotFound(node_id)
        path: list[str] = []
        parent_id = entry.parent_id
        while parent_id is not None:
            path.append(parent_id)
            parent_id = self._index[parent_id].parent_id
        path.reverse()
        return path

    def is_descendant(self, ancestor_id: str, node_id: str) -> bool:
        """Check whether ``node_id`` lies strictly inside ``ancestor_id``'s subtree."""
        if node_id not in self._index:
            return False
        return ancestor_id in self.path_to(node_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Iteration
    # ─────────────────────────────────────────────────────────────────────────

    def iter_roots(self) -> Iterator[OrgNode]:
        """Iterate root nodes."""
        yield from self.roots

    def root_count(self) -> int:
        return len(self.roots)

    def node_count(self) -> int:
        """Return total number of nodes in the forest."""
        return len(self._index)

    def all_nodes(self, order: str = "pre") -> Iterator[OrgNode]:
        """Iterate every node, root by root.

        Args:
            order: Traversal order ("pre", "post", "level").
        """
        for root in self.roots:
            yield from root.walk(order)

    def flatten(self) -> list[tuple[OrgNode, int]]:
        """Return (node, depth) pairs in pre-order."""
        return [(node, node.depth) for node in self.all_nodes()]

    def iter_edges(self) -> Iterator[tuple[str, str]]:
        """Iterate (parent_id, child_id) pairs in pre-order."""
        for node in self.all_nodes():
            for child in node.children:
                yield node.id, child.id

    # ─────────────────────────────────────────────────────────────────────────
    # View state
    # ─────────────────────────────────────────────────────────────────────────

    def view_of(self, node_id: str) -> NodeView:
        """Return the view state of a node (defaults when unset)."""
        return self.view.get(node_id, DEFAULT_VIEW)

    def is_expanded(self, node_id: str) -> bool:
        return self.view_of(node_id).expanded

    def is_editing(self, node_id: str) -> bool:
        return self.view_of(node_id).editing

    # ─────────────────────────────────────────────────────────────────────────
    # Comparison
    # ─────────────────────────────────────────────────────────────────────────

    def structure(self) -> list[tuple[str, str, str, str | None]]:
        """Return (id, kind, name, parent_id) tuples in pre-order.

        Captures everything that defines the tree (sibling order included)
        and nothing else.
        """
        return [
            (node.id, node.kind.value, node.name, self._index[node.id].parent_id)
            for node in self.all_nodes()
        ]

    def structurally_equal(self, other: NodeStore) -> bool:
        """Compare ids, kinds, names and parent links, ignoring view state."""
        return self.structure() == other.structure()

    # ─────────────────────────────────────────────────────────────────────────
    # Id allocation
    # ─────────────────────────────────────────────────────────────────────────

    def allocate_id(self, kind: NodeKind) -> tuple[str, dict[str, int]]:
        """Pick a fresh id for a new node of ``kind``.

        Counters only ever grow, so an id is never handed out twice, even
        after the node holding it was deleted.

        Returns:
            Tuple of (new_id, updated counters).
        """
        prefix = ID_PREFIXES[kind]
        number = self.counters.get(kind.value, 0)
        while True:
            number += 1
            candidate = f"{prefix}{number}"
            if candidate not in self._index:
                break
        counters = dict(self.counters)
        counters[kind.value] = number
        return candidate, counters


def seed_counters(node_ids: Iterable[str]) -> dict[str, int]:
    """Compute allocation counters that skip every id already in use."""
    counters = {kind.value: 0 for kind in NodeKind}
    by_prefix = {prefix: kind.value for kind, prefix in ID_PREFIXES.items()}
    for node_id in node_ids:
        match = _ALLOCATED_ID_RE.match(node_id)
        if match:
            kind = by_prefix[match.group(1)]
            counters[kind] = max(counters[kind], int(match.group(2)))
    return counters


def check_invariants(roots: Iterable[OrgNode]) -> list[str]:
    """Check the structural invariants of a forest.

    Verifies unique ids, depth consistency, non-empty names, that roles
    own no children, that every root is a group and that no node is deeper
    than ``MAX_DEPTH``. Nested tuples can only express shared ownership or
    cycles through repeated ids, which the uniqueness check catches.

    Returns:
        Human-readable violation messages; empty when the forest is valid.
    """
    problems: list[str] = []
    seen: set[str] = set()

    def _visit(node: OrgNode, expected_depth: int) -> None:
        if expected_depth > MAX_DEPTH:
            problems.append(f"node '{node.id}' is nested deeper than {MAX_DEPTH} levels")
            return
        if node.id in seen:
            problems.append(f"duplicate id '{node.id}'")
        seen.add(node.id)
        if node.depth != expected_depth:
            problems.append(
                f"node '{node.id}' has depth {node.depth}, expected {expected_depth}"
            )
        if not node.name.strip():
            problems.append(f"node '{node.id}' has an empty name")
        if node.children and not node.kind.can_own_children():
            problems.append(f"role '{node.id}' owns {len(node.children)} children")
        for child in node.children:
            _visit(child, expected_depth + 1)

    for root in roots:
        if not root.kind.can_own_children():
            problems.append(f"role '{root.id}' cannot stand at the root level")
        _visit(root, 0)
    return problems


__all__ = ["NodeStore", "ID_PREFIXES", "MAX_DEPTH", "check_invariants", "seed_counters"]
