"""Error taxonomy for hierarchy operations.

Each error also derives from the builtin that callers would otherwise
expect for the same situation (``KeyError`` for a missing id,
``ValueError`` for an illegal structure), so existing ``except KeyError``
handlers keep working.
"""

from __future__ import annotations


class HierarchyError(Exception):
    """Base class for all hierarchy editor errors."""


class NotFound(HierarchyError, KeyError):
    """An operation referenced a missing (or stale) node id.

    Callers treat this as recoverable: a stale UI reference after a
    deletion is a no-op, not a crash.
    """

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Node '{self.node_id}' not found"


class InvalidParent(HierarchyError, ValueError):
    """A structurally illegal parent was named (a role, or a missing node)."""

    def __init__(self, node_id: str, reason: str) -> None:
        super().__init__(node_id, reason)
        self.node_id = node_id
        self.reason = reason

    def __str__(self) -> str:
        return f"Invalid parent '{self.node_id}': {self.reason}"


class CycleDetected(HierarchyError, ValueError):
    """Reparenting would place a node inside its own subtree."""

    def __init__(self, node_id: str, target_id: str) -> None:
        super().__init__(node_id, target_id)
        self.node_id = node_id
        self.target_id = target_id

    def __str__(self) -> str:
        if self.node_id == self.target_id:
            return f"Cannot move '{self.node_id}' under itself"
        return f"Cannot move '{self.node_id}' under its own descendant '{self.target_id}'"


class CorruptSnapshot(HierarchyError, ValueError):
    """Snapshot data violates the tree invariants or the exchange schema.

    Attributes:
        problems: Every problem found, in detection order.
    """

    def __init__(self, problems: list[str] | str) -> None:
        if isinstance(problems, str):
            problems = [problems]
        super().__init__(problems)
        self.problems = list(problems)

    def __str__(self) -> str:
        if len(self.problems) == 1:
            return f"Corrupt snapshot: {self.problems[0]}"
        return f"Corrupt snapshot ({len(self.problems)} problems): " + "; ".join(self.problems)


__all__ = [
    "HierarchyError",
    "NotFound",
    "InvalidParent",
    "CycleDetected",
    "CorruptSnapshot",
]
