"""Manual canvas positions.

Dragging a node on the canvas only moves it visually; the tree is not
touched. This table records such manual positions so they survive
re-projection.
"""

from __future__ import annotations

from typing import Iterator

from orgtree.tree.store import NodeStore

Point = tuple[float, float]


class PositionTable:
    """Mutable map of node id -> manually placed (x, y)."""

    def __init__(self, positions: dict[str, Point] | None = None) -> None:
        self._positions: dict[str, Point] = dict(positions or {})

    def move(self, node_id: str, x: float, y: float) -> None:
        """Record a manual position for a node."""
        self._positions[node_id] = (float(x), float(y))

    def get(self, node_id: str) -> Point | None:
        return self._positions.get(node_id)

    def forget(self, node_id: str) -> None:
        """Drop the manual position so the node returns to the layout."""
        self._positions.pop(node_id, None)

    def prune(self, store: NodeStore) -> int:
        """Drop positions of nodes no longer in ``store``.

        Returns:
            Number of entries removed.
        """
        stale = [node_id for node_id in self._positions if node_id not in store]
        for node_id in stale:
            del self._positions[node_id]
        return len(stale)

    def as_dict(self) -> dict[str, Point]:
        return dict(self._positions)

    def clear(self) -> None:
        self._positions.clear()

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __iter__(self) -> Iterator[str]:
        return iter(self._positions)
