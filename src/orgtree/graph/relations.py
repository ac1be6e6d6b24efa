"""Relations - Rendered parent/child edges.

Edges are derived from the tree, never stored independently. An edge id
is a pure function of its endpoints, so re-projecting after an unrelated
mutation yields the same ids for the same relationships.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


def _escape(node_id: str) -> str:
    # "~" -> "~0", "-" -> "~1": the escaped id never contains "-".
    return node_id.replace("~", "~0").replace("-", "~1")


def edge_id(parent_id: str, child_id: str) -> str:
    """Return the deterministic id of the edge parent -> child.

    The id is ``e<parent>-<child>``. Hyphens and tildes inside either id
    are escaped so the single separating hyphen is unambiguous and two
    different links never share an id. Ids without those characters
    (``g1``, ``r2``, ...) appear unchanged, e.g. ``eg1-r2``.
    """
    return f"e{_escape(parent_id)}-{_escape(child_id)}"


@dataclass(frozen=True)
class VisualEdge:
    """A rendered parent -> child relationship.

    Attributes:
        id: Deterministic edge id (see ``edge_id``).
        source: Parent node id.
        target: Child node id.
    """

    id: str
    source: str
    target: str

    @classmethod
    def between(cls, source: str, target: str) -> VisualEdge:
        return cls(id=edge_id(source, target), source=source, target=target)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VisualEdge:
        """Build an edge from a canvas payload.

        Only ``source`` and ``target`` are required; a missing id is
        derived from them.

        Raises:
            KeyError: If source or target is missing.
        """
        source = str(data["source"])
        target = str(data["target"])
        return cls(id=str(data.get("id") or edge_id(source, target)), source=source, target=target)

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "source": self.source, "target": self.target}
