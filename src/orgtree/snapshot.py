"""Snapshot exchange format - Serialize the forest to/from JSON.

The snapshot is the only file contract of the editor::

    {
      "nodes": [{"id": str, "type": "group"|"role", "name": str,
                 "parentId": str|null}, ...],
      "edges": [{"id": str, "source": str, "target": str}, ...]
    }

``edges`` is derivable from ``parentId`` and included for convenience.
Loading re-validates every structural invariant and rejects the whole
snapshot (``CorruptSnapshot``) on the first inconsistent file rather than
repairing it. View state is not part of the snapshot.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from orgtree.graph.relations import edge_id
from orgtree.tree.errors import CorruptSnapshot
from orgtree.tree.OrgNode import NodeKind, OrgNode
from orgtree.tree.store import MAX_DEPTH, NodeStore, check_invariants, seed_counters

logger = logging.getLogger(__name__)

_KIND_VALUES = {kind.value for kind in NodeKind}


def serialize(
    store: NodeStore,
    include_edges: bool = True,
    viewport: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Serialize a NodeStore to a JSON-compatible dict.

    Args:
        store: The forest to serialize.
        include_edges: Whether to include the derived ``edges`` list.
        viewport: Optional canvas viewport (e.g. ``{"x", "y", "zoom"}``),
            stored as-is and ignored on load.

    Returns:
        Dict in the snapshot format, nodes in pre-order.
    """
    nodes: list[dict[str, Any]] = []
    for node in store.all_nodes():
        parent = store.parent_of(node.id)
        nodes.append(
            {
                "id": node.id,
                "type": node.kind.value,
                "name": node.name,
                "parentId": parent.id if parent else None,
            }
        )

    result: dict[str, Any] = {"nodes": nodes}
    if include_edges:
        result["edges"] = [
            {"id": edge_id(parent_id, child_id), "source": parent_id, "target": child_id}
            for parent_id, child_id in store.iter_edges()
        ]
    if viewport is not None:
        result["viewport"] = dict(viewport)
    return result


# ─────────────────────────────────────────────────────────────────────────────
# Validation helpers
# ─────────────────────────────────────────────────────────────────────────────


def _validate_node_entries(raw_nodes: list[Any], problems: list[str]) -> list[dict[str, Any]]:
    """Check the shape of every node entry, returning the well-formed ones."""
    entries: list[dict[str, Any]] = []
    seen: set[str] = set()
    for i, raw in enumerate(raw_nodes):
        where = f"nodes[{i}]"
        if not isinstance(raw, dict):
            problems.append(f"{where} is not an object")
            continue
        node_id = raw.get("id")
        if not isinstance(node_id, str) or not node_id:
            problems.append(f"{where} has no string id")
            continue
        where = f"node '{node_id}'"
        ok = True
        if raw.get("type") not in _KIND_VALUES:
            problems.append(f"{where} has unknown type {raw.get('type')!r}")
            ok = False
        name = raw.get("name")
        if not isinstance(name, str) or not name.strip():
            problems.append(f"{where} has an empty name")
            ok = False
        parent_id = raw.get("parentId")
        if parent_id is not None and not isinstance(parent_id, str):
            problems.append(f"{where} has a non-string parentId")
            ok = False
        if node_id in seen:
            problems.append(f"duplicate id '{node_id}'")
            ok = False
        seen.add(node_id)
        if ok:
            entries.append(raw)
    return entries


def _validate_links(entries: list[dict[str, Any]], problems: list[str]) -> None:
    """Check that parent references resolve to groups and form no cycles."""
    by_id = {entry["id"]: entry for entry in entries}
    for entry in entries:
        parent_id = entry.get("parentId")
        if parent_id is None:
            continue
        parent = by_id.get(parent_id)
        if parent is None:
            problems.append(f"node '{entry['id']}' references missing parent '{parent_id}'")
        elif parent["type"] != NodeKind.GROUP.value:
            problems.append(f"role '{parent_id}' has children (e.g. '{entry['id']}')")

    # Every node must reach a root by following parent links, within MAX_DEPTH steps.
    too_deep = False
    for entry in entries:
        visited = {entry["id"]}
        parent_id = entry.get("parentId")
        while parent_id is not None and parent_id in by_id:
            if parent_id in visited:
                problems.append(f"node '{entry['id']}' is part of a parent cycle")
                break
            if len(visited) > MAX_DEPTH:
                if not too_deep:
                    problems.append(
                        f"node '{entry['id']}' is nested deeper than {MAX_DEPTH} levels"
                    )
                    too_deep = True
                break
            visited.add(parent_id)
            parent_id = by_id[parent_id].get("parentId")


def _validate_edges(
    raw_edges: Any, entries: list[dict[str, Any]], problems: list[str]
) -> None:
    """Check that ``edges`` mirror the parentId links exactly."""
    if not isinstance(raw_edges, list):
        problems.append("'edges' must be a list")
        return
    expected = {(e["parentId"], e["id"]) for e in entries if e.get("parentId") is not None}
    found: set[tuple[str, str]] = set()
    for i, raw in enumerate(raw_edges):
        if not isinstance(raw, dict):
            problems.append(f"edges[{i}] is not an object")
            continue
        source, target = raw.get("source"), raw.get("target")
        if not isinstance(source, str) or not isinstance(target, str):
            problems.append(f"edges[{i}] needs string source and target")
            continue
        pair = (source, target)
        if pair in found:
            problems.append(f"duplicate edge '{source}' -> '{target}'")
        elif pair not in expected:
            problems.append(f"edge '{source}' -> '{target}' has no matching parentId link")
        found.add(pair)
    for source, target in sorted(expected - found):
        problems.append(f"missing edge '{source}' -> '{target}'")


def deserialize(data: Any) -> NodeStore:
    """Build a NodeStore from snapshot data.

    Sibling order follows the order of appearance in ``nodes``. View state
    starts at the defaults and id counters are seeded past every id in use.

    Args:
        data: Parsed snapshot (dict).

    Returns:
        The loaded NodeStore.

    Raises:
        CorruptSnapshot: If the data violates the schema or any tree
            invariant. Lists every problem found.
    """
    if not isinstance(data, dict):
        raise CorruptSnapshot("snapshot must be a JSON object")
    raw_nodes = data.get("nodes")
    if not isinstance(raw_nodes, list):
        raise CorruptSnapshot("snapshot needs a 'nodes' list")

    problems: list[str] = []
    entries = _validate_node_entries(raw_nodes, problems)
    _validate_links(entries, problems)
    if data.get("edges") is not None:
        _validate_edges(data["edges"], entries, problems)
    if problems:
        logger.debug("Rejected snapshot: %s", problems)
        raise CorruptSnapshot(problems)

    children: dict[str | None, list[dict[str, Any]]] = {}
    for entry in entries:
        children.setdefault(entry.get("parentId"), []).append(entry)

    def _build(entry: dict[str, Any], depth: int) -> OrgNode:
        return OrgNode(
            id=entry["id"],
            kind=NodeKind(entry["type"]),
            name=entry["name"],
            depth=depth,
            children=tuple(_build(child, depth + 1) for child in children.get(entry["id"], [])),
        )

    roots = tuple(_build(entry, 0) for entry in children.get(None, []))
    problems = check_invariants(roots)
    if problems:
        raise CorruptSnapshot(problems)

    store = NodeStore(roots=roots, counters=seed_counters(e["id"] for e in entries))
    logger.debug("Loaded snapshot with %d nodes", store.node_count())
    return store


# ─────────────────────────────────────────────────────────────────────────────
# Text and file helpers
# ─────────────────────────────────────────────────────────────────────────────


def dumps(
    store: NodeStore,
    indent: int | None = 2,
    include_edges: bool = True,
    viewport: Mapping[str, Any] | None = None,
) -> str:
    """Serialize a NodeStore to JSON text."""
    return json.dumps(serialize(store, include_edges, viewport), indent=indent, ensure_ascii=False)


def loads(text: str) -> NodeStore:
    """Parse JSON text into a NodeStore.

    Raises:
        CorruptSnapshot: If the text is not valid JSON or not a valid snapshot.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptSnapshot(f"invalid JSON: {e}") from e
    return deserialize(data)


def export_to_file(
    store: NodeStore,
    path: Path | str,
    indent: int | None = 2,
    include_edges: bool = True,
    viewport: Mapping[str, Any] | None = None,
) -> Path:
    """Write a snapshot file in one atomic step.

    The JSON is written to a temporary file beside ``path`` and moved into
    place, so readers never observe a partially written snapshot.

    Returns:
        The written path.
    """
    path = Path(path)
    text = dumps(store, indent=indent, include_edges=include_edges, viewport=viewport)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent or Path("."))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.info("Exported %d nodes to %s", store.node_count(), path)
    return path


def load_from_file(path: Path | str) -> NodeStore:
    """Read and validate a snapshot file.

    Raises:
        OSError: If the file cannot be read.
        CorruptSnapshot: If the content is not a valid snapshot.
    """
    return loads(Path(path).read_text(encoding="utf-8"))


__all__ = [
    "serialize",
    "deserialize",
    "dumps",
    "loads",
    "export_to_file",
    "load_from_file",
]
