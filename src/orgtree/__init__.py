"""
orgtree - Organization hierarchy editor core

Maintains a forest of nested groups and roles, edits it through
immutable-style mutations, and projects it both as list-view rows and as
a positioned node/edge graph for canvas rendering. Snapshots of the
forest are exchanged as JSON.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("orgtree")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from orgtree.tree import (
    CorruptSnapshot,
    CycleDetected,
    HierarchyError,
    InvalidParent,
    NodeKind,
    NodeStore,
    NotFound,
    OrgNode,
)
from orgtree.view import ViewController

__all__ = [
    "__version__",
    "NodeKind",
    "OrgNode",
    "NodeStore",
    "ViewController",
    "HierarchyError",
    "NotFound",
    "InvalidParent",
    "CycleDetected",
    "CorruptSnapshot",
]
