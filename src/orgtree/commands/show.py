"""
orgtree.commands.show - Print a snapshot as an indented outline.
"""

import argparse
import sys

from orgtree.snapshot import load_from_file
from orgtree.tree import CorruptSnapshot, NodeKind, OrgNode


def run(args: argparse.Namespace) -> int:
    """Run the show command."""
    try:
        store = load_from_file(args.file)
    except (OSError, CorruptSnapshot) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not store.root_count():
        print("(empty hierarchy)")
        return 0

    def print_tree(node: OrgNode) -> None:
        prefix = "  " * node.depth
        icon = "▸" if node.kind is NodeKind.GROUP else "•"
        suffix = f"  [{node.id}]" if args.ids else ""
        print(f"{prefix}{icon} {node.name}{suffix}")
        for child in node.children:
            print_tree(child)

    for root in store.iter_roots():
        print_tree(root)

    groups = sum(1 for n in store.all_nodes() if n.is_group)
    print()
    print(f"{groups} groups, {store.node_count() - groups} roles")
    return 0
