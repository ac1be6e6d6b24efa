"""
orgtree.commands.validate - Validate a snapshot file.
"""

import argparse
import sys

from orgtree.snapshot import load_from_file
from orgtree.tree import CorruptSnapshot


def run(args: argparse.Namespace) -> int:
    """Run the validate command.

    Returns:
        0 when the snapshot is valid, 1 otherwise.
    """
    try:
        store = load_from_file(args.file)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except CorruptSnapshot as e:
        print(f"✗ {args.file}: {len(e.problems)} problem(s)", file=sys.stderr)
        for problem in e.problems:
            print(f"  - {problem}", file=sys.stderr)
        return 1

    if not args.quiet:
        print(f"✓ {args.file}: {store.node_count()} nodes, {store.root_count()} roots")
    return 0
