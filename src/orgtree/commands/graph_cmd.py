"""
orgtree.commands.graph_cmd - Print the canvas projection of a snapshot.
"""

import argparse
import json
import sys

from orgtree.config import load_config
from orgtree.graph import project
from orgtree.snapshot import load_from_file
from orgtree.tree import CorruptSnapshot


def run(args: argparse.Namespace) -> int:
    """Run the graph command."""
    config = load_config(args.config)
    try:
        store = load_from_file(args.file)
    except (OSError, CorruptSnapshot) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    show_role_names = False if args.hide_role_names else None
    projection = project(store, config=config, show_role_names=show_role_names)
    print(json.dumps(projection.to_dict(), indent=2))
    return 0
