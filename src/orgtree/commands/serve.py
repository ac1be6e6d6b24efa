"""
orgtree.commands.serve - Start the editor REST server.

Requires the ``serve`` extra (flask, flask-cors).
"""

import argparse
import sys

from orgtree.config import load_config
from orgtree.snapshot import load_from_file
from orgtree.tree import CorruptSnapshot
from orgtree.view import ViewController


def run(args: argparse.Namespace) -> int:
    """Run the serve command."""
    try:
        from orgtree.server import create_app
    except ImportError:
        print("Error: server dependencies not installed.", file=sys.stderr)
        print("Install with: pip install orgtree[serve]", file=sys.stderr)
        return 1

    config = load_config(args.config)
    store = None
    if args.file is not None and args.file.exists():
        try:
            store = load_from_file(args.file)
        except CorruptSnapshot as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    controller = ViewController(store, config)
    app = create_app(controller, config, export_path=args.file)

    host = args.host or config["server"]["host"]
    port = args.port or int(config["server"]["port"])
    print(f"Serving {controller.store.node_count()} nodes on http://{host}:{port}", file=sys.stderr)
    app.run(host=host, port=port, debug=False)
    return 0
