"""
orgtree.cli - Command-line interface.

Main entry point for the orgtree CLI tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from orgtree import __version__
from orgtree.commands import graph_cmd, serve, show, validate


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="orgtree",
        description="Organization hierarchy editor (groups and roles)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  orgtree show org-hierarchy.json       # Print the hierarchy as an outline
  orgtree validate org-hierarchy.json   # Check a snapshot for corruption
  orgtree graph org-hierarchy.json      # Print the canvas projection as JSON
  orgtree serve org-hierarchy.json      # Edit over the REST API

Configuration:
  .orgtree.toml in the current directory or any parent,
  overridden by ORGTREE_<SECTION>_<KEY> environment variables.

For detailed command help: orgtree <command> --help
        """,
    )

    # Global options
    parser.add_argument(
        "--version",
        action="version",
        version=f"orgtree {__version__}",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to configuration file",
        metavar="PATH",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress non-error output",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # show command
    show_parser = subparsers.add_parser("show", help="Print a snapshot as an outline")
    show_parser.add_argument("file", type=Path, help="Snapshot JSON file")
    show_parser.add_argument(
        "--ids",
        action="store_true",
        help="Include node ids in the outline",
    )

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a snapshot file",
    )
    validate_parser.add_argument("file", type=Path, help="Snapshot JSON file")

    # graph command
    graph_parser = subparsers.add_parser(
        "graph",
        help="Print the node/edge projection of a snapshot",
    )
    graph_parser.add_argument("file", type=Path, help="Snapshot JSON file")
    graph_parser.add_argument(
        "--hide-role-names",
        action="store_true",
        help="Project role nodes without labels",
    )

    # serve command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Start the editor REST server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The snapshot file (if given) initialises the session and is the target
of POST /api/save. A missing file starts an empty hierarchy.
""",
    )
    serve_parser.add_argument("file", type=Path, nargs="?", help="Snapshot JSON file")
    serve_parser.add_argument("--host", help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default from config)")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, non-zero for failure)
    """
    parser = create_parser()

    # Enable shell tab-completion if argcomplete is installed
    try:
        import argcomplete

        argcomplete.autocomplete(parser)
    except ImportError:
        pass

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        if args.command == "show":
            return show.run(args)
        elif args.command == "validate":
            return validate.run(args)
        elif args.command == "graph":
            return graph_cmd.run(args)
        elif args.command == "serve":
            return serve.run(args)
        else:
            parser.print_help()
            return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled.", file=sys.stderr)
        return 130
    except Exception as e:
        if args.verbose:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
