"""
orgtree.commands - CLI command implementations
"""

__all__ = [
    "graph_cmd",
    "serve",
    "show",
    "validate",
]
