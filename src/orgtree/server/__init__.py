"""orgtree.server - Flask REST API server for the hierarchy editor.

Provides a thin REST wrapper over a ViewController, exposing the list
view, the canvas projection and the editing commands over HTTP.
"""

from orgtree.server.app import create_app

__all__ = ["create_app"]
