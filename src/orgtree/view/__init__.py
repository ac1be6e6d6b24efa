"""View module - Session state and list-view rendering.

Exports:
- ViewController: Owns the store and view state of one editing session
- Notification: Non-blocking user-visible message
- TreeRow: One row of the list view
- visible_rows: Flatten the forest under a search / kind filter
"""

from orgtree.view.controller import Notification, ViewController
from orgtree.view.rows import KIND_FILTERS, TreeRow, visible_rows

__all__ = [
    "ViewController",
    "Notification",
    "TreeRow",
    "KIND_FILTERS",
    "visible_rows",
]
