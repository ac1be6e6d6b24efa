"""
orgtree.config.defaults - Default configuration values.
"""

from typing import Any, Dict

CONFIG_FILENAME = ".orgtree.toml"

ENV_PREFIX = "ORGTREE_"

DEFAULT_CONFIG: Dict[str, Any] = {
    "editor": {
        "default_group_name": "New Group",
        "default_role_name": "New Role",
        "show_role_names": True,
    },
    "layout": {
        # Canvas coordinates of the first root, and spacing between
        # neighbouring leaves / consecutive levels.
        "origin_x": 0,
        "origin_y": 50,
        "sibling_gap": 200,
        "level_gap": 150,
    },
    "snapshot": {
        "indent": 2,
        "include_edges": True,
        "export_filename": "org-hierarchy.json",
    },
    "server": {
        "host": "127.0.0.1",
        "port": 5050,
    },
}
