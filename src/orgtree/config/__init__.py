"""
orgtree.config - Configuration loading and defaults
"""

from orgtree.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from orgtree.config.loader import (
    _apply_env_overrides,
    _try_parse_env_value,
    find_config_file,
    load_config,
    merge_configs,
)

__all__ = [
    "load_config",
    "find_config_file",
    "merge_configs",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
]
