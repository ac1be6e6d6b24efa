"""
orgtree.config.loader - Locate, parse and merge configuration.

Configuration comes from three layers, later layers winning:

1. ``DEFAULT_CONFIG``
2. A ``.orgtree.toml`` file (found by walking up from the working directory)
3. Environment variables ``ORGTREE_<SECTION>_<KEY>``
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import tomlkit

from orgtree.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX


def find_config_file(start: Path) -> Optional[Path]:
    """Find ``.orgtree.toml`` in ``start`` or any of its parents.

    Args:
        start: Directory (or file) to start searching from.

    Returns:
        Path to the config file, or None if none exists.
    """
    current = start.resolve()
    if current.is_file():
        current = current.parent
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested tables are merged key by key; any other value in ``override``
    replaces the base value.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment value into a typed Python value.

    Handles JSON lists/objects, booleans and integers. Anything else,
    including malformed JSON, is returned as the original string.
    """
    stripped = value.strip()
    if stripped.startswith(("[", "{")):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    lowered = stripped.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        return value


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """Apply ``ORGTREE_<SECTION>_<KEY>`` environment variables.

    The first underscore-separated word after the prefix names the section;
    the rest (lower-cased) is the key, e.g. ``ORGTREE_LAYOUT_LEVEL_GAP=120``
    sets ``config["layout"]["level_gap"] = 120``.
    """
    for env_name, raw in os.environ.items():
        if not env_name.startswith(ENV_PREFIX):
            continue
        parts = env_name[len(ENV_PREFIX) :].lower().split("_", 1)
        if len(parts) != 2 or not parts[1]:
            continue
        section, key = parts
        config.setdefault(section, {})
        if isinstance(config[section], dict):
            config[section][key] = _try_parse_env_value(raw)
    return config


def parse_config_text(text: str) -> Dict[str, Any]:
    """Parse TOML text into plain dicts/lists."""
    return tomlkit.parse(text).unwrap()


def load_config(config_path: Optional[Path] = None, start: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration merged over the defaults.

    Args:
        config_path: Explicit config file. When None, ``find_config_file``
            is used starting from ``start`` (default: working directory).
        start: Directory to search from when no explicit path is given.

    Returns:
        Complete configuration dict.

    Raises:
        FileNotFoundError: If an explicit config_path does not exist.
        tomlkit.exceptions.ParseError: If the file is not valid TOML.
    """
    if config_path is None:
        config_path = find_config_file(start or Path.cwd())
    elif not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    config = copy.deepcopy(DEFAULT_CONFIG)
    if config_path is not None:
        config = merge_configs(config, parse_config_text(config_path.read_text(encoding="utf-8")))
    return _apply_env_overrides(config)
