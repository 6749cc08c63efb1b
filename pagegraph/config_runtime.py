"""Runtime settings for an attribution run.

Values are layered: built-in ``DEFAULTS``, then ``.pagegraph/config.json`` in
the repository root, then ``PAGEGRAPH_<SECTION>_<KEY>`` environment variables.
Only keys already present in ``DEFAULTS`` are honoured, and a value whose type
does not match the default is ignored.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

from pagegraph.utils.constants import (
    DEFAULT_INCLUDE_PATTERNS,
    DEFAULT_MAX_FILE_SIZE,
    ENV_PREFIX,
    PAGEGRAPH_DIR_NAME,
)
from pagegraph.utils.logging import logger

DEFAULTS = {
    "analysis": {
        "include": list(DEFAULT_INCLUDE_PATTERNS),
        "exclude": ["**/*.test.*", "**/*.spec.*", "**/*.stories.*", "**/*.d.ts"],
        "graphql_include": ["**/*.graphql", "**/*.gql"],
    },
    "limits": {
        "max_file_size": DEFAULT_MAX_FILE_SIZE,
    },
    "logging": {
        "file_logging": False,
        "file_level": "DEBUG",
    },
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config {path}: top level is not an object")
        return {}
    return data


def _apply_file_values(cfg: dict[str, Any], user: dict[str, Any]) -> None:
    for section, defaults in cfg.items():
        overrides = user.get(section)
        if not isinstance(overrides, dict):
            continue
        for key, value in overrides.items():
            if key not in defaults:
                continue
            if type(value) is not type(defaults[key]):
                logger.debug(f"Config {section}.{key}: expected {type(defaults[key]).__name__}, keeping default")
                continue
            defaults[key] = value


def _coerce_env(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of ``default``.

    Raises ValueError when the string cannot be read as that type.
    """
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUTHY
    if isinstance(default, int):
        return int(raw.strip())
    if isinstance(default, list):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw


def _apply_env_values(cfg: dict[str, Any]) -> None:
    for section, values in cfg.items():
        for key, current in values.items():
            name = f"{ENV_PREFIX}_{section}_{key}".upper()
            raw = os.environ.get(name)
            if raw is None:
                continue
            try:
                values[key] = _coerce_env(raw, current)
            except ValueError:
                logger.warning(f"{name}={raw!r} is not a valid {type(current).__name__}; using {current!r}")


def load_runtime_config(root: str = ".") -> dict[str, Any]:
    """Return a fresh settings dict for the repository at ``root``."""
    cfg = copy.deepcopy(DEFAULTS)
    _apply_file_values(cfg, _read_config_file(Path(root) / PAGEGRAPH_DIR_NAME / "config.json"))
    _apply_env_values(cfg)
    return cfg
