"""Project alias configuration loading (tsconfig.json / jsconfig.json).

Both files are JSON-with-comments in practice, so they are parsed with json5.
Missing or malformed files yield an empty configuration; alias resolution
then falls back to relative and inferred-root strategies.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import json5

from pagegraph.utils.constants import PROJECT_CONFIG_FILES
from pagegraph.utils.logging import logger


@dataclass
class ProjectAliasConfig:
    """Alias settings read from the repository's root config file."""

    base_url: str | None = None
    path_aliases: dict[str, list[str]] = field(default_factory=dict)
    config_file: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.base_url is None and not self.path_aliases


def _read_json5(path: Path) -> dict[str, Any] | None:
    try:
        data = json5.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Failed to parse {path}: {e}")
        return None

    if not isinstance(data, dict):
        logger.debug(f"Ignoring non-object config in {path}")
        return None
    return data


def _resolve_extends(config_path: Path, extends: str) -> Path | None:
    """Only relative extends are followed; package extends are ignored."""
    if not extends.startswith("."):
        return None
    target = (config_path.parent / extends).resolve()
    if target.suffix != ".json":
        candidate = target.with_name(target.name + ".json")
        if candidate.exists():
            return candidate
    return target if target.exists() else None


def load_tsconfig(path: Path, _seen: set[Path] | None = None) -> dict[str, Any]:
    """Load a tsconfig/jsconfig, merging relative `extends` parents.

    compilerOptions are merged key by key (child wins). A relative baseUrl
    or path target from a parent stays relative to the parent's directory,
    so the merged result stores baseUrl as an absolute path under
    `_baseUrlAbs` and the directory that owns `paths` under `_pathsDir`.
    """
    seen = _seen if _seen is not None else set()
    path = path.resolve()
    if path in seen:
        logger.debug(f"Cyclic tsconfig extends at {path}")
        return {}
    seen.add(path)

    data = _read_json5(path)
    if data is None:
        return {}

    merged_options: dict[str, Any] = {}
    extends = data.get("extends")
    if isinstance(extends, str):
        parent_path = _resolve_extends(path, extends)
        if parent_path is not None:
            parent = load_tsconfig(parent_path, seen)
            merged_options.update(parent.get("compilerOptions", {}))

    options = data.get("compilerOptions")
    if isinstance(options, dict):
        if "baseUrl" in options and isinstance(options["baseUrl"], str):
            merged_options["_baseUrlAbs"] = str((path.parent / options["baseUrl"]).resolve())
        if "paths" in options and isinstance(options["paths"], dict):
            merged_options["_pathsDir"] = str(path.parent)
        merged_options.update(options)

    return {"compilerOptions": merged_options, "_configDir": str(path.parent)}


def load_project_alias_config(root: str | Path) -> ProjectAliasConfig:
    """Read baseUrl and paths from the root tsconfig.json, else jsconfig.json."""
    root_path = Path(root)

    for name in PROJECT_CONFIG_FILES:
        config_path = root_path / name
        if not config_path.is_file():
            continue

        data = _read_json5(config_path)
        if data is None:
            continue

        options = data.get("compilerOptions") or {}
        if not isinstance(options, dict):
            options = {}

        base_url = options.get("baseUrl")
        if not isinstance(base_url, str):
            base_url = None

        path_aliases: dict[str, list[str]] = {}
        paths = options.get("paths")
        if isinstance(paths, dict):
            for pattern, targets in paths.items():
                if isinstance(targets, list):
                    path_aliases[pattern] = [t for t in targets if isinstance(t, str)]

        logger.debug(
            f"Loaded alias config from {name}: baseUrl={base_url}, {len(path_aliases)} path aliases"
        )
        return ProjectAliasConfig(base_url=base_url, path_aliases=path_aliases, config_file=name)

    return ProjectAliasConfig()
