"""Module resolution for TypeScript/JavaScript projects with tsconfig.json support.

Maps an import specifier seen in one file to a file in the FileUniverse.
Resolution is heuristic: anything that does not land on an indexed file
(packages, assets, typos) is unresolved and returns None without logging
above DEBUG.
"""

import os
import posixpath
from pathlib import Path
from typing import Any

from pagegraph.config import ProjectAliasConfig, load_project_alias_config, load_tsconfig
from pagegraph.universe import FileUniverse
from pagegraph.utils.constants import PROJECT_CONFIG_FILES
from pagegraph.utils.logging import logger

ROOT_ALIAS = "@/"


def match_path_pattern(specifier: str, paths: dict[str, list[str]]) -> list[str]:
    """Expand tsconfig `paths` entries matching specifier, in declared order.

    `pattern*` captures the wildcard and substitutes it into each target;
    patterns without `*` match exactly.
    """
    out: list[str] = []
    for pattern, targets in paths.items():
        if "*" not in pattern:
            if specifier == pattern:
                out.extend(targets)
            continue
        prefix, _, suffix = pattern.partition("*")
        if not specifier.startswith(prefix) or not specifier.endswith(suffix):
            continue
        if len(specifier) < len(prefix) + len(suffix):
            continue
        middle = specifier[len(prefix) : len(specifier) - len(suffix)]
        for target in targets:
            out.append(target.replace("*", middle, 1) if "*" in target else target)
    return out


def _normalize_base_url(base_url: str | None) -> str | None:
    if base_url is None:
        return None
    normalized = posixpath.normpath(base_url.replace("\\", "/"))
    return "" if normalized == "." else normalized


def _is_bare_package(specifier: str) -> bool:
    """`react`, `lodash` - single segment, not relative, not scoped, not absolute."""
    return not specifier.startswith((".", "/", "@")) and "/" not in specifier


class TsConfigResolver:
    """Resolves with the nearest tsconfig/jsconfig of the importing file.

    Understands `extends`, `compilerOptions.baseUrl` and `compilerOptions.paths`
    per config directory, so nested workspaces with their own aliases resolve
    the way the project's own tooling would.
    """

    def __init__(self, project_root: str | Path, universe: FileUniverse):
        self.project_root = Path(project_root).resolve()
        self.universe = universe
        self._config_path_by_dir: dict[str, Path | None] = {}
        self._config_by_path: dict[Path, dict[str, Any]] = {}

    def resolve(self, from_file: str, specifier: str) -> str | None:
        if not specifier or _is_bare_package(specifier):
            return None

        if specifier.startswith("."):
            return self.universe.lookup(posixpath.join(posixpath.dirname(from_file), specifier))

        config = self._config_for_file(from_file)
        if not config:
            return None

        options = config.get("compilerOptions", {})
        base_abs = options.get("_baseUrlAbs")
        paths = options.get("paths")
        if isinstance(paths, dict):
            paths_dir = base_abs or options.get("_pathsDir") or config.get("_configDir")
            candidates = match_path_pattern(
                specifier, {k: v for k, v in paths.items() if isinstance(v, list)}
            )
            for target in candidates:
                resolved = self._lookup_abs(Path(paths_dir) / target)
                if resolved:
                    return resolved

        if base_abs:
            return self._lookup_abs(Path(base_abs) / specifier)

        return None

    def _lookup_abs(self, abs_path: Path) -> str | None:
        rel = os.path.relpath(os.path.normpath(str(abs_path)), str(self.project_root))
        rel = rel.replace("\\", "/")
        if rel.startswith(".."):
            return None
        return self.universe.lookup(rel)

    def _config_for_file(self, from_file: str) -> dict[str, Any] | None:
        config_path = self._config_path_for_dir(posixpath.dirname(from_file))
        if config_path is None:
            return None
        if config_path not in self._config_by_path:
            self._config_by_path[config_path] = load_tsconfig(config_path)
        return self._config_by_path[config_path]

    def _config_path_for_dir(self, rel_dir: str) -> Path | None:
        """Nearest config walking up to the repository root, cached per directory."""
        if rel_dir in self._config_path_by_dir:
            return self._config_path_by_dir[rel_dir]

        found = None
        current = rel_dir
        while True:
            directory = self.project_root / current if current else self.project_root
            for name in PROJECT_CONFIG_FILES:
                candidate = directory / name
                if candidate.is_file():
                    found = candidate
                    break
            if found is not None or not current:
                break
            current = posixpath.dirname(current)

        self._config_path_by_dir[rel_dir] = found
        return found


class ModuleResolver:
    """Resolves module imports for TypeScript/JavaScript projects.

    Strategy order, first hit wins:
      1. project-configuration-aware delegate (nearest tsconfig/jsconfig)
      2. relative specifiers
      3. the `@/` root alias: baseUrl, then inferred `src/` alias bases
      4. root config `paths` patterns
      5. baseUrl-relative bare specifiers
    """

    def __init__(
        self,
        universe: FileUniverse,
        alias_config: ProjectAliasConfig | None = None,
        delegate: TsConfigResolver | None = None,
        cache=None,
    ):
        self.universe = universe
        self.alias_config = alias_config or ProjectAliasConfig()
        self.delegate = delegate
        self.cache = cache
        self.base_url = _normalize_base_url(self.alias_config.base_url)
        self.path_aliases = self.alias_config.path_aliases

    @classmethod
    def for_repository(
        cls,
        project_root: str | Path,
        universe: FileUniverse,
        alias_config: ProjectAliasConfig | None = None,
        cache=None,
    ) -> "ModuleResolver":
        """Resolver with the tsconfig-aware delegate wired in."""
        if alias_config is None:
            alias_config = load_project_alias_config(project_root)
        return cls(
            universe,
            alias_config=alias_config,
            delegate=TsConfigResolver(project_root, universe),
            cache=cache,
        )

    def resolve(self, from_file: str, specifier: str) -> str | None:
        """Resolve an import specifier to an indexed file, or None."""
        if not specifier:
            return None

        if self.cache is not None:
            key = (from_file, specifier)
            hit, value = self.cache.get_resolution(key)
            if hit:
                return value
            value = self._resolve_uncached(from_file, specifier)
            self.cache.set_resolution(key, value)
            return value

        return self._resolve_uncached(from_file, specifier)

    def _resolve_uncached(self, from_file: str, specifier: str) -> str | None:
        if self.delegate is not None:
            resolved = self.delegate.resolve(from_file, specifier)
            if resolved:
                return resolved

        if specifier.startswith("."):
            return self._resolve_relative(from_file, specifier)

        if specifier.startswith(ROOT_ALIAS):
            return self._resolve_root_alias(specifier[len(ROOT_ALIAS) :])

        resolved = self._resolve_path_aliases(specifier)
        if resolved:
            return resolved

        if self.base_url is not None:
            resolved = self.universe.lookup(posixpath.join(self.base_url, specifier))
            if resolved:
                return resolved

        logger.debug(f"Unresolved import '{specifier}' from {from_file}")
        return None

    def _resolve_relative(self, from_file: str, specifier: str) -> str | None:
        return self.universe.lookup(posixpath.join(posixpath.dirname(from_file), specifier))

    def _resolve_root_alias(self, sub: str) -> str | None:
        if self.base_url is not None:
            resolved = self.universe.lookup(posixpath.join(self.base_url, sub))
            if resolved:
                return resolved

        for base in self.universe.alias_bases():
            resolved = self.universe.lookup(base + sub)
            if resolved:
                return resolved
        return None

    def _resolve_path_aliases(self, specifier: str) -> str | None:
        for target in match_path_pattern(specifier, self.path_aliases):
            candidate = posixpath.join(self.base_url, target) if self.base_url else target
            resolved = self.universe.lookup(candidate)
            if resolved:
                return resolved
        return None
