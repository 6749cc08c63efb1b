"""Run-lifetime caches for file content, parse trees and extraction results.

One RunCache belongs to one engine run and is handed to every component that
reads files. Entries are write-once, read-many and keyed by the normalized
repo-relative path; nothing is invalidated or persisted.
"""

from pathlib import Path
from typing import Any

from pagegraph.utils.logging import logger

MISSING = object()


class RunCache:
    """In-memory caches shared by the resolver, extractors and engine."""

    def __init__(self, project_root: str | Path, max_file_size: int | None = None):
        self.project_root = Path(project_root)
        self.max_file_size = max_file_size
        self._content: dict[str, str | None] = {}
        self._trees: dict[str, Any] = {}
        self._edges: dict[str, list] = {}
        self._exports: dict[str, Any] = {}
        self._operations: dict[str, list] = {}
        self._resolutions: dict[tuple[str, str], str | None] = {}
        self._stats = {"hits": 0, "misses": 0, "read_errors": 0, "parse_failures": 0}

    def read_text(self, rel_path: str) -> str | None:
        """File content, or None if unreadable. Failures are cached too."""
        cached = self._content.get(rel_path, MISSING)
        if cached is not MISSING:
            self._stats["hits"] += 1
            return cached

        self._stats["misses"] += 1
        abs_path = self.project_root / rel_path
        content = None
        try:
            if self.max_file_size is not None and abs_path.stat().st_size >= self.max_file_size:
                logger.debug(f"Skipping oversized file {rel_path}")
            else:
                content = abs_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._stats["read_errors"] += 1
            logger.debug(f"Could not read {rel_path}: {e}")

        self._content[rel_path] = content
        return content

    def get_tree(self, rel_path: str) -> Any:
        """Cached parse result: a tree, a ParseFailure, or MISSING."""
        return self._trees.get(rel_path, MISSING)

    def set_tree(self, rel_path: str, value: Any) -> None:
        if isinstance(value, Exception):
            self._stats["parse_failures"] += 1
        self._trees[rel_path] = value

    def edges(self, rel_path: str, compute) -> list:
        return self._memo(self._edges, rel_path, compute)

    def exports(self, rel_path: str, compute) -> Any:
        return self._memo(self._exports, rel_path, compute)

    def operations(self, rel_path: str, compute) -> list:
        return self._memo(self._operations, rel_path, compute)

    def get_resolution(self, key: tuple[str, str]) -> tuple[bool, str | None]:
        if key in self._resolutions:
            self._stats["hits"] += 1
            return True, self._resolutions[key]
        self._stats["misses"] += 1
        return False, None

    def set_resolution(self, key: tuple[str, str], value: str | None) -> None:
        self._resolutions[key] = value

    def _memo(self, store: dict, rel_path: str, compute) -> Any:
        cached = store.get(rel_path, MISSING)
        if cached is not MISSING:
            self._stats["hits"] += 1
            return cached
        self._stats["misses"] += 1
        value = compute(rel_path)
        store[rel_path] = value
        return value

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        stats = dict(self._stats)
        stats["files_read"] = len(self._content)
        stats["trees"] = len(self._trees)
        stats["resolutions"] = len(self._resolutions)
        total_requests = stats["hits"] + stats["misses"]
        if total_requests > 0:
            stats["hit_rate"] = round(stats["hits"] / total_requests * 100, 1)
        else:
            stats["hit_rate"] = 0
        return stats

