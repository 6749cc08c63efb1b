"""Pytest configuration and fixtures."""
import textwrap
from pathlib import Path

import pytest

from pagegraph.cache.run_cache import RunCache
from pagegraph.module_resolver import ModuleResolver
from pagegraph.universe import FileUniverse


@pytest.fixture
def make_repo(tmp_path):
    """Write a small source tree into tmp_path and return its root.

    Usage:
        root = make_repo({"src/a.ts": "export const a = 1;"})
    """

    def _make(files: dict[str, str]) -> Path:
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def repo_context(make_repo):
    """Universe, cache and resolver for a tree, as one engine run would build them."""

    def _context(files: dict[str, str]):
        root = make_repo(files)
        universe = FileUniverse.scan(root)
        cache = RunCache(root)
        resolver = ModuleResolver.for_repository(root, universe, cache=cache)
        return root, universe, cache, resolver

    return _context
