"""File universe index - the candidate source files of one repository.

Every other component addresses files by the normalized repo-relative POSIX
path stored here. A file outside the universe is never parsed, resolved to,
or traversed into.
"""

import fnmatch
import os
import re
from functools import lru_cache
from pathlib import Path
from collections.abc import Iterable, Iterator

from pagegraph.utils.constants import (
    DEFAULT_INCLUDE_PATTERNS,
    RESOLVE_EXTENSIONS,
    SKIP_DIRS,
    SOURCE_EXTENSION_RE,
)
from pagegraph.utils.helpers import normalize_rel_path
from pagegraph.utils.logging import logger


@lru_cache(maxsize=256)
def _glob_to_regex(pattern: str) -> re.Pattern:
    """Translate a path glob into a regex.

    `**/` matches zero or more directories (so `**/*.ts` also matches a
    root-level file), `*` and `?` never cross a slash, `{a,b}` alternates.
    """
    i = 0
    out = []
    n = len(pattern)
    while i < n:
        c = pattern[i]
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif c == "*":
            out.append("[^/]*")
            i += 1
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "{":
            end = pattern.find("}", i)
            if end == -1:
                out.append(re.escape(c))
                i += 1
            else:
                options = pattern[i + 1 : end].split(",")
                out.append("(?:" + "|".join(re.escape(o) for o in options) + ")")
                i = end + 1
        else:
            out.append(re.escape(c))
            i += 1
    return re.compile("^" + "".join(out) + "$")


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Match a repo-relative path against a glob.

    Patterns without a slash are matched against the file name as well,
    like fnmatch on the basename.
    """
    if "/" not in pattern and fnmatch.fnmatch(rel_path.rsplit("/", 1)[-1], pattern):
        return True
    return bool(_glob_to_regex(pattern).match(rel_path))


class FileUniverse:
    """Sorted set of repo-relative source paths with extension-agnostic lookup."""

    def __init__(self, root: str | Path, files: Iterable[str]):
        self.root = Path(root)
        normalized = set()
        for f in files:
            rel = normalize_rel_path(f)
            if rel is not None:
                normalized.add(rel)
        self.files: list[str] = sorted(normalized)
        self._index = frozenset(self.files)
        self._alias_bases: list[str] | None = None

    @classmethod
    def scan(
        cls,
        root: str | Path,
        include: list[str] | None = None,
        exclude: list[str] | None = None,
        max_file_size: int | None = None,
    ) -> "FileUniverse":
        """Walk root and collect files matching include and not exclude."""
        root_path = Path(root)
        include = include or list(DEFAULT_INCLUDE_PATTERNS)
        exclude = exclude or []

        files = []
        skipped_dirs = 0
        for dirpath, dirnames, filenames in os.walk(root_path, followlinks=False):
            before = len(dirnames)
            dirnames[:] = [d for d in dirnames if d not in SKIP_DIRS]
            skipped_dirs += before - len(dirnames)

            rel_dir = Path(dirpath).relative_to(root_path).as_posix()
            for filename in filenames:
                rel = filename if rel_dir == "." else f"{rel_dir}/{filename}"
                if not any(matches_glob(rel, p) for p in include):
                    continue
                if any(matches_glob(rel, p) for p in exclude):
                    continue
                if max_file_size is not None:
                    try:
                        if (root_path / rel).stat().st_size >= max_file_size:
                            logger.debug(f"Skipping large file {rel}")
                            continue
                    except OSError:
                        continue
                files.append(rel)

        universe = cls(root_path, files)
        logger.debug(
            f"File universe: {len(universe)} files under {root_path} ({skipped_dirs} dirs skipped)"
        )
        return universe

    @classmethod
    def from_paths(cls, root: str | Path, paths: Iterable[str]) -> "FileUniverse":
        """Build an index from an explicit path list (no filesystem walk)."""
        return cls(root, paths)

    def __contains__(self, rel_path: object) -> bool:
        return rel_path in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    def lookup(self, candidate: str) -> str | None:
        """Map a candidate path to an indexed file.

        Tries the literal path, then stem + each known extension, then
        stem/index + each extension. A runtime extension on the candidate
        (`./foo.js`) is dropped first so it finds the TypeScript source.
        """
        rel = normalize_rel_path(candidate)
        if rel is None:
            return None
        if rel in self._index:
            return rel

        stem = SOURCE_EXTENSION_RE.sub("", rel)
        bases = (rel,) if stem == rel else (stem, rel)
        for base in bases:
            for ext in RESOLVE_EXTENSIONS:
                if base + ext in self._index:
                    return base + ext
            for ext in RESOLVE_EXTENSIONS:
                if f"{base}/index{ext}" in self._index:
                    return f"{base}/index{ext}"
        return None

    def alias_bases(self) -> list[str]:
        """Directories a conventional root alias may point at.

        `src/` first, then every `<prefix>/src/` seen in the index.
        """
        if self._alias_bases is None:
            bases = ["src/"]
            seen = set(bases)
            for f in self.files:
                idx = f.find("/src/")
                while idx != -1:
                    prefix = f[: idx + len("/src/")]
                    if prefix not in seen:
                        seen.add(prefix)
                        bases.append(prefix)
                    idx = f.find("/src/", idx + 1)
            self._alias_bases = bases
        return self._alias_bases
