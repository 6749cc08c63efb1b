"""Page entry-file location."""

from pagegraph.universe import FileUniverse
from pagegraph.utils.constants import CANONICAL_PAGE_ROOTS
from pagegraph.utils.helpers import normalize_rel_path


def locate_entry_file(universe: FileUniverse, file_path: str) -> str | None:
    """Map a page's file path onto an indexed entry file.

    Page analyzers report paths either repo-relative (`src/pages/users/[id].tsx`)
    or relative to the pages directory (`users/[id].tsx`). Exact hits win,
    then the canonical page roots, then the shortest indexed path ending in
    `/pages/<path>`, `/app/<path>` or `/<path>`.
    """
    rel = normalize_rel_path(file_path) if file_path else None
    if rel is None:
        return None
    if rel in universe:
        return rel

    for root in CANONICAL_PAGE_ROOTS:
        resolved = universe.lookup(root + rel)
        if resolved is not None:
            return resolved

    for suffix in (f"/pages/{rel}", f"/app/{rel}", f"/{rel}"):
        hits = [f for f in universe if f.endswith(suffix)]
        if hits:
            return min(hits, key=lambda f: (len(f), f))

    return universe.lookup(rel)
