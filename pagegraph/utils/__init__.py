"""pagegraph utilities package."""

from .constants import (
    DEFAULT_INCLUDE_PATTERNS,
    MAX_TRAVERSAL_DEPTH,
    MAX_TRAVERSAL_NODES,
    RESOLVE_EXTENSIONS,
    SKIP_DIRS,
)
from .helpers import line_for_index, line_for_offset, normalize_rel_path
from .logging import logger

__all__ = [
    "DEFAULT_INCLUDE_PATTERNS",
    "MAX_TRAVERSAL_DEPTH",
    "MAX_TRAVERSAL_NODES",
    "RESOLVE_EXTENSIONS",
    "SKIP_DIRS",
    "line_for_index",
    "line_for_offset",
    "normalize_rel_path",
    "logger",
]
