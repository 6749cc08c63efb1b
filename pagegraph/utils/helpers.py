"""Helper utility functions for pagegraph.

IMPORTANT UTILITIES:
- normalize_rel_path(): Use this for ANY path used as a cache or index key.
  The file universe stores POSIX-style repo-relative paths (e.g. 'src/pages/index.tsx'),
  but callers may pass Windows separators, './' prefixes or '..' segments.
"""

import posixpath


def normalize_rel_path(file_path: str, project_root: str | None = None) -> str | None:
    """Normalize a path into the repo-relative POSIX form used as index key.

    Transformations:
    1. Convert backslashes to forward slashes
    2. Strip project root prefix if provided (absolute -> relative)
    3. Collapse '.' and '..' segments

    Returns None when the path escapes the repository root.

    Examples:
        >>> normalize_rel_path("src\\\\pages\\\\index.tsx")
        'src/pages/index.tsx'

        >>> normalize_rel_path("./src/lib/../app.ts")
        'src/app.ts'

        >>> normalize_rel_path("../outside.ts") is None
        True
    """
    normalized = file_path.replace("\\", "/")

    if project_root is not None:
        root_str = str(project_root).replace("\\", "/").rstrip("/")
        if normalized.startswith(root_str + "/"):
            normalized = normalized[len(root_str) + 1 :]

    normalized = normalized.lstrip("/")
    if not normalized:
        return None

    normalized = posixpath.normpath(normalized)
    if normalized == "." or normalized == ".." or normalized.startswith("../"):
        return None

    return normalized


def line_for_offset(content: bytes | str, offset: int) -> int:
    """Convert a byte (or character) offset into a 1-based line number."""
    if offset <= 0:
        return 1
    newline = b"\n" if isinstance(content, bytes) else "\n"
    return content.count(newline, 0, offset) + 1


def line_for_index(content: str, needle: str) -> int | None:
    """Line number of the first textual occurrence of needle, or None."""
    idx = content.find(needle)
    if idx < 0:
        return None
    return line_for_offset(content, idx)
