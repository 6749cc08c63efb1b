"""Custom exceptions for pagegraph.

Contains exception classes for the few failure modes that are allowed to
leave a component. Per-file and per-edge failures (unparseable source,
unresolved specifiers, truncated traversals, cyclic re-exports) are absorbed
by the component that hits them and never surface here.
"""


class PageGraphError(Exception):
    """Base class for all pagegraph errors."""


class ParseFailure(PageGraphError):
    """Raised when a source file cannot be read or parsed.

    Only the AST parser raises this. Extractors catch it and return empty
    results, so an unparseable file contributes no edges and no operations.

    Attributes:
        file: Repo-relative path of the file that failed
        reason: Short description of the failure
    """

    def __init__(self, file: str, reason: str):
        super().__init__(f"Failed to parse {file}: {reason}")
        self.file = file
        self.reason = reason


class EnrichmentInputError(PageGraphError):
    """Raised when a required collaborator input is structurally absent.

    Callers skip enrichment for the repository and keep the pages with
    their existing attributions untouched.

    Attributes:
        message: Human-readable error description
        details: Dict describing the offending input for debugging
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}
