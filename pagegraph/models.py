"""Data model shared by the resolver, extractors and attribution engine."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class OperationKind(Enum):
    """GraphQL operation type."""

    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"

    @classmethod
    def parse(cls, value: str | None) -> "OperationKind":
        """Lenient conversion; anything unrecognised is a query."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").lower())
        except ValueError:
            return cls.QUERY


class Classification(Enum):
    """Grouping tier for an attributed operation."""

    DIRECT = "direct"
    CLOSE = "close"
    INDIRECT = "indirect"
    COMMON = "common"


class Confidence(Enum):
    """Trust estimate for an attribution, not a probability."""

    CERTAIN = "certain"
    LIKELY = "likely"
    UNKNOWN = "unknown"


HOOK_TYPES = {
    OperationKind.QUERY: "useQuery",
    OperationKind.MUTATION: "useMutation",
    OperationKind.SUBSCRIPTION: "useSubscription",
}

# Arrow/indent decorations upstream renderers prefix onto nested operation names
_DECORATION_PREFIX = re.compile(r"^[→\->\s]+")


@dataclass(frozen=True)
class ImportEdge:
    """One runtime dependency from a file on a specifier.

    imported_names is None when the import shape cannot be enumerated
    (default, namespace, side-effect, require(), import(), export *).
    None means "may pull in anything", never "imports nothing".
    """

    from_file: str
    specifier: str
    imported_names: frozenset[str] | None
    offset: int = 0
    line: int = 1


@dataclass
class ExportInfo:
    """Re-export surface of a file."""

    named: dict[str, str] = field(default_factory=dict)  # exported name -> origin specifier
    stars: list[str] = field(default_factory=list)
    is_pure_barrel: bool = False
    # exported name -> name in the origin module ("*" for `export * as ns`)
    origin_names: dict[str, str] = field(default_factory=dict)
    # names the file exports from its own declarations
    declared: set[str] = field(default_factory=set)


@dataclass(frozen=True)
class OperationFact:
    """A file defines or references an operation."""

    operation_name: str
    kind: OperationKind
    file: str


@dataclass
class OperationSource:
    """Catalog record: where an operation is defined and which files use it."""

    operation_name: str
    kind: OperationKind
    defined_in_file: str | None = None
    usage_files: list[str] = field(default_factory=list)

    def facts(self) -> list[OperationFact]:
        """Expand into one fact per (operation, file) pair."""
        files = []
        if self.defined_in_file:
            files.append(self.defined_in_file)
        for usage in self.usage_files:
            if usage not in files:
                files.append(usage)
        return [OperationFact(self.operation_name, self.kind, f) for f in files]


@dataclass
class EvidenceItem:
    """One step of the justification for an attribution."""

    kind: str  # import-edge, operation-reference
    file: str
    detail: str
    line: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": self.kind, "file": self.file, "detail": self.detail}
        if self.line is not None:
            result["line"] = self.line
        return result


@dataclass
class Attribution:
    """An operation attributed to a page."""

    page: str
    operation_name: str
    kind: OperationKind
    source_file: str
    hop_distance: int
    reachability_count: int
    classification: Classification
    confidence: Confidence
    evidence: list[EvidenceItem] = field(default_factory=list)

    @property
    def source_tag(self) -> str | None:
        """None for direct hits, otherwise '<classification>:<file>'."""
        if self.classification is Classification.DIRECT:
            return None
        return f"{self.classification.value}:{self.source_file}"

    @property
    def hook_type(self) -> str:
        return HOOK_TYPES[self.kind]

    def to_dict(self) -> dict[str, Any]:
        """Shape consumed by the rendering layer."""
        return {
            "type": self.hook_type,
            "kind": self.kind.value,
            "operationName": self.operation_name,
            "source": self.source_tag,
            "classification": self.classification.value,
            "confidence": self.confidence.value,
            "hopDistance": self.hop_distance,
            "reachabilityCount": self.reachability_count,
            "evidence": [item.to_dict() for item in self.evidence],
        }


@dataclass
class PageEntry:
    """A routed page and its attribution list.

    attributions may already hold upstream entries (Attribution objects or
    plain dicts); the engine only appends to it.
    """

    route_path: str
    file_path: str
    attributions: list = field(default_factory=list)


def existing_operation_names(attributions: list) -> set[str]:
    """Operation names already in an attribution list, with display decorations stripped.

    Entries may be Attribution objects, dicts from the upstream analyzer, or
    any object exposing ``operation_name``.
    """
    names = set()
    for entry in attributions:
        if isinstance(entry, Attribution):
            raw = entry.operation_name
        elif isinstance(entry, dict):
            raw = entry.get("operationName") or entry.get("operation_name") or ""
        else:
            raw = getattr(entry, "operation_name", "") or ""
        names.add(_DECORATION_PREFIX.sub("", raw))
    return names


@dataclass
class TraversalStats:
    """Per-page traversal summary."""

    visited: int = 0
    truncated: bool = False


@dataclass
class AttributionReport:
    """What one engine run did."""

    total_pages: int = 0
    pages_skipped: int = 0
    attributions_added: int = 0
    common_threshold: int = 0
    local_threshold: int = 0
    reachability: dict[str, int] = field(default_factory=dict)
    traversals: dict[str, TraversalStats] = field(default_factory=dict)
    cache_stats: dict[str, Any] = field(default_factory=dict)
