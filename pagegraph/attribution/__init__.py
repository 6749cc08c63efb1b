"""Page attribution: traversal, classification and evidence."""

from .engine import AttributionEngine, classify, compute_thresholds, enrich_repository
from .evidence import ParentLink, build_evidence

__all__ = [
    "AttributionEngine",
    "ParentLink",
    "build_evidence",
    "classify",
    "compute_thresholds",
    "enrich_repository",
]
