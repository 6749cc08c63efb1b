"""Reachability and attribution engine.

Attributes data operations to the pages that transitively import them.

Pass 1 walks every page's import graph from its entry file, records the
nearest file for each operation and counts, per file, how many pages
reach it. Pass 2 runs only after every page is walked: it derives the
adaptive thresholds from those counts and classifies each attribution.

Traversal is a shortest-hop walk over import edges. A direct import costs
one hop. Importing known names from a pure barrel costs two hops to each
name's origin file (into the barrel, out to the origin) and the barrel's
other re-exports are never entered. Unknown names expand the whole barrel.
Node and depth caps truncate silently.
"""

import heapq
import math
from collections import defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pagegraph.ast_parser import ASTParser
from pagegraph.attribution.evidence import ParentLink, build_evidence
from pagegraph.cache.run_cache import RunCache
from pagegraph.config_runtime import load_runtime_config
from pagegraph.entrypoints import locate_entry_file
from pagegraph.exceptions import EnrichmentInputError
from pagegraph.extractors.barrels import BarrelResolver
from pagegraph.extractors.imports import ImportExportExtractor
from pagegraph.graphql.catalog import OperationCatalog
from pagegraph.models import (
    Attribution,
    AttributionReport,
    Classification,
    Confidence,
    ImportEdge,
    OperationFact,
    OperationSource,
    PageEntry,
    TraversalStats,
    existing_operation_names,
)
from pagegraph.module_resolver import ModuleResolver
from pagegraph.universe import FileUniverse
from pagegraph.utils.constants import (
    BARREL_HOP_COST,
    CLOSE_HOP_LIMIT,
    COMMON_THRESHOLD_MIN,
    COMMON_THRESHOLD_PERCENTILE,
    LOCAL_THRESHOLD_FRACTION,
    LOCAL_THRESHOLD_MIN,
    MAX_TRAVERSAL_DEPTH,
    MAX_TRAVERSAL_NODES,
    PAGEGRAPH_DIR_NAME,
)
from pagegraph.utils.logging import configure_file_logging, logger


@dataclass
class PageTraversal:
    """Materialized pass-1 result for one page."""

    page: Any
    entry_file: str
    visited: list[str] = field(default_factory=list)
    parents: dict[str, ParentLink] = field(default_factory=dict)
    # operation name -> (fact, hop distance), first-found wins on ties
    best: dict[str, tuple[OperationFact, int]] = field(default_factory=dict)
    truncated: bool = False


def compute_thresholds(reachability: dict[str, int], total_pages: int) -> tuple[int, int]:
    """(common threshold, local threshold) for a run.

    common = max(10, p90 of the non-zero reachability counts)
    local = max(2, floor(5% of traversed pages))
    """
    counts = sorted(c for c in reachability.values() if c > 0)
    p90 = 0
    if counts:
        idx = min(len(counts) - 1, math.floor(len(counts) * COMMON_THRESHOLD_PERCENTILE))
        p90 = counts[idx]
    common = max(COMMON_THRESHOLD_MIN, p90)
    local = max(LOCAL_THRESHOLD_MIN, math.floor(total_pages * LOCAL_THRESHOLD_FRACTION))
    return common, local


def classify(
    hop_distance: int, reachability_count: int, common_threshold: int, local_threshold: int
) -> tuple[Classification, Confidence]:
    if hop_distance == 0:
        return Classification.DIRECT, Confidence.CERTAIN
    if reachability_count >= common_threshold:
        return Classification.COMMON, Confidence.UNKNOWN
    if hop_distance <= CLOSE_HOP_LIMIT or reachability_count <= local_threshold:
        return Classification.CLOSE, Confidence.CERTAIN
    return Classification.INDIRECT, Confidence.LIKELY


def _names_detail(edge: ImportEdge) -> str | None:
    if edge.imported_names is None:
        return None
    return "names:" + ",".join(sorted(edge.imported_names))


class _Walk:
    """Mutable state of one page traversal."""

    def __init__(self, engine: "AttributionEngine", entry_file: str, facts_by_file):
        self.engine = engine
        self.entry_file = entry_file
        self.facts_by_file = facts_by_file
        self.heap: list[tuple[int, int, str]] = []
        self.seq = 0
        self.best_depth: dict[str, int] = {}
        self.visited: set[str] = set()
        self.expanded: set[str] = set()
        self.expand_barrels: set[str] = set()
        self.result = PageTraversal(page=None, entry_file=entry_file)

    def push(self, file: str, depth: int, link: ParentLink | None) -> None:
        if file in self.visited:
            return
        if depth >= self.best_depth.get(file, math.inf):
            return
        self.best_depth[file] = depth
        if link is not None:
            self.result.parents[file] = link
        heapq.heappush(self.heap, (depth, self.seq, file))
        self.seq += 1

    def run(self) -> PageTraversal:
        self.push(self.entry_file, 0, None)
        while self.heap:
            depth, _, file = heapq.heappop(self.heap)
            if file in self.visited:
                continue
            if len(self.visited) >= MAX_TRAVERSAL_NODES:
                self.result.truncated = True
                logger.debug(f"Traversal from {self.entry_file} truncated at {MAX_TRAVERSAL_NODES} files")
                break

            self.visited.add(file)
            self.result.visited.append(file)
            self._merge_operations(file, depth)

            if self.engine.is_pure_barrel(file) and file != self.entry_file:
                if file not in self.expand_barrels:
                    continue
            self.expand(file, depth)

        return self.result

    def _merge_operations(self, file: str, depth: int) -> None:
        for fact in self.facts_by_file.get(file, ()):
            current = self.result.best.get(fact.operation_name)
            if current is None or depth < current[1]:
                self.result.best[fact.operation_name] = (fact, depth)

    def expand(self, file: str, depth: int) -> None:
        if file in self.expanded:
            return
        self.expanded.add(file)
        edges = self.engine.extractor.edges(file)
        if depth >= MAX_TRAVERSAL_DEPTH:
            if edges:
                self.result.truncated = True
            return

        for edge in edges:
            target = self.engine.resolver.resolve(file, edge.specifier)
            if target is None or target == file:
                continue
            link = ParentLink(file, edge.specifier, edge.line, _names_detail(edge))
            if target != self.entry_file and self.engine.is_pure_barrel(target):
                self.enter_barrel(target, depth, edge, link)
            else:
                self.push(target, depth + 1, link)

    def enter_barrel(self, barrel: str, depth: int, edge: ImportEdge, link: ParentLink) -> None:
        self.push(barrel, depth + 1, link)
        barrel_depth = self.best_depth.get(barrel, depth + 1)

        expand_all = edge.imported_names is None
        for name in sorted(edge.imported_names or ()):
            origin = self.engine.barrels.resolve_export(barrel, name, set())
            if origin is None or origin == barrel:
                expand_all = True
                continue
            if self.engine.is_pure_barrel(origin):
                self.expand_barrels.add(origin)
                if origin in self.visited:
                    self.expand(origin, self.best_depth[origin])
            self.push(
                origin,
                min(depth + BARREL_HOP_COST, barrel_depth + 1),
                ParentLink(barrel, f"re-export:{name}", None, "barrel"),
            )

        if expand_all:
            self.expand_barrels.add(barrel)
            if barrel in self.visited:
                self.expand(barrel, self.best_depth[barrel])


class AttributionEngine:
    """Two-pass page attribution over one repository.

    One engine owns one RunCache, shared by every enrich() call. Each
    enrich() call is a separate run: reachability counts start from zero
    and afterwards hold the counts of the latest run.
    """

    def __init__(
        self,
        root: str | Path,
        universe: FileUniverse,
        resolver: ModuleResolver | None = None,
        cache: RunCache | None = None,
    ):
        self.root = Path(root)
        self.universe = universe
        self.cache = cache if cache is not None else RunCache(self.root)
        self.resolver = (
            resolver
            if resolver is not None
            else ModuleResolver.for_repository(self.root, universe, cache=self.cache)
        )
        self.parser = ASTParser(self.cache)
        self.extractor = ImportExportExtractor(self.parser, self.cache)
        self.barrels = BarrelResolver(self.extractor, self.resolver)
        self.reachability: dict[str, int] = defaultdict(int)

    def is_pure_barrel(self, rel_path: str) -> bool:
        return self.extractor.exports(rel_path).is_pure_barrel

    def traverse(self, entry_file: str, facts_by_file: dict[str, list[OperationFact]]) -> PageTraversal:
        """Pass 1 for a single page: visited files, parent links, nearest operations."""
        return _Walk(self, entry_file, facts_by_file).run()

    def enrich(self, pages: list, sources: list[OperationSource] | None) -> AttributionReport:
        """Append attributions to every page.

        Raises:
            EnrichmentInputError: pages is not a list, or a page has no
                mutable attribution list.
        """
        _validate_pages(pages)
        self.reachability = defaultdict(int)
        facts_by_file = self._facts_by_file(sources or [])

        report = AttributionReport()
        traversals: list[PageTraversal] = []

        # Pass 1
        for page in pages:
            entry = locate_entry_file(self.universe, page.file_path)
            if entry is None:
                report.pages_skipped += 1
                logger.debug(f"No entry file for page {page.route_path} ({page.file_path})")
                continue

            traversal = self.traverse(entry, facts_by_file)
            traversal.page = page
            traversals.append(traversal)
            for file in traversal.visited:
                self.reachability[file] += 1
            report.traversals[page.route_path] = TraversalStats(
                visited=len(traversal.visited), truncated=traversal.truncated
            )

        report.total_pages = len(traversals)
        common, local = compute_thresholds(self.reachability, report.total_pages)
        report.common_threshold = common
        report.local_threshold = local

        # Pass 2
        for traversal in traversals:
            report.attributions_added += self._attribute(traversal, common, local)

        report.reachability = dict(self.reachability)
        report.cache_stats = self.cache.get_stats()
        logger.info(
            f"Attributed {report.attributions_added} operations across {report.total_pages} pages "
            f"(common>={common}, local<={local}, {report.pages_skipped} skipped)"
        )
        return report

    def _facts_by_file(self, sources: list[OperationSource]) -> dict[str, list[OperationFact]]:
        facts: dict[str, list[OperationFact]] = defaultdict(list)
        for source in sources:
            for fact in source.facts():
                if fact.file in self.universe:
                    facts[fact.file].append(fact)
        return facts

    def _attribute(self, traversal: PageTraversal, common: int, local: int) -> int:
        page = traversal.page
        existing = existing_operation_names(page.attributions)
        ranked = sorted(traversal.best.values(), key=lambda item: item[1])

        added = 0
        for fact, hop in ranked:
            if fact.operation_name in existing:
                continue
            reach = self.reachability.get(fact.file, 0)
            classification, confidence = classify(hop, reach, common, local)
            page.attributions.append(
                Attribution(
                    page=page.route_path,
                    operation_name=fact.operation_name,
                    kind=fact.kind,
                    source_file=fact.file,
                    hop_distance=hop,
                    reachability_count=reach,
                    classification=classification,
                    confidence=confidence,
                    evidence=build_evidence(
                        traversal.parents,
                        traversal.entry_file,
                        fact.file,
                        fact.operation_name,
                        self.cache,
                    ),
                )
            )
            existing.add(fact.operation_name)
            added += 1
        return added


def _validate_pages(pages: Any) -> None:
    if pages is None:
        raise EnrichmentInputError("Page list is missing")
    if not isinstance(pages, list):
        raise EnrichmentInputError(
            "Page list must be a list", details={"type": type(pages).__name__}
        )
    for idx, page in enumerate(pages):
        attributions = getattr(page, "attributions", None)
        if not isinstance(attributions, list):
            raise EnrichmentInputError(
                "Page has no attribution list",
                details={"index": idx, "route": getattr(page, "route_path", None)},
            )
        if not hasattr(page, "file_path") or not hasattr(page, "route_path"):
            raise EnrichmentInputError(
                "Page is missing its route or file path", details={"index": idx}
            )


def enrich_repository(
    root: str | Path,
    pages: list[PageEntry],
    sources: list[OperationSource] | None = None,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> list[PageEntry]:
    """Build everything one run needs and enrich pages in place.

    When sources is None the operation catalog is built from the
    repository. If the page input is structurally unusable the pages are
    returned unchanged and a warning is logged.
    """
    root = Path(root)
    config = load_runtime_config(str(root))
    if config["logging"]["file_logging"]:
        configure_file_logging(root / PAGEGRAPH_DIR_NAME / "logs", config["logging"]["file_level"])

    max_file_size = config["limits"]["max_file_size"]
    universe = FileUniverse.scan(
        root,
        include=include if include is not None else config["analysis"]["include"],
        exclude=exclude if exclude is not None else config["analysis"]["exclude"],
        max_file_size=max_file_size,
    )
    cache = RunCache(root, max_file_size=max_file_size)
    engine = AttributionEngine(root, universe, cache=cache)

    if sources is None:
        graphql_files = FileUniverse.scan(root, include=config["analysis"]["graphql_include"]).files
        catalog = OperationCatalog(root, universe, engine.parser, cache, graphql_files=graphql_files)
        sources = catalog.build()

    try:
        engine.enrich(pages, sources)
    except EnrichmentInputError as e:
        logger.warning(f"Skipping attribution enrichment for {root}: {e} {e.details}")
    return pages
