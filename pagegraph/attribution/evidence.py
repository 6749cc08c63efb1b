"""Evidence chains: how a page reaches the file an operation came from."""

from dataclasses import dataclass

from pagegraph.cache.run_cache import RunCache
from pagegraph.models import EvidenceItem
from pagegraph.utils.helpers import line_for_index
from pagegraph.utils.logging import logger


@dataclass(frozen=True)
class ParentLink:
    """The edge a traversal first reached a file through."""

    parent: str
    specifier: str
    line: int | None = None
    detail: str | None = None


def build_evidence(
    parents: dict[str, ParentLink],
    entry_file: str,
    source_file: str,
    operation_name: str,
    cache: RunCache,
) -> list[EvidenceItem]:
    """Import-edge items from entry_file down to source_file, then the reference.

    Walks parent pointers back from source_file. A file seen twice ends the
    walk and the chain found so far is kept.
    """
    steps: list[EvidenceItem] = []
    seen = {source_file}
    current = source_file
    while current != entry_file:
        link = parents.get(current)
        if link is None:
            break
        detail = f"{link.specifier} -> {current}"
        if link.detail:
            detail += f" ({link.detail})"
        steps.append(EvidenceItem(kind="import-edge", file=link.parent, detail=detail, line=link.line))
        if link.parent in seen:
            logger.debug(f"Cyclic parent chain at {link.parent} while explaining {operation_name}")
            break
        seen.add(link.parent)
        current = link.parent

    steps.reverse()

    line = None
    content = cache.read_text(source_file)
    if content:
        line = line_for_index(content, f"{operation_name}Document")
        if line is None:
            line = line_for_index(content, operation_name)
    steps.append(
        EvidenceItem(
            kind="operation-reference",
            file=source_file,
            detail=f"ref:{operation_name}",
            line=line,
        )
    )
    return steps
