"""pagegraph - attribute GraphQL data operations to the pages that use them."""

__version__ = "0.4.0"

from pagegraph.attribution import AttributionEngine, enrich_repository
from pagegraph.graphql import OperationCatalog, extract_operations, resolve_operation_name
from pagegraph.models import Attribution, OperationSource, PageEntry
from pagegraph.module_resolver import ModuleResolver
from pagegraph.universe import FileUniverse

__all__ = [
    "__version__",
    "Attribution",
    "AttributionEngine",
    "FileUniverse",
    "ModuleResolver",
    "OperationCatalog",
    "OperationSource",
    "PageEntry",
    "enrich_repository",
    "extract_operations",
    "resolve_operation_name",
]
