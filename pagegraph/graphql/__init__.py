"""GraphQL operation extraction and cataloguing."""

from .catalog import OperationCatalog
from .operations import OperationExtractor, extract_operations, resolve_operation_name

__all__ = [
    "OperationCatalog",
    "OperationExtractor",
    "extract_operations",
    "resolve_operation_name",
]
