"""Import/export and barrel extraction."""

from .barrels import BarrelResolver
from .imports import ImportExportExtractor, extract_export_info, extract_import_edges

__all__ = [
    "BarrelResolver",
    "ImportExportExtractor",
    "extract_export_info",
    "extract_import_edges",
]
