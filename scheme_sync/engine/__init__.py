"""Engine components: fetch through the cache, merge, export."""

from .exporter import CatalogExporter, ExportResult
from .fetcher import Fetcher
from .registry import AddOutcome, Catalog, SchemeRegistry
from .scheme import Scheme, SchemeDocument, SchemeMetadata, make_ident, make_prefix

__all__ = [
    "AddOutcome",
    "Catalog",
    "CatalogExporter",
    "ExportResult",
    "Fetcher",
    "Scheme",
    "SchemeDocument",
    "SchemeMetadata",
    "SchemeRegistry",
    "make_ident",
    "make_prefix",
]
