"""Engine components: search → fetch → extract → enrich → aggregate."""

from .aggregator import merge_records
from .enricher import ContactEnricher, RequestPacer
from .extractor import Extractor, source_of
from .fetcher import FetchResult, Fetcher
from .search import DuckDuckGoSiteSearch, SearchAdapter

__all__ = [
    "ContactEnricher",
    "DuckDuckGoSiteSearch",
    "Extractor",
    "FetchResult",
    "Fetcher",
    "RequestPacer",
    "SearchAdapter",
    "merge_records",
    "source_of",
]
