"""Application services for the module catalog.

Catalog is the main facade; the other services are its building blocks.
"""

from codestruct.application.services.catalog import Catalog
from codestruct.application.services.integrity import IntegrityChecker
from codestruct.application.services.search import SearchEngine
from codestruct.application.services.ttl_cache import CacheStats, TTLCache

__all__ = [
    "CacheStats",
    "Catalog",
    "IntegrityChecker",
    "SearchEngine",
    "TTLCache",
]
