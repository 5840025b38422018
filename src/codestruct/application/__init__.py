"""Application layer for the module catalog.

Components:
- services: Catalog facade, search, integrity checks, entry cache
- reporters: Output formatting (rich console, JSON)
"""

from codestruct.application.reporters import ConsoleConfig, ConsoleReporter, JsonReporter
from codestruct.application.services import (
    CacheStats,
    Catalog,
    IntegrityChecker,
    SearchEngine,
    TTLCache,
)

__all__ = [
    # Services
    "Catalog",
    "SearchEngine",
    "IntegrityChecker",
    "TTLCache",
    "CacheStats",
    # Reporters
    "ConsoleConfig",
    "ConsoleReporter",
    "JsonReporter",
]
