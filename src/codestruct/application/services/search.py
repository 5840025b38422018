"""Filtered, ranked, paginated search over catalog entries.

Ranking applies only when a name query is given:
    100  local name equals query (case-insensitive)
     80  local name starts with query
     60  local name contains query
    else floor(40 * similarity(name, query))
Ties are broken by most recent updated_at.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from codestruct.domain.model.module import get_module_kind
from codestruct.domain.model.results import SearchResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from codestruct.domain.model.module import Module
    from codestruct.domain.model.requests import SearchCriteria

EXACT_SCORE = 100
PREFIX_SCORE = 80
SUBSTRING_SCORE = 60
FUZZY_WEIGHT = 40


def levenshtein(a: str, b: str) -> int:
    """Edit distance (insert, delete, substitute each cost 1). O(len(a) * len(b))."""
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """(len(longer) - distance) / len(longer); 1.0 when both empty."""
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    if not longer:
        return 1.0
    return (len(longer) - levenshtein(longer, shorter)) / len(longer)


def score(name: str, query: str) -> int:
    """Relevance of a local name for a query, 0..100."""
    name_lower = name.lower()
    query_lower = query.lower()
    if name_lower == query_lower:
        return EXACT_SCORE
    if name_lower.startswith(query_lower):
        return PREFIX_SCORE
    if query_lower in name_lower:
        return SUBSTRING_SCORE
    return math.floor(FUZZY_WEIGHT * similarity(name_lower, query_lower))


def matches(module: Module, criteria: SearchCriteria) -> bool:
    """Check every set filter (AND)."""
    if criteria.hierarchical_name is not None and module.hierarchical_name != criteria.hierarchical_name:
        return False
    if criteria.name and criteria.name.lower() not in module.name.lower():
        return False
    if criteria.type is not None and get_module_kind(module) != criteria.type:
        return False
    if criteria.parent is not None and module.parent != criteria.parent:
        return False
    if criteria.file_path and criteria.file_path.lower() not in module.file_path.lower():
        return False
    if criteria.access_modifier is not None and module.access_modifier != criteria.access_modifier:
        return False
    if criteria.description:
        # Empty description never matches a non-empty query
        if not module.description:
            return False
        if criteria.description.lower() not in module.description.lower():
            return False
    return True


@dataclass(frozen=True, slots=True)
class SearchEngine:
    """Stateless search over an entry collection."""

    def search(self, modules: Iterable[Module], criteria: SearchCriteria) -> SearchResult:
        """Filter, rank, then paginate.

        Args:
            modules: Candidate entries
            criteria: Filters and pagination

        Returns:
            SearchResult with the requested page and the pre-pagination total
        """
        hits = [m for m in modules if matches(m, criteria)]

        query = criteria.name
        if query:
            hits.sort(key=lambda m: (score(m.name, query), m.updated_at), reverse=True)
        else:
            hits.sort(key=lambda m: m.updated_at, reverse=True)

        page = hits[criteria.offset : criteria.offset + criteria.limit]
        return SearchResult(modules=tuple(page), total=len(hits), query=criteria)
