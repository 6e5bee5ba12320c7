"""Domain layer - immutable value objects shared by the search package.

Key principles:
1. No dependencies on infrastructure
2. Type safety with Pydantic
3. Immutability (value objects are frozen)
"""

from memo_search.domain.model import (
    DateRange,
    Document,
    FactorBreakdown,
    IndexStats,
    SearchFilters,
    SearchOptions,
    SearchResult,
    TermFrequency,
    TokenAnalysis,
)


__all__ = [
    "DateRange",
    "Document",
    "FactorBreakdown",
    "IndexStats",
    "SearchFilters",
    "SearchOptions",
    "SearchResult",
    "TermFrequency",
    "TokenAnalysis",
]
