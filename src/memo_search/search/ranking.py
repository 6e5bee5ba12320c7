"""Metadata filtering, ordering and truncation of scored results."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

from memo_search.domain.model import Document, SearchFilters, SearchResult, SortBy


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def clamp_limit(limit: int | None, default: int) -> int:
    """Return a usable result count; negatives collapse to zero."""

    if limit is None:
        return max(default, 0)
    return max(int(limit), 0)


def passes_filters(document: Document, filters: SearchFilters | None) -> bool:
    """AND-combine every filter that is set."""

    if filters is None:
        return True

    if filters.category is not None and document.category != filters.category:
        return False

    if filters.importance is not None and document.importance != filters.importance:
        return False

    if filters.tags:
        wanted = {tag.casefold() for tag in filters.tags}
        if not any(tag.casefold() in wanted for tag in document.tags):
            return False

    if filters.date_range is not None:
        date_range = filters.date_range
        moment = document.created_at if date_range.field == "created" else document.last_modified
        if not date_range.contains(moment):
            return False

    return True


def sort_results(results: Iterable[SearchResult], sort_by: SortBy = "relevance") -> list[SearchResult]:
    """Order results; every sort is stable so ties keep their input order."""

    items = list(results)
    if sort_by == "date":
        return sorted(items, key=lambda result: result.document.last_modified or _OLDEST, reverse=True)
    if sort_by == "title":
        return sorted(items, key=lambda result: result.document.title.casefold())
    return sorted(items, key=lambda result: result.score, reverse=True)


def rank(
    results: Iterable[SearchResult],
    filters: SearchFilters | None = None,
    sort_by: SortBy = "relevance",
    limit: int = 50,
) -> list[SearchResult]:
    """Filter, then sort, then truncate. Truncating last keeps top-K correct."""

    kept = [result for result in results if passes_filters(result.document, filters)]
    ordered = sort_results(kept, sort_by)
    return ordered[: clamp_limit(limit, 0)]
