"""Prefix suggestions drawn from note titles and tags."""

from __future__ import annotations

from collections.abc import Iterable

from memo_search.domain.model import Document
from memo_search.search.analyzers import TextAnalyzer, normalize_text


DEFAULT_LIMIT = 5


def suggest(
    partial_query: str | None,
    documents: Iterable[Document],
    analyzer: TextAnalyzer,
    limit: int = DEFAULT_LIMIT,
) -> list[str]:
    """Return distinct completions in first-seen order.

    Title tokens must be strictly longer than the prefix; tags are returned
    as written. Matching is case-insensitive. Suggestions are not ranked.
    """

    prefix = normalize_text(partial_query).strip().lower()
    if not prefix or limit <= 0:
        return []

    suggestions: dict[str, None] = {}
    for document in documents:
        for token in analyzer.get_filtered_tokens(document.title):
            if token.startswith(prefix) and len(token) > len(prefix):
                suggestions.setdefault(token)
                if len(suggestions) >= limit:
                    return list(suggestions)

        for tag in document.tags:
            if normalize_text(tag).lower().startswith(prefix):
                suggestions.setdefault(tag)
                if len(suggestions) >= limit:
                    return list(suggestions)

    return list(suggestions)
