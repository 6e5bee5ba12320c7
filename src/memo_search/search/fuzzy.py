"""Fuzzy matching fallback for queries the tokenizer cannot use.

Single-character queries and queries that tokenize to nothing (only
stopwords, digits or punctuation) bypass TF-IDF entirely and are scored by
cheap substring and edit-distance checks against the raw note text:

- +1.0 when the whole query occurs in the note
- +0.5 per (query word, note word) pair where the note word contains the
  query word
- +0.3 per pair that is a near miss: edit distance at most 30% of the query
  word length, and never less than 1

These scores live on a different scale from the ranked path, so they use
their own threshold.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import math

from memo_search.domain.model import Document
from memo_search.search.analyzers import normalize_text
from memo_search.search.models import Query


DEFAULT_THRESHOLD = 0.1
DEFAULT_EDIT_RATIO = 0.3

EXACT_MATCH_SCORE = 1.0
SUBSTRING_SCORE = 0.5
NEAR_MISS_SCORE = 0.3


def levenshtein_distance(s1: str, s2: str, max_distance: int | None = None) -> int:
    """Calculate the Levenshtein (edit) distance between two strings.

    Uses dynamic programming with two rows, with optional early termination
    when the distance is guaranteed to exceed ``max_distance``; in that case
    ``max_distance + 1`` is returned.

    Examples:
        >>> levenshtein_distance("kitten", "sitting")
        3
        >>> levenshtein_distance("", "abc")
        3
    """
    if not s1:
        return len(s2)
    if not s2:
        return len(s1)

    # shorter string as columns
    if len(s1) > len(s2):
        s1, s2 = s2, s1

    m, n = len(s1), len(s2)
    if max_distance is not None and n - m > max_distance:
        return max_distance + 1

    prev_row = list(range(m + 1))
    curr_row = [0] * (m + 1)

    for j in range(1, n + 1):
        curr_row[0] = j
        row_min = j
        for i in range(1, m + 1):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            curr_row[i] = min(
                prev_row[i] + 1,  # deletion
                curr_row[i - 1] + 1,  # insertion
                prev_row[i - 1] + cost,  # substitution
            )
            row_min = min(row_min, curr_row[i])

        if max_distance is not None and row_min > max_distance:
            return max_distance + 1

        prev_row, curr_row = curr_row, prev_row

    return prev_row[m]


def max_edit_distance(word_length: int, ratio: float = DEFAULT_EDIT_RATIO) -> int:
    """Allowed edits for a query word: a share of its length, at least 1."""

    return max(1, math.floor(word_length * ratio))


def should_use_fuzzy(raw_query: str, query: Query) -> bool:
    """True for one-character queries and queries with no usable tokens."""

    return len(raw_query.strip()) == 1 or query.is_empty()


def fuzzy_score(query_text: str, content: str, *, edit_ratio: float = DEFAULT_EDIT_RATIO) -> float:
    """Score lower-cased ``content`` against a lower-cased query."""

    if not query_text or not content:
        return 0.0

    score = EXACT_MATCH_SCORE if query_text in content else 0.0
    content_words = content.split()
    for query_word in query_text.split():
        allowed = max_edit_distance(len(query_word), edit_ratio)
        for content_word in content_words:
            if query_word in content_word:
                score += SUBSTRING_SCORE
            elif levenshtein_distance(query_word, content_word, allowed) <= allowed:
                score += NEAR_MISS_SCORE
    return score


@dataclass(frozen=True)
class FuzzyMatch:
    document: Document
    score: float


def fuzzy_search(
    raw_query: str,
    documents: Iterable[Document],
    *,
    threshold: float = DEFAULT_THRESHOLD,
    edit_ratio: float = DEFAULT_EDIT_RATIO,
) -> list[FuzzyMatch]:
    """Score every document by substring and near-miss matching, best first."""

    query_text = normalize_text(raw_query).strip().lower()
    if not query_text:
        return []

    matches: list[FuzzyMatch] = []
    for document in documents:
        content = normalize_text(f"{document.title} {document.body}").lower()
        score = fuzzy_score(query_text, content, edit_ratio=edit_ratio)
        if score > 0 and score >= threshold:
            matches.append(FuzzyMatch(document=document, score=score))

    matches.sort(key=lambda match: match.score, reverse=True)
    return matches
