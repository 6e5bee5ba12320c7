"""Statistical helpers for TF-IDF style scoring.

The functions here stay independent of the index structure so they can be
unit tested on plain mappings. Term frequencies are normalized by the count
of the most frequent term in the same document (max-frequency
normalization), not by document length, and IDF is the unsmoothed
``ln(N / df)`` everywhere.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
import math


def term_frequencies(tokens: Iterable[str]) -> dict[str, int]:
    """Return raw occurrence counts in first-seen order."""

    return dict(Counter(tokens))


def normalize_frequencies(raw: Mapping[str, int | float], *, floor: float = 0.0) -> dict[str, float]:
    """Divide every frequency by the largest one.

    ``floor`` lets callers keep a minimum divisor (queries use 1) so an empty
    mapping never divides by zero.
    """

    if not raw:
        return {}
    peak = max(max(raw.values()), floor)
    if peak <= 0:
        return {term: 0.0 for term in raw}
    return {term: freq / peak for term, freq in raw.items()}


def vector_magnitude(weights: Iterable[float]) -> float:
    """Euclidean length of a sparse weight vector."""

    return math.sqrt(sum(weight * weight for weight in weights))


def calculate_idf(doc_freq: int, total_docs: int) -> float:
    """Return ``ln(N / df)``; 0.0 for terms the corpus does not contain."""

    if total_docs <= 0 or doc_freq <= 0:
        return 0.0
    df = min(doc_freq, total_docs)
    return math.log(total_docs / df)


def document_frequencies(term_sets: Iterable[Iterable[str]]) -> dict[str, int]:
    """Count how many documents contain each term at least once."""

    counts: Counter[str] = Counter()
    for terms in term_sets:
        counts.update(set(terms))
    return dict(counts)


@dataclass(frozen=True)
class CorpusLengthStats:
    """Aggregated token counts for the indexed corpus."""

    total_terms: int
    document_count: int

    @property
    def average_length(self) -> float:
        if self.document_count == 0:
            return 0.0
        return self.total_terms / self.document_count


def compute_length_stats(lengths: Iterable[int]) -> CorpusLengthStats:
    """Return aggregate stats given per-document token counts."""

    total = 0
    count = 0
    for length in lengths:
        total += max(length, 0)
        count += 1
    return CorpusLengthStats(total_terms=total, document_count=count)
