"""Relevance scoring for the ranked search path.

A score is the sum of five factors:

- title, tag and content match: the share of distinct query terms found in
  that field, times the field weight
- TF-IDF: query weight x normalized document TF x IDF, summed over the
  distinct query terms
- recency: a bonus that decays linearly to zero over the recency window

Only documents that contain at least one query term are candidates; the
recency bonus alone never makes a document match.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from memo_search.config import ScoringWeights
from memo_search.domain.model import Document, FactorBreakdown
from memo_search.search.models import DocumentVector, Index


_SECONDS_PER_DAY = 86_400.0


@dataclass(frozen=True)
class RelevanceScore:
    """Total score plus the factors it was summed from."""

    total: float
    factors: FactorBreakdown = field(default_factory=FactorBreakdown)
    matched_terms: tuple[str, ...] = ()

    @property
    def has_overlap(self) -> bool:
        return bool(self.matched_terms)


NO_MATCH = RelevanceScore(total=0.0)


def field_match(query_terms: Sequence[str], field_terms: frozenset[str]) -> float:
    """Fraction of query terms present in a field; 0.0 for an empty field."""

    if not query_terms or not field_terms:
        return 0.0
    hits = sum(1 for term in query_terms if term in field_terms)
    return hits / len(query_terms)


class RelevanceScorer:
    """Score documents of one index against a query."""

    def __init__(
        self,
        index: Index,
        weights: ScoringWeights | None = None,
        *,
        now: datetime | None = None,
    ) -> None:
        self.index = index
        self.weights = weights or ScoringWeights()
        self.now = now or datetime.now(timezone.utc)

    def tf_idf(self, query_vector: Mapping[str, float], document_vector: DocumentVector) -> float:
        total = 0.0
        for term, query_weight in query_vector.items():
            doc_weight = document_vector.normalized_tf.get(term, 0.0)
            if doc_weight:
                total += query_weight * doc_weight * self.index.get_idf(term)
        return total

    def recency_boost(self, document: Document) -> float:
        moment = document.last_modified
        window = self.weights.recency_window_days
        if moment is None or window <= 0:
            return 0.0
        age_days = max((self.now - moment).total_seconds() / _SECONDS_PER_DAY, 0.0)
        if age_days > window:
            return 0.0
        return (window - age_days) / window * self.weights.recency_boost

    def score(
        self,
        document: Document,
        query_tokens: Sequence[str],
        query_vector: Mapping[str, float],
        document_vector: DocumentVector,
    ) -> RelevanceScore:
        """Score one document.

        Repeated query tokens count once in the field-match shares and in the
        TF-IDF sum; repetition only raises a term's weight relative to the
        other query terms.
        """
        terms = list(dict.fromkeys(query_tokens))
        matched = tuple(term for term in terms if document_vector.contains(term))
        if not matched:
            return NO_MATCH

        weights = self.weights
        factors = FactorBreakdown(
            title_match=field_match(terms, document_vector.title_terms) * weights.title,
            content_match=field_match(terms, document_vector.body_terms) * weights.content,
            tag_match=field_match(terms, document_vector.tag_terms) * weights.tag,
            tf_idf=self.tf_idf(query_vector, document_vector) * weights.tf_idf,
            recency_boost=self.recency_boost(document),
        )
        total = (
            factors.title_match + factors.content_match + factors.tag_match + factors.tf_idf + factors.recency_boost
        )
        return RelevanceScore(total=total, factors=factors, matched_terms=matched)
