"""More-like-this retrieval over precomputed document vectors."""

from __future__ import annotations

from dataclasses import dataclass

from memo_search.search.models import DocumentVector, Index


DEFAULT_THRESHOLD = 0.1


@dataclass(frozen=True)
class SimilarDocument:
    doc_id: str
    similarity: float


def cosine_similarity(first: DocumentVector, second: DocumentVector) -> float:
    """Normalized dot product; 0.0 when either vector is empty."""

    if first.magnitude == 0 or second.magnitude == 0:
        return 0.0
    # iterate the smaller mapping
    small, large = first.normalized_tf, second.normalized_tf
    if len(small) > len(large):
        small, large = large, small
    dot = sum(weight * large.get(term, 0.0) for term, weight in small.items())
    return dot / (first.magnitude * second.magnitude)


def find_similar(index: Index, doc_id: str, threshold: float = DEFAULT_THRESHOLD) -> list[SimilarDocument]:
    """Documents whose similarity to ``doc_id`` reaches the threshold, best first.

    The source document is never part of its own result list; an unknown id
    yields an empty list.
    """

    target = index.get_vector(doc_id)
    if target is None or target.is_empty():
        return []

    cutoff = min(max(threshold, 0.0), 1.0)
    matches: list[SimilarDocument] = []
    for other_id, vector in index.vectors.items():
        if other_id == doc_id:
            continue
        similarity = cosine_similarity(target, vector)
        if similarity > 0 and similarity >= cutoff:
            matches.append(SimilarDocument(doc_id=other_id, similarity=similarity))

    matches.sort(key=lambda match: match.similarity, reverse=True)
    return matches
