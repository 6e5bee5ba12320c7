"""Vector-space index construction and query vectorization.

``build_index`` always performs a full rebuild: it analyzes every document,
computes max-frequency normalized term vectors and their magnitudes, then
derives document frequencies and IDF for the whole corpus. The result is a
new immutable ``Index``; callers swap it in once it is complete.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
import logging
from types import MappingProxyType

from memo_search.domain.model import Document
from memo_search.search.analyzers import TextAnalyzer
from memo_search.search.models import DocumentVector, Fingerprint, Index, Query
from memo_search.search.stats import (
    calculate_idf,
    document_frequencies,
    normalize_frequencies,
    term_frequencies,
    vector_magnitude,
)


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 200


def document_fingerprint(documents: Iterable[Document]) -> Fingerprint:
    """Identity of a snapshot: ids paired with their last-modified stamps.

    Later entries win for duplicate ids, matching how the index is built.
    """

    return frozenset({doc.id: doc.last_modified for doc in documents}.items())


def vectorize_document(document: Document, analyzer: TextAnalyzer) -> DocumentVector:
    """Analyze one document into its term vector and per-field term sets."""

    title_tokens = analyzer.get_filtered_tokens(document.title)
    body_tokens = analyzer.get_filtered_tokens(document.body)
    tag_tokens = [token for tag in document.tags for token in analyzer.get_filtered_tokens(tag)]
    tokens = (*title_tokens, *body_tokens, *tag_tokens)

    if not tokens:
        return DocumentVector(doc_id=document.id)

    raw = term_frequencies(tokens)
    normalized = normalize_frequencies(raw)
    return DocumentVector(
        doc_id=document.id,
        tokens=tokens,
        term_frequency=MappingProxyType(raw),
        normalized_tf=MappingProxyType(normalized),
        magnitude=vector_magnitude(normalized.values()),
        title_terms=frozenset(title_tokens),
        body_terms=frozenset(body_tokens),
        tag_terms=frozenset(tag_tokens),
    )


def _dedupe(documents: Sequence[Document]) -> list[Document]:
    by_id: dict[str, Document] = {}
    for document in documents:
        if document.id in by_id:
            logger.warning("Duplicate document id %r in snapshot; keeping the later entry", document.id)
        by_id[document.id] = document
    return list(by_id.values())


def _assemble(vectors: dict[str, DocumentVector], fingerprint: Fingerprint) -> Index:
    total = len(vectors)
    df = document_frequencies(vector.term_frequency.keys() for vector in vectors.values())
    idf = {term: calculate_idf(count, total) for term, count in df.items()}
    index = Index(
        document_count=total,
        document_frequency=MappingProxyType(df),
        idf=MappingProxyType(idf),
        vectors=MappingProxyType(vectors),
        fingerprint=fingerprint,
    )
    logger.debug("Built index: %d documents, %d terms", total, len(idf))
    return index


def build_index(documents: Sequence[Document], analyzer: TextAnalyzer) -> Index:
    """Build a complete index from a document snapshot."""

    unique = _dedupe(documents)
    vectors = {document.id: vectorize_document(document, analyzer) for document in unique}
    return _assemble(vectors, document_fingerprint(unique))


async def build_index_async(
    documents: Sequence[Document],
    analyzer: TextAnalyzer,
    *,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> Index:
    """Build the same index as ``build_index``, yielding between chunks.

    Nothing is published until the last chunk is done, so a caller running on
    the same event loop never sees a partial index.
    """

    unique = _dedupe(documents)
    step = max(chunk_size, 1)
    vectors: dict[str, DocumentVector] = {}
    for start in range(0, len(unique), step):
        for document in unique[start : start + step]:
            vectors[document.id] = vectorize_document(document, analyzer)
        await asyncio.sleep(0)
    return _assemble(vectors, document_fingerprint(unique))


def vectorize_query(raw: str | None, analyzer: TextAnalyzer) -> Query:
    """Tokenize a query and weight each term by its max-normalized count."""

    text = (raw or "").strip()
    if not text:
        return Query(raw=raw or "")
    tokens = tuple(analyzer.get_filtered_tokens(text.lower()))
    vector = normalize_frequencies(term_frequencies(tokens), floor=1)
    return Query(raw=raw or "", tokens=tokens, vector=MappingProxyType(vector))


def term_importance(index: Index, term: str, doc_id: str) -> float:
    """TF-IDF weight of ``term`` inside one document."""

    vector = index.get_vector(doc_id)
    if vector is None:
        return 0.0
    return vector.normalized_tf.get(term, 0.0) * index.get_idf(term)


def important_terms(index: Index, doc_id: str, limit: int = 10) -> list[tuple[str, float]]:
    """Terms of one document ranked by TF-IDF weight."""

    vector = index.get_vector(doc_id)
    if vector is None or limit <= 0:
        return []
    scored = [(term, weight * index.get_idf(term)) for term, weight in vector.normalized_tf.items()]
    scored.sort(key=lambda item: (-item[1], item[0]))
    return scored[:limit]
