"""Search engine facade.

``SearchEngine`` owns exactly one active ``Index``. Every operation takes the
current document snapshot from the caller; when the snapshot no longer
matches the active index the engine rebuilds first. Builds happen off to the
side and the finished index is swapped in as a whole, so readers only ever
see a complete index.

Interface Methods:
- build(documents) / build_async(documents) -> Index
- search(query, documents, options) -> list[SearchResult]
- find_similar(document_id, documents, limit, threshold) -> list[SearchResult]
- autocomplete(partial_query, documents, limit) -> list[str]
- get_stats(documents) -> IndexStats
- important_terms(document_id, documents, limit) -> list[tuple[str, float]]
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timezone
import logging
from typing import Any

from memo_search.config import Settings
from memo_search.domain.model import (
    Document,
    FactorBreakdown,
    IndexStats,
    SearchOptions,
    SearchResult,
    TermFrequency,
)
from memo_search.observability.metrics import INDEX_DOC_COUNT, OPERATION_LATENCY, SEARCH_COUNT, track_latency
from memo_search.observability.tracing import create_span
from memo_search.search.analyzers import TextAnalyzer
from memo_search.search.autocomplete import suggest
from memo_search.search.fuzzy import fuzzy_search, should_use_fuzzy
from memo_search.search.models import Index, Query
from memo_search.search.ranking import clamp_limit, rank
from memo_search.search.scorer import RelevanceScorer
from memo_search.search.similarity import find_similar as similar_documents
from memo_search.search.snippet import build_highlights
from memo_search.search.stats import compute_length_stats
from memo_search.search.vectorizer import (
    build_index,
    build_index_async,
    document_fingerprint,
    important_terms as rank_important_terms,
    vectorize_query,
)


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_documents(documents: Iterable[Document | Mapping[str, Any]] | None) -> list[Document]:
    """Accept model instances or plain mappings from the note store."""
    if not documents:
        return []
    return [doc if isinstance(doc, Document) else Document.model_validate(doc) for doc in documents]


class SearchEngine:
    """Ranked search, more-like-this and suggestions over a note snapshot.

    ``name`` labels this engine in the indexed-document gauge; engines that
    share a name share the series.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        analyzer: TextAnalyzer | None = None,
        clock: Clock | None = None,
        *,
        name: str = "default",
    ) -> None:
        self.settings = settings or Settings()  # type: ignore[call-arg]
        self.analyzer = analyzer or TextAnalyzer(emit_bigrams=self.settings.enable_cjk_bigrams)
        self._clock = clock or _utc_now
        self._index: Index | None = None
        self.name = name

    @property
    def index(self) -> Index | None:
        """The active index, or None before the first build."""
        return self._index

    def reset(self) -> None:
        self._index = None
        INDEX_DOC_COUNT.labels(engine=self.name).set(0)

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    def is_stale(self, documents: Sequence[Document | Mapping[str, Any]]) -> bool:
        """True when the active index does not describe ``documents``."""
        index = self._index
        if index is None or not index.is_consistent():
            return True
        snapshot = document_fingerprint(_as_documents(documents))
        if len(snapshot) != index.document_count:
            return True
        return snapshot != index.fingerprint

    def _publish(self, index: Index) -> Index:
        self._index = index
        INDEX_DOC_COUNT.labels(engine=self.name).set(index.document_count)
        logger.info(
            "Index ready: %d documents, %d terms",
            index.document_count,
            index.vocabulary_size,
        )
        return index

    def build(self, documents: Sequence[Document | Mapping[str, Any]]) -> Index:
        """Rebuild from scratch and swap the result in."""
        docs = _as_documents(documents)
        with create_span("memo_search.build", attributes={"document.count": len(docs)}):
            with track_latency(OPERATION_LATENCY, operation="build"):
                index = build_index(docs, self.analyzer)
        return self._publish(index)

    async def build_async(self, documents: Sequence[Document | Mapping[str, Any]]) -> Index:
        """Chunked variant of ``build`` that yields to the event loop between chunks."""
        docs = _as_documents(documents)
        with create_span("memo_search.build_async", attributes={"document.count": len(docs)}):
            with track_latency(OPERATION_LATENCY, operation="build_async"):
                index = await build_index_async(docs, self.analyzer, chunk_size=self.settings.build_chunk_size)
        return self._publish(index)

    def _ensure_index(self, documents: list[Document]) -> Index:
        if self.is_stale(documents):
            logger.debug("Index stale for %d documents; rebuilding", len(documents))
            with track_latency(OPERATION_LATENCY, operation="build"):
                return self._publish(build_index(documents, self.analyzer))
        return self._index  # type: ignore[return-value]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _default_options(self) -> SearchOptions:
        return SearchOptions(limit=self.settings.default_limit, min_score=self.settings.min_score)

    def search(
        self,
        query: str | None,
        documents: Sequence[Document | Mapping[str, Any]],
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        """Rank ``documents`` against ``query``.

        Blank queries and empty snapshots return an empty list. Queries that
        are a single character or that analyze to no usable terms are scored
        by the fuzzy fallback instead of TF-IDF.
        """
        options = options or self._default_options()
        raw = (query or "").strip()
        docs = _as_documents(documents)
        if not raw or not docs:
            SEARCH_COUNT.labels(mode="empty").inc()
            return []

        with create_span("memo_search.search", attributes={"query.length": len(raw)}) as span:
            with track_latency(OPERATION_LATENCY, operation="search"):
                index = self._ensure_index(docs)
                parsed = vectorize_query(raw, self.analyzer)
                if should_use_fuzzy(raw, parsed):
                    mode = "fuzzy"
                    candidates = self._fuzzy_candidates(raw, docs)
                else:
                    mode = "ranked"
                    candidates = self._ranked_candidates(parsed, docs, index, options.min_score)
                results = rank(candidates, options.filters, options.sort_by, options.limit)
            span.set_attribute("search.mode", mode)
            span.set_attribute("search.result_count", len(results))

        SEARCH_COUNT.labels(mode=mode).inc()
        logger.debug("Search %r (%s): %d candidates, %d returned", raw, mode, len(candidates), len(results))
        return results

    def _ranked_candidates(
        self,
        query: Query,
        documents: list[Document],
        index: Index,
        min_score: float,
    ) -> list[SearchResult]:
        scorer = RelevanceScorer(index, self.settings.scoring_weights(), now=self._clock())
        latest = {doc.id: doc for doc in documents}
        candidates: list[SearchResult] = []
        for document in latest.values():
            vector = index.get_vector(document.id)
            if vector is None:
                continue
            relevance = scorer.score(document, query.tokens, query.vector, vector)
            if not relevance.has_overlap or relevance.total <= min_score:
                continue
            terms = list(relevance.matched_terms)
            candidates.append(
                SearchResult(
                    document=document,
                    score=relevance.total,
                    factors=relevance.factors,
                    highlights=self._highlights(document, terms),
                    matched_terms=terms,
                )
            )
        return candidates

    def _fuzzy_candidates(self, raw: str, documents: list[Document]) -> list[SearchResult]:
        matches = fuzzy_search(
            raw,
            {doc.id: doc for doc in documents}.values(),
            threshold=self.settings.fuzzy_threshold,
            edit_ratio=self.settings.fuzzy_edit_ratio,
        )
        terms = raw.lower().split()
        return [
            SearchResult(
                document=match.document,
                score=match.score,
                factors=FactorBreakdown(content_match=match.score),
                highlights=self._highlights(match.document, terms),
                matched_terms=terms,
                fuzzy=True,
            )
            for match in matches
        ]

    def _highlights(self, document: Document, terms: list[str]) -> list[str]:
        text = document.body or document.title
        return build_highlights(
            text,
            terms,
            context=self.settings.highlight_context,
            max_highlights=self.settings.max_highlights,
        )

    def find_similar(
        self,
        document_id: str,
        documents: Sequence[Document | Mapping[str, Any]],
        limit: int | None = None,
        threshold: float | None = None,
    ) -> list[SearchResult]:
        """Notes whose term vectors point the same way as ``document_id``'s."""
        docs = _as_documents(documents)
        if not docs:
            return []
        cutoff = self.settings.similarity_threshold if threshold is None else threshold
        count = clamp_limit(limit, self.settings.similar_limit)

        with create_span("memo_search.find_similar", attributes={"document.id": document_id}):
            with track_latency(OPERATION_LATENCY, operation="find_similar"):
                index = self._ensure_index(docs)
                matches = similar_documents(index, document_id, cutoff)[:count]

        by_id = {doc.id: doc for doc in docs}
        return [
            SearchResult(
                document=by_id[match.doc_id],
                score=match.similarity,
                factors=FactorBreakdown(content_match=match.similarity, tf_idf=match.similarity),
            )
            for match in matches
        ]

    def autocomplete(
        self,
        partial_query: str | None,
        documents: Sequence[Document | Mapping[str, Any]],
        limit: int | None = None,
    ) -> list[str]:
        """Prefix completions read straight from the snapshot; no index is built."""
        docs = _as_documents(documents)
        count = clamp_limit(limit, self.settings.autocomplete_limit)
        with create_span("memo_search.autocomplete"):
            with track_latency(OPERATION_LATENCY, operation="autocomplete"):
                return suggest(partial_query, docs, self.analyzer, count)

    def get_stats(self, documents: Sequence[Document | Mapping[str, Any]]) -> IndexStats:
        """Corpus size, vocabulary and the most frequent terms."""
        docs = _as_documents(documents)
        if not docs:
            return IndexStats(total_documents=0, vocabulary_size=0, average_document_length=0.0)
        index = self._ensure_index(docs)

        totals: Counter[str] = Counter()
        for vector in index.vectors.values():
            totals.update(vector.term_frequency)
        ranked = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
        top = [TermFrequency(term=term, frequency=count) for term, count in ranked[: self.settings.top_terms_limit]]

        lengths = compute_length_stats(vector.length for vector in index.vectors.values())
        return IndexStats(
            total_documents=index.document_count,
            vocabulary_size=index.vocabulary_size,
            average_document_length=lengths.average_length,
            top_terms=top,
        )

    def important_terms(
        self,
        document_id: str,
        documents: Sequence[Document | Mapping[str, Any]],
        limit: int = 10,
    ) -> list[tuple[str, float]]:
        docs = _as_documents(documents)
        if not docs:
            return []
        return rank_important_terms(self._ensure_index(docs), document_id, clamp_limit(limit, 10))
