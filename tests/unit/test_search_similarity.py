"""Unit tests for cosine more-like-this retrieval."""

import pytest

from memo_search.domain.model import Document
from memo_search.search.models import DocumentVector
from memo_search.search.similarity import cosine_similarity, find_similar
from memo_search.search.vectorizer import build_index


@pytest.fixture
def overlapping_documents():
    return [
        Document(id="doc1", body="alpha bravo charlie delta echo"),
        Document(id="doc2", body="alpha bravo charlie delta foxtrot"),
        Document(id="doc3", body="kilo lima mike"),
    ]


class TestCosineSimilarity:
    def test_self_similarity_is_one(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)
        vector = index.get_vector("doc1")

        assert cosine_similarity(vector, vector) == pytest.approx(1.0)

    def test_eighty_percent_shared_vocabulary(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)

        assert cosine_similarity(index.get_vector("doc1"), index.get_vector("doc2")) == pytest.approx(0.8)

    def test_disjoint_vectors(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)

        assert cosine_similarity(index.get_vector("doc1"), index.get_vector("doc3")) == 0.0

    def test_empty_vector(self):
        assert cosine_similarity(DocumentVector(doc_id="a"), DocumentVector(doc_id="b")) == 0.0


class TestFindSimilar:
    def test_returns_related_and_excludes_disjoint_and_self(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)

        matches = find_similar(index, "doc1", threshold=0.1)

        assert [match.doc_id for match in matches] == ["doc2"]
        assert matches[0].similarity == pytest.approx(0.8)

    def test_threshold_filters(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)

        assert find_similar(index, "doc1", threshold=0.9) == []

    def test_out_of_range_threshold_is_clamped(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)

        assert [m.doc_id for m in find_similar(index, "doc1", threshold=-1.0)] == ["doc2"]
        assert find_similar(index, "doc1", threshold=5.0) == []

    def test_unknown_document(self, analyzer, overlapping_documents):
        index = build_index(overlapping_documents, analyzer)

        assert find_similar(index, "missing") == []
