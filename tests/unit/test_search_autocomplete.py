"""Unit tests for prefix suggestions."""

from memo_search.domain.model import Document
from memo_search.search.autocomplete import suggest


def test_title_tokens_and_tags_in_first_seen_order(analyzer):
    documents = [
        Document(id="1", title="Project planning", tags=["productivity"]),
        Document(id="2", title="Progress report", tags=["Projects"]),
    ]

    assert suggest("pro", documents, analyzer) == ["project", "productivity", "progress", "Projects"]


def test_suggestions_are_distinct(analyzer):
    documents = [Document(id=str(i), title="Planning meeting") for i in range(3)]

    assert suggest("plan", documents, analyzer) == ["planning"]


def test_title_token_must_be_longer_than_prefix(analyzer):
    documents = [Document(id="1", title="plan planner")]

    assert suggest("plan", documents, analyzer) == ["planner"]


def test_case_insensitive(analyzer):
    documents = [Document(id="1", title="Kubernetes")]

    assert suggest("KUB", documents, analyzer) == ["kubernetes"]


def test_limit_caps_suggestions(analyzer):
    documents = [Document(id="1", title="aab aac aad aae aaf aag aah")]

    assert suggest("aa", documents, analyzer) == ["aab", "aac", "aad", "aae", "aaf"]
    assert suggest("aa", documents, analyzer, limit=2) == ["aab", "aac"]
    assert suggest("aa", documents, analyzer, limit=0) == []


def test_blank_prefix(analyzer):
    documents = [Document(id="1", title="anything")]

    assert suggest("", documents, analyzer) == []
    assert suggest("   ", documents, analyzer) == []
    assert suggest(None, documents, analyzer) == []
