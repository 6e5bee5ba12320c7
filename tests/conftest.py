"""Shared test fixtures and configuration."""

from datetime import datetime, timedelta, timezone
import os

import pytest

from memo_search.domain.model import Document
from memo_search.search.analyzers import TextAnalyzer


NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def whole_run_segmenter(run: str) -> list[str]:
    """Deterministic stand-in for janome: a CJK run is one segment."""
    return [run]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Drop MEMO_SEARCH_* overrides and keep stray .env files out of reach."""
    for key in list(os.environ):
        if key.startswith("MEMO_SEARCH_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def analyzer():
    """Analyzer whose CJK handling does not depend on the janome dictionary."""
    return TextAnalyzer(segmenter=whole_run_segmenter)


@pytest.fixture
def fruit_documents():
    return [
        Document(id="doc1", title="apple pie", body="banana"),
        Document(id="doc2", title="fruit", body="I like apple very much"),
        Document(id="doc3", title="car", body="engine"),
    ]


@pytest.fixture
def dated_documents():
    """Notes with metadata for filter and sort tests."""
    return [
        Document(
            id="n1",
            title="Weekly planning",
            body="Plan the sprint backlog and review goals",
            tags=["work", "planning"],
            category="work",
            importance="high",
            created_at=NOW - timedelta(days=40),
            updated_at=NOW - timedelta(days=2),
        ),
        Document(
            id="n2",
            title="Grocery list",
            body="Buy apples, milk and bread. Plan dinner.",
            tags=["personal"],
            category="home",
            importance="low",
            created_at=NOW - timedelta(days=10),
            updated_at=NOW - timedelta(days=10),
        ),
        Document(
            id="n3",
            title="Architecture plan",
            body="Draft the service boundaries",
            tags=["Work"],
            category="work",
            importance="medium",
            created_at=NOW - timedelta(days=90),
        ),
    ]


@pytest.fixture
def segmenter():
    return whole_run_segmenter
