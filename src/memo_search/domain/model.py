"""Domain models for memo search.

Following Cosmic Python principles:
- Value Objects are immutable (frozen=True)
- Domain logic lives in the search package, not here
- No infrastructure dependencies

Documents are owned by the external note store; the engine only reads the
snapshots it is handed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


Importance = Literal["high", "medium", "low"]
SortBy = Literal["relevance", "date", "title"]
Language = Literal["japanese", "english", "mixed"]


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Document(BaseModel):
    """Snapshot of a single note as handed over by the note store."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    body: str = Field(default="", validation_alias=AliasChoices("body", "text", "content"))
    tags: tuple[str, ...] = ()
    category: str | None = None
    importance: Importance | None = None
    created_at: datetime | None = Field(default=None, validation_alias=AliasChoices("created_at", "createdAt"))
    updated_at: datetime | None = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"))

    @field_validator("title", "body", mode="before")
    @classmethod
    def _coalesce_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("tags", mode="before")
    @classmethod
    def _coalesce_tags(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(tag for tag in value if tag)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _normalize_timezone(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @property
    def last_modified(self) -> datetime | None:
        """Update timestamp, falling back to creation time."""
        return self.updated_at or self.created_at


class DateRange(BaseModel):
    """Inclusive timestamp window; either end may be open."""

    model_config = ConfigDict(frozen=True)

    start: datetime | None = None
    end: datetime | None = None
    field: Literal["updated", "created"] = "updated"

    @field_validator("start", "end")
    @classmethod
    def _normalize_timezone(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    def contains(self, moment: datetime | None) -> bool:
        if moment is None:
            return False
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True


class SearchFilters(BaseModel):
    """Metadata constraints, AND-combined."""

    model_config = ConfigDict(frozen=True)

    category: str | None = None
    importance: Importance | None = None
    tags: tuple[str, ...] = ()
    date_range: DateRange | None = None

    def is_empty(self) -> bool:
        return self.category is None and self.importance is None and not self.tags and self.date_range is None


class SearchOptions(BaseModel):
    """Options accepted by ``SearchEngine.search``.

    Out-of-range numbers are clamped instead of rejected so that searching
    stays a total operation.
    """

    model_config = ConfigDict(frozen=True)

    filters: SearchFilters | None = None
    limit: int = 50
    min_score: float = 0.01
    sort_by: SortBy = "relevance"

    @field_validator("limit", mode="before")
    @classmethod
    def _clamp_limit(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and value < 0:
            return 0
        return value

    @field_validator("min_score", mode="before")
    @classmethod
    def _clamp_min_score(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and value < 0:
            return 0.0
        return value


class FactorBreakdown(BaseModel):
    """Itemized contributions to a relevance score."""

    model_config = ConfigDict(frozen=True)

    title_match: float = 0.0
    content_match: float = 0.0
    tag_match: float = 0.0
    tf_idf: float = 0.0
    recency_boost: float = 0.0


class SearchResult(BaseModel):
    """Value object for a single ranked note."""

    model_config = ConfigDict(frozen=True)

    document: Document
    score: float
    factors: FactorBreakdown = Field(default_factory=FactorBreakdown)
    highlights: list[str] = Field(default_factory=list)
    matched_terms: list[str] = Field(default_factory=list)
    fuzzy: bool = False

    @property
    def id(self) -> str:
        return self.document.id


class TermFrequency(BaseModel):
    model_config = ConfigDict(frozen=True)

    term: str
    frequency: int


class IndexStats(BaseModel):
    """Corpus statistics reported by ``SearchEngine.get_stats``."""

    model_config = ConfigDict(frozen=True)

    total_documents: int
    vocabulary_size: int
    average_document_length: float
    top_terms: list[TermFrequency] = Field(default_factory=list)


class TokenAnalysis(BaseModel):
    """Breakdown of how a piece of text was tokenized."""

    model_config = ConfigDict(frozen=True)

    tokens: list[str]
    stopwords: list[str]
    filtered_tokens: list[str]
    word_count: int
    language: Language
