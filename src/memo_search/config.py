"""Centralized configuration for memo-search using Pydantic Settings."""

from dataclasses import dataclass

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ScoringWeights:
    """The six constants that shape a relevance score."""

    title: float = 3.0
    tag: float = 2.0
    content: float = 1.0
    tf_idf: float = 1.0
    recency_boost: float = 0.1
    recency_window_days: float = 30.0


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every field can be overridden with a ``MEMO_SEARCH_`` prefixed variable,
    e.g. ``MEMO_SEARCH_TITLE_WEIGHT=4``.
    """

    model_config = SettingsConfigDict(
        env_prefix="MEMO_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Scoring weights
    title_weight: float = Field(default=3.0, ge=0.0, description="Multiplier for the title-match factor")
    tag_weight: float = Field(default=2.0, ge=0.0, description="Multiplier for the tag-match factor")
    content_weight: float = Field(default=1.0, ge=0.0, description="Multiplier for the content-match factor")
    tf_idf_weight: float = Field(default=1.0, ge=0.0, description="Multiplier for the TF-IDF factor")
    recency_boost: float = Field(default=0.1, ge=0.0, description="Bonus for a note updated right now")
    recency_window_days: float = Field(default=30.0, gt=0.0, description="Days until the recency bonus decays to 0")

    # Result shaping
    default_limit: int = Field(default=50, ge=0, description="Maximum results returned by search")
    min_score: float = Field(default=0.01, ge=0.0, description="Scores at or below this are discarded")
    similarity_threshold: float = Field(
        default=0.1, ge=0.0, le=1.0, description="Minimum cosine similarity for more-like-this results"
    )
    similar_limit: int = Field(default=10, ge=0, description="Maximum more-like-this results")
    autocomplete_limit: int = Field(default=5, ge=0, description="Maximum autocomplete suggestions")
    top_terms_limit: int = Field(default=20, ge=0, description="Number of terms reported by get_stats")

    # Fuzzy fallback
    fuzzy_threshold: float = Field(default=0.1, ge=0.0, description="Minimum score for fuzzy fallback results")
    fuzzy_edit_ratio: float = Field(
        default=0.3, gt=0.0, le=1.0, description="Allowed edit distance as a fraction of query word length"
    )

    # Analysis / indexing
    enable_cjk_bigrams: bool = Field(default=True, description="Emit 2-character windows for CJK runs")
    build_chunk_size: int = Field(default=200, ge=1, description="Documents indexed between cooperative yields")

    # Highlights
    highlight_context: int = Field(default=50, ge=0, description="Characters of context around a highlight")
    max_highlights: int = Field(default=3, ge=0, description="Maximum highlight snippets per result")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_weights(self) -> "Settings":
        if not any((self.title_weight, self.tag_weight, self.content_weight, self.tf_idf_weight)):
            raise ValueError("At least one of the title, tag, content or tf-idf weights must be non-zero.")
        return self

    def scoring_weights(self) -> ScoringWeights:
        """Return the weighting record consumed by the scorer."""
        return ScoringWeights(
            title=self.title_weight,
            tag=self.tag_weight,
            content=self.content_weight,
            tf_idf=self.tf_idf_weight,
            recency_boost=self.recency_boost,
            recency_window_days=self.recency_window_days,
        )


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()  # type: ignore[call-arg]
