"""Search data models.

Every structure here is immutable: an ``Index`` is built once, swapped in as
a whole, and never patched in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType


Fingerprint = frozenset[tuple[str, datetime | None]]


def _empty_mapping() -> Mapping:
    return MappingProxyType({})


@dataclass(frozen=True)
class DocumentVector:
    """Term statistics for one document."""

    doc_id: str
    tokens: tuple[str, ...] = ()
    term_frequency: Mapping[str, int] = field(default_factory=_empty_mapping)
    normalized_tf: Mapping[str, float] = field(default_factory=_empty_mapping)
    magnitude: float = 0.0
    title_terms: frozenset[str] = frozenset()
    body_terms: frozenset[str] = frozenset()
    tag_terms: frozenset[str] = frozenset()

    @property
    def length(self) -> int:
        return len(self.tokens)

    def is_empty(self) -> bool:
        return not self.term_frequency

    def contains(self, term: str) -> bool:
        return term in self.term_frequency


@dataclass(frozen=True)
class Index:
    """Corpus-level structure produced by a full build."""

    document_count: int = 0
    document_frequency: Mapping[str, int] = field(default_factory=_empty_mapping)
    idf: Mapping[str, float] = field(default_factory=_empty_mapping)
    vectors: Mapping[str, DocumentVector] = field(default_factory=_empty_mapping)
    fingerprint: Fingerprint = field(default_factory=frozenset)

    @classmethod
    def empty(cls) -> Index:
        return cls()

    def is_consistent(self) -> bool:
        """The recorded document count must match the vectors held."""
        return self.document_count == len(self.vectors)

    @property
    def vocabulary_size(self) -> int:
        return len(self.idf)

    def get_vector(self, doc_id: str) -> DocumentVector | None:
        return self.vectors.get(doc_id)

    def get_idf(self, term: str) -> float:
        return self.idf.get(term, 0.0)


@dataclass(frozen=True)
class Query:
    """Immutable snapshot of an analyzed query."""

    raw: str
    tokens: tuple[str, ...] = ()
    vector: Mapping[str, float] = field(default_factory=_empty_mapping)

    @property
    def terms(self) -> tuple[str, ...]:
        """Distinct query terms in first-seen order."""
        return tuple(self.vector)

    def is_empty(self) -> bool:
        return not self.vector
