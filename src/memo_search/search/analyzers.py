"""Analyzer utilities for mixed Japanese/English note text.

The analyzers follow a composable tokenizer/filter design: a tokenizer emits
``Token`` objects and a chain of filters lowercases them, drops tokens that
carry no letters, and removes stopwords. Runs of CJK characters cannot be
split on whitespace, so they are handed to a morphological segmenter
(janome) and additionally expanded into overlapping 2-character windows,
which keeps compound words and unknown terms findable when the segmenter
cuts them differently in a note and in a query.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable, Iterator, MutableMapping, Sequence
from dataclasses import dataclass, field
from functools import lru_cache
import re
from typing import Any, Protocol
import unicodedata

from janome.tokenizer import Tokenizer as JanomeTokenizer

from memo_search.domain.model import Language, TermFrequency, TokenAnalysis


CJK_SCRIPT = "cjk"
LATIN_SCRIPT = "latin"

# Hiragana, katakana (incl. half-width), CJK ideographs and iteration marks
_CJK_RANGES = "\u3005\u3006\u3040-\u309f\u30a0-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff\uff66-\uff9f"
_CJK_CHAR = re.compile(f"[{_CJK_RANGES}]")
_CJK_RUN = re.compile(f"[{_CJK_RANGES}]+")
_LATIN_LETTER = re.compile(r"[A-Za-z]")
_WORD = re.compile(r"[^\W_]+")
_LETTERS = re.compile(r"[^\W\d_]+")

_JAPANESE_RATIO = 0.7
_ENGLISH_RATIO = 0.3


@dataclass
class Token:
    """Represents a token emitted by analyzers."""

    text: str
    position: int
    start_char: int
    end_char: int
    attributes: MutableMapping[str, Any] = field(default_factory=dict)

    @property
    def script(self) -> str:
        return self.attributes.get("script", LATIN_SCRIPT)

    @property
    def is_bigram(self) -> bool:
        return bool(self.attributes.get("bigram", False))

    def copy_with(self, **updates: Any) -> Token:
        data = {
            "text": self.text,
            "position": self.position,
            "start_char": self.start_char,
            "end_char": self.end_char,
            "attributes": dict(self.attributes),
        }
        data.update(updates)
        return Token(**data)


class Tokenizer(Protocol):
    """Protocol implemented by tokenizers."""

    def __call__(self, text: str) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:  # pragma: no cover - interface definition
        ...


ENGLISH_STOPWORDS = [
    "a",
    "all",
    "an",
    "and",
    "are",
    "as",
    "at",
    "be",
    "but",
    "by",
    "do",
    "for",
    "from",
    "has",
    "have",
    "he",
    "her",
    "his",
    "i",
    "in",
    "is",
    "it",
    "its",
    "my",
    "not",
    "of",
    "on",
    "one",
    "or",
    "say",
    "she",
    "that",
    "the",
    "their",
    "there",
    "they",
    "this",
    "to",
    "was",
    "we",
    "will",
    "with",
    "would",
    "you",
]

JAPANESE_STOPWORDS = [
    "の",
    "に",
    "は",
    "を",
    "が",
    "で",
    "て",
    "と",
    "し",
    "れ",
    "さ",
    "ある",
    "いる",
    "する",
    "です",
    "ます",
    "だ",
    "である",
    "た",
    "な",
    "ない",
    "なる",
    "この",
    "その",
    "あの",
    "どの",
    "これ",
    "それ",
    "あれ",
    "どれ",
    "ここ",
    "そこ",
    "あそこ",
    "どこ",
    "こう",
    "そう",
    "ああ",
    "どう",
    "から",
    "まで",
    "より",
    "へ",
    "など",
    "として",
    "について",
    "において",
    "とは",
    "では",
    "には",
    "への",
    "こと",
    "もの",
    "ため",
]


def normalize_text(text: str | None) -> str:
    """NFKC-fold text so full-width Latin and half-width kana index alike."""

    if not text:
        return ""
    return unicodedata.normalize("NFKC", text)


def is_cjk(text: str) -> bool:
    """Return True when the text contains at least one CJK character."""

    return _CJK_CHAR.search(text) is not None


def detect_language(text: str | None) -> Language:
    """Classify text by the share of CJK characters among all letters."""

    normalized = normalize_text(text)
    cjk_count = len(_CJK_CHAR.findall(normalized))
    latin_count = len(_LATIN_LETTER.findall(normalized))
    total = cjk_count + latin_count
    if total == 0:
        return "mixed"
    ratio = cjk_count / total
    if ratio > _JAPANESE_RATIO:
        return "japanese"
    if ratio < _ENGLISH_RATIO:
        return "english"
    return "mixed"


class JapaneseSegmenter:
    """Morphological segmenter for CJK runs backed by janome.

    The janome dictionary is loaded on first use; text without CJK characters
    never pays for it.
    """

    def __init__(self) -> None:
        self._tokenizer: JanomeTokenizer | None = None

    def __call__(self, run: str) -> list[str]:
        if not run:
            return []
        if self._tokenizer is None:
            self._tokenizer = JanomeTokenizer()
        return [surface for surface in self._tokenizer.tokenize(run, wakati=True) if surface.strip()]


@lru_cache(maxsize=1)
def default_segmenter() -> JapaneseSegmenter:
    return JapaneseSegmenter()


class ScriptAwareTokenizer:
    """Split text into Latin words and segmented CJK runs.

    Each word-character run is cut at script boundaries: CJK stretches go
    through the segmenter (plus optional bigrams), everything else is split
    into letter runs, so digits and other non-letters separate words.
    """

    def __init__(
        self,
        segmenter: Callable[[str], list[str]] | None = None,
        *,
        emit_bigrams: bool = True,
    ) -> None:
        self._segmenter = segmenter
        self.emit_bigrams = emit_bigrams

    @property
    def segmenter(self) -> Callable[[str], list[str]]:
        if self._segmenter is None:
            self._segmenter = default_segmenter()
        return self._segmenter

    def __call__(self, text: str) -> Iterator[Token]:
        tokens: list[Token] = []
        for match in _WORD.finditer(text):
            word = match.group(0)
            base = match.start()
            cursor = 0
            for run in _CJK_RUN.finditer(word):
                if run.start() > cursor:
                    tokens.extend(self._word_tokens(word[cursor : run.start()], base + cursor, len(tokens)))
                tokens.extend(self._cjk_tokens(run.group(0), base + run.start(), len(tokens)))
                cursor = run.end()
            if cursor < len(word):
                tokens.extend(self._word_tokens(word[cursor:], base + cursor, len(tokens)))
        return iter(tokens)

    @staticmethod
    def _word_tokens(segment: str, start: int, position: int) -> list[Token]:
        return [
            Token(
                text=letters.group(0),
                position=position + offset,
                start_char=start + letters.start(),
                end_char=start + letters.end(),
                attributes={"script": LATIN_SCRIPT},
            )
            for offset, letters in enumerate(_LETTERS.finditer(segment))
        ]

    def _cjk_tokens(self, run: str, start: int, position: int) -> list[Token]:
        tokens: list[Token] = []
        segments: set[str] = set()
        cursor = 0
        for surface in self.segmenter(run):
            offset = run.find(surface, cursor)
            if offset == -1:
                offset = cursor
            tokens.append(
                Token(
                    text=surface,
                    position=position + len(tokens),
                    start_char=start + offset,
                    end_char=start + offset + len(surface),
                    attributes={"script": CJK_SCRIPT},
                )
            )
            segments.add(surface)
            cursor = offset + len(surface)

        if self.emit_bigrams and len(run) >= 2:
            for offset in range(len(run) - 1):
                window = run[offset : offset + 2]
                if window in segments:
                    continue
                tokens.append(
                    Token(
                        text=window,
                        position=position + len(tokens),
                        start_char=start + offset,
                        end_char=start + offset + 2,
                        attributes={"script": CJK_SCRIPT, "bigram": True},
                    )
                )
        return tokens


class LowercaseFilter:
    """Filter that lowercases token text."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            lowered = token.text.lower()
            if lowered == token.text:
                yield token
            else:
                yield token.copy_with(text=lowered)


class LetterFilter:
    """Drops tokens made only of digits, punctuation, symbols or whitespace."""

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            text = token.text.strip()
            if text and any(char.isalpha() for char in text):
                yield token


class StopFilter:
    """Removes stopwords of one script from the stream."""

    def __init__(self, stopwords: Sequence[str], *, script: str) -> None:
        self.script = script
        self.stopwords = {word.lower() for word in stopwords}

    def __call__(self, tokens: Iterable[Token]) -> Iterator[Token]:
        for token in tokens:
            if token.script == self.script and token.text in self.stopwords:
                continue
            yield token


class AnalyzerPipeline:
    """Composable analyzer pipeline (tokenizer + filters)."""

    def __init__(self, tokenizer: Tokenizer, filters: Sequence[TokenFilter] | None = None) -> None:
        self.tokenizer = tokenizer
        self.filters = list(filters or [])

    def __call__(self, text: str) -> list[Token]:
        stream: Iterable[Token] = self.tokenizer(text)
        for token_filter in self.filters:
            stream = token_filter(stream)
        tokens = list(stream)
        for idx, token in enumerate(tokens):  # normalize positions post-filtering
            token.position = idx
        return tokens


class TextAnalyzer:
    """Default analyzer for note titles, bodies, tags and queries.

    ``tokenize`` keeps stopwords; ``get_filtered_tokens`` removes them and is
    what indexing, scoring and autocomplete use.
    """

    def __init__(
        self,
        *,
        emit_bigrams: bool = True,
        segmenter: Callable[[str], list[str]] | None = None,
        english_stopwords: Sequence[str] | None = None,
        japanese_stopwords: Sequence[str] | None = None,
    ) -> None:
        tokenizer = ScriptAwareTokenizer(segmenter, emit_bigrams=emit_bigrams)
        self._english_stop = StopFilter(
            english_stopwords if english_stopwords is not None else ENGLISH_STOPWORDS, script=LATIN_SCRIPT
        )
        self._japanese_stop = StopFilter(
            japanese_stopwords if japanese_stopwords is not None else JAPANESE_STOPWORDS, script=CJK_SCRIPT
        )
        base_filters: list[TokenFilter] = [LowercaseFilter(), LetterFilter()]
        self.token_pipeline = AnalyzerPipeline(tokenizer, base_filters)
        self.filtered_pipeline = AnalyzerPipeline(tokenizer, [*base_filters, self._japanese_stop, self._english_stop])

    def __call__(self, text: str | None) -> list[Token]:
        return self.filtered_pipeline(normalize_text(text))

    def tokenize(self, text: str | None) -> list[str]:
        """Return all normalized tokens, stopwords included. Never raises."""

        normalized = normalize_text(text)
        if not normalized.strip():
            return []
        return [token.text for token in self.token_pipeline(normalized)]

    def get_filtered_tokens(self, text: str | None) -> list[str]:
        """Return normalized tokens with stopwords removed. Never raises."""

        normalized = normalize_text(text)
        if not normalized.strip():
            return []
        return [token.text for token in self.filtered_pipeline(normalized)]

    def is_stopword(self, token: str) -> bool:
        stop = self._japanese_stop if is_cjk(token) else self._english_stop
        return token.lower() in stop.stopwords

    def analyze_text(self, text: str | None) -> TokenAnalysis:
        tokens = self.tokenize(text)
        stopwords = [token for token in tokens if self.is_stopword(token)]
        filtered = [token for token in tokens if not self.is_stopword(token)]
        return TokenAnalysis(
            tokens=tokens,
            stopwords=stopwords,
            filtered_tokens=filtered,
            word_count=len(filtered),
            language=detect_language(text),
        )

    def extract_key_terms(self, text: str | None, max_terms: int = 10) -> list[TermFrequency]:
        """Most frequent filtered terms longer than one character."""

        counts = Counter(token for token in self.get_filtered_tokens(text) if len(token) > 1)
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [TermFrequency(term=term, frequency=freq) for term, freq in ranked[: max(max_terms, 0)]]

    def add_stopwords(self, words: Iterable[str]) -> None:
        for word in words:
            stop = self._japanese_stop if is_cjk(word) else self._english_stop
            stop.stopwords.add(word.lower())

    def remove_stopwords(self, words: Iterable[str]) -> None:
        for word in words:
            stop = self._japanese_stop if is_cjk(word) else self._english_stop
            stop.stopwords.discard(word.lower())

    def get_stopwords(self) -> list[str]:
        return sorted(self._japanese_stop.stopwords | self._english_stop.stopwords)


@lru_cache(maxsize=1)
def default_analyzer() -> TextAnalyzer:
    return TextAnalyzer()


def tokenize(text: str | None) -> list[str]:
    """Tokenize with the shared default analyzer."""

    return default_analyzer().tokenize(text)


def get_filtered_tokens(text: str | None) -> list[str]:
    """Tokenize and drop stopwords with the shared default analyzer."""

    return default_analyzer().get_filtered_tokens(text)
