"""Highlight snippet extraction for search results.

Each highlight is a short window of note text around the first occurrence
of a matched term, with every matched term inside the window wrapped in a
marker. Matching is case-insensitive and does not rely on word boundaries,
so CJK terms inside unsegmented text are found as well.
"""

from __future__ import annotations

from collections.abc import Sequence
import re


WORD_BOUNDARY_PATTERN = re.compile(r"\s+")

DEFAULT_CONTEXT = 50
DEFAULT_MAX_HIGHLIGHTS = 3


def _snap_start(text: str, start: int, position: int) -> int:
    """Move a window start forward to the next word boundary, if one exists before the match."""

    if start == 0:
        return 0
    boundary = WORD_BOUNDARY_PATTERN.search(text, start, position)
    return boundary.end() if boundary else start


def _snap_end(text: str, end: int, match_end: int) -> int:
    """Move a window end back to the last word boundary after the match."""

    if end >= len(text):
        return len(text)
    last = None
    for boundary in WORD_BOUNDARY_PATTERN.finditer(text, match_end, end):
        last = boundary
    return last.start() if last else end


def context_window(text: str, position: int, length: int, context: int = DEFAULT_CONTEXT) -> tuple[int, int]:
    """Return ``(start, end)`` of a window of ``context`` characters around a match."""

    start = max(0, position - context)
    end = min(len(text), position + length + context)
    return _snap_start(text, start, position), _snap_end(text, end, position + length)


def mark_terms(fragment: str, terms: Sequence[str], style: str = "html") -> str:
    """Wrap every occurrence of ``terms`` in ``fragment``.

    Longer matches win over shorter overlapping ones. ``style`` is ``"html"``
    for ``<mark>term</mark>`` or ``"plain"`` for ``[[term]]``.
    """

    if not fragment or not terms:
        return fragment

    matches: list[tuple[int, int]] = []
    for term in terms:
        if not term:
            continue
        pattern = re.compile(re.escape(term), re.IGNORECASE)
        matches.extend((match.start(), match.end()) for match in pattern.finditer(fragment))
    if not matches:
        return fragment

    matches.sort(key=lambda span: (span[0], -(span[1] - span[0])))
    selected: list[tuple[int, int]] = []
    for start, end in matches:
        if selected and start < selected[-1][1]:
            continue
        selected.append((start, end))

    parts: list[str] = []
    cursor = 0
    for start, end in selected:
        matched = fragment[start:end]
        parts.append(fragment[cursor:start])
        parts.append(f"<mark>{matched}</mark>" if style == "html" else f"[[{matched}]]")
        cursor = end
    parts.append(fragment[cursor:])
    return "".join(parts)


def build_highlights(
    text: str,
    terms: Sequence[str],
    *,
    context: int = DEFAULT_CONTEXT,
    max_highlights: int = DEFAULT_MAX_HIGHLIGHTS,
    style: str = "html",
) -> list[str]:
    """Build up to ``max_highlights`` marked snippets, one per matched term.

    A term whose first occurrence already falls inside an earlier window does
    not get a window of its own.
    """

    if not text or not terms or max_highlights <= 0:
        return []

    windows: list[tuple[int, int]] = []
    highlights: list[str] = []
    for term in terms:
        if not term:
            continue
        found = re.search(re.escape(term), text, re.IGNORECASE)
        if found is None:
            continue
        position = found.start()
        if any(start <= position < end for start, end in windows):
            continue
        start, end = context_window(text, position, len(term), context)
        windows.append((start, end))
        highlights.append(mark_terms(text[start:end].strip(), terms, style=style))
        if len(highlights) >= max_highlights:
            break
    return highlights
