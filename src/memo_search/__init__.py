"""Client-side relevance search for notes with mixed Japanese and English text."""

from memo_search.engine import SearchEngine


__all__ = ["SearchEngine"]
