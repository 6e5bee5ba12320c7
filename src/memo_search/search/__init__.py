"""
Relevance search package.

This package provides the pure-Python ranking stack behind ``SearchEngine``:
- analyzers: Script-aware tokenizer, filters and stopword lists
- stats: TF normalization, IDF and vector magnitudes
- vectorizer: Index builder and query vectorizer
- scorer: Weighted title/tag/content/TF-IDF/recency scoring
- ranking: Metadata filters, sorting and truncation
- similarity: Cosine more-like-this
- autocomplete: Prefix suggestions
- fuzzy: Edit-distance fallback for unusable queries
- snippet: Highlight extraction
"""
