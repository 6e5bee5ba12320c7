"""Unit tests for fuzzy matching / typo fallback."""

import pytest

from memo_search.domain.model import Document
from memo_search.search.fuzzy import (
    fuzzy_score,
    fuzzy_search,
    levenshtein_distance,
    max_edit_distance,
    should_use_fuzzy,
)
from memo_search.search.vectorizer import vectorize_query


@pytest.mark.unit
class TestLevenshteinDistance:
    """Tests for levenshtein_distance function."""

    def test_identical_strings(self):
        assert levenshtein_distance("hello", "hello") == 0

    def test_empty_strings(self):
        assert levenshtein_distance("", "") == 0
        assert levenshtein_distance("abc", "") == 3
        assert levenshtein_distance("", "abc") == 3

    def test_single_edits(self):
        assert levenshtein_distance("cat", "cats") == 1
        assert levenshtein_distance("cats", "cat") == 1
        assert levenshtein_distance("cat", "bat") == 1

    def test_multiple_edits(self):
        assert levenshtein_distance("kitten", "sitting") == 3

    def test_case_sensitive(self):
        assert levenshtein_distance("Hello", "hello") == 1

    def test_early_exit_caps_result(self):
        assert levenshtein_distance("abcdef", "uvwxyz", max_distance=1) == 2
        assert levenshtein_distance("a", "abcdef", max_distance=2) == 3

    def test_early_exit_keeps_exact_value_within_bound(self):
        assert levenshtein_distance("meeting", "meetign", max_distance=2) == 2


@pytest.mark.unit
class TestMaxEditDistance:
    @pytest.mark.parametrize(("length", "expected"), [(1, 1), (3, 1), (6, 1), (7, 2), (10, 3)])
    def test_share_of_length_with_floor_of_one(self, length, expected):
        assert max_edit_distance(length) == expected


@pytest.mark.unit
class TestShouldUseFuzzy:
    def test_single_character_query(self, analyzer):
        assert should_use_fuzzy("x", vectorize_query("x", analyzer))

    def test_query_without_usable_tokens(self, analyzer):
        assert should_use_fuzzy("the", vectorize_query("the", analyzer))

    def test_regular_query(self, analyzer):
        assert not should_use_fuzzy("apple", vectorize_query("apple", analyzer))


@pytest.mark.unit
class TestFuzzyScore:
    def test_whole_query_containment_and_substring(self):
        # +1.0 for containment, +0.5 for "apple" containing "app"
        assert fuzzy_score("app", "apple pie") == pytest.approx(1.5)

    def test_near_miss(self):
        assert fuzzy_score("meetign", "team meeting") == pytest.approx(0.3)

    def test_no_match(self):
        assert fuzzy_score("zzz", "apple pie") == 0.0

    def test_blank_inputs(self):
        assert fuzzy_score("", "apple") == 0.0
        assert fuzzy_score("apple", "") == 0.0


@pytest.mark.unit
class TestFuzzySearch:
    def test_single_letter_finds_documents(self):
        documents = [
            Document(id="1", title="apple pie", body="banana"),
            Document(id="2", title="cat"),
        ]

        matches = fuzzy_search("a", documents)

        assert [match.document.id for match in matches] == ["1", "2"]
        assert matches[0].score > matches[1].score

    def test_threshold_drops_weak_matches(self):
        documents = [Document(id="1", body="team meeting")]

        assert fuzzy_search("meetign", documents, threshold=0.5) == []
        assert [m.document.id for m in fuzzy_search("meetign", documents)] == ["1"]

    def test_case_and_width_insensitive(self):
        documents = [Document(id="1", title="ＡＰＰＬＥ")]

        assert [m.document.id for m in fuzzy_search("Apple", documents)] == ["1"]

    def test_blank_query(self):
        assert fuzzy_search("  ", [Document(id="1", title="a")]) == []
