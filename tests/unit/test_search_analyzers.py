"""Unit tests for the script-aware analyzer pipeline."""

import pytest

from memo_search.search.analyzers import (
    CJK_SCRIPT,
    LATIN_SCRIPT,
    AnalyzerPipeline,
    JapaneseSegmenter,
    LetterFilter,
    LowercaseFilter,
    ScriptAwareTokenizer,
    StopFilter,
    TextAnalyzer,
    Token,
    detect_language,
    is_cjk,
    normalize_text,
)


class TestScriptAwareTokenizer:
    def test_splits_latin_words_on_punctuation(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter)
        tokens = list(tokenizer("Hello, world! foo_bar"))

        assert [token.text for token in tokens] == ["Hello", "world", "foo", "bar"]
        assert all(token.script == LATIN_SCRIPT for token in tokens)

    def test_records_character_offsets(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter)
        text = "alpha beta"
        tokens = list(tokenizer(text))

        assert [(token.start_char, token.end_char) for token in tokens] == [(0, 5), (6, 10)]
        assert text[tokens[1].start_char : tokens[1].end_char] == "beta"

    def test_digits_split_latin_words(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter)
        text = "abc123def route2work covid19"
        tokens = list(tokenizer(text))

        assert [token.text for token in tokens] == ["abc", "def", "route", "work", "covid"]
        assert [token.position for token in tokens] == [0, 1, 2, 3, 4]
        assert [text[token.start_char : token.end_char] for token in tokens] == [
            "abc",
            "def",
            "route",
            "work",
            "covid",
        ]
        assert (tokens[1].start_char, tokens[1].end_char) == (6, 9)

    def test_cjk_run_emits_segment_and_bigrams(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter)
        tokens = list(tokenizer("メモを書く"))

        assert [token.text for token in tokens] == ["メモを書く", "メモ", "モを", "を書", "書く"]
        assert all(token.script == CJK_SCRIPT for token in tokens)
        assert [token.is_bigram for token in tokens] == [False, True, True, True, True]

    def test_bigram_equal_to_segment_is_not_duplicated(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter)

        assert [token.text for token in tokenizer("入門")] == ["入門"]

    def test_bigrams_can_be_disabled(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter, emit_bigrams=False)

        assert [token.text for token in tokenizer("メモを書く")] == ["メモを書く"]

    def test_mixed_script_word_is_cut_at_script_boundary(self, segmenter):
        tokenizer = ScriptAwareTokenizer(segmenter)
        tokens = list(tokenizer("Python入門"))

        assert [(token.text, token.script) for token in tokens] == [("Python", LATIN_SCRIPT), ("入門", CJK_SCRIPT)]

    def test_segmenter_output_becomes_tokens(self):
        tokenizer = ScriptAwareTokenizer(lambda run: ["メモ", "を", "書く"], emit_bigrams=False)
        tokens = list(tokenizer("メモを書く"))

        assert [token.text for token in tokens] == ["メモ", "を", "書く"]
        assert [token.start_char for token in tokens] == [0, 2, 3]


class TestFilters:
    def test_lowercase_filter(self, segmenter):
        tokens = list(ScriptAwareTokenizer(segmenter)("MiXeD case"))
        lowered = list(LowercaseFilter()(tokens))

        assert [token.text for token in lowered] == ["mixed", "case"]

    def test_letter_filter_drops_pure_numbers(self):
        tokens = [
            Token(text="2024", position=0, start_char=0, end_char=4),
            Token(text="v2", position=1, start_char=5, end_char=7),
            Token(text="42", position=2, start_char=8, end_char=10),
        ]
        kept = list(LetterFilter()(tokens))

        assert [token.text for token in kept] == ["v2"]

    def test_stop_filter_only_applies_to_its_script(self, segmenter):
        pipeline = AnalyzerPipeline(
            ScriptAwareTokenizer(segmenter),
            [LowercaseFilter(), StopFilter(["the"], script=LATIN_SCRIPT)],
        )

        assert [token.text for token in pipeline("The cat")] == ["cat"]

    def test_pipeline_renumbers_positions(self, segmenter):
        pipeline = AnalyzerPipeline(
            ScriptAwareTokenizer(segmenter),
            [LowercaseFilter(), StopFilter(["the", "a"], script=LATIN_SCRIPT)],
        )
        tokens = pipeline("the cat and a dog")

        assert [token.position for token in tokens] == [0, 1, 2]


class TestTextAnalyzer:
    def test_filtered_tokens_drop_english_stopwords(self, analyzer):
        assert analyzer.get_filtered_tokens("The quick fox is in the garden") == ["quick", "fox", "garden"]

    def test_tokenize_keeps_stopwords(self, analyzer):
        assert analyzer.tokenize("The fox") == ["the", "fox"]

    def test_japanese_stopwords_removed(self):
        analyzer = TextAnalyzer(segmenter=lambda run: ["メモ", "を", "書く"], emit_bigrams=False)

        assert analyzer.get_filtered_tokens("メモを書く") == ["メモ", "書く"]

    @pytest.mark.parametrize("text", [None, "", "   ", "!!! ... ---", "12 34"])
    def test_blank_or_symbol_only_text_yields_nothing(self, analyzer, text):
        assert analyzer.get_filtered_tokens(text) == []

    def test_full_width_latin_is_normalized(self, analyzer):
        assert analyzer.get_filtered_tokens("ＡＰＰＬＥ") == ["apple"]

    def test_half_width_katakana_is_normalized(self, analyzer):
        assert analyzer.get_filtered_tokens("ﾒﾓ") == ["メモ"]

    def test_is_stopword(self, analyzer):
        assert analyzer.is_stopword("The")
        assert analyzer.is_stopword("です")
        assert not analyzer.is_stopword("apple")

    def test_analyze_text(self, analyzer):
        analysis = analyzer.analyze_text("the apple")

        assert analysis.tokens == ["the", "apple"]
        assert analysis.stopwords == ["the"]
        assert analysis.filtered_tokens == ["apple"]
        assert analysis.word_count == 1
        assert analysis.language == "english"

    def test_extract_key_terms(self, analyzer):
        terms = analyzer.extract_key_terms("apple apple pie x")

        assert [(term.term, term.frequency) for term in terms] == [("apple", 2), ("pie", 1)]

    def test_add_and_remove_stopwords(self, analyzer):
        analyzer.add_stopwords(["apple"])
        analyzer.remove_stopwords(["the"])

        assert analyzer.get_filtered_tokens("the apple") == ["the"]
        assert "apple" in analyzer.get_stopwords()

    def test_janome_segmentation(self):
        tokens = TextAnalyzer().get_filtered_tokens("メモを書く")

        assert "メモ" in tokens
        assert "書く" in tokens
        assert "を" not in tokens


class TestHelpers:
    def test_normalize_text(self):
        assert normalize_text(None) == ""
        assert normalize_text("ｶﾅ") == "カナ"

    def test_is_cjk(self):
        assert is_cjk("abc漢字")
        assert not is_cjk("abc")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("hello world", "english"),
            ("こんにちは世界", "japanese"),
            ("メモ memo", "mixed"),
            ("", "mixed"),
        ],
    )
    def test_detect_language(self, text, expected):
        assert detect_language(text) == expected

    def test_japanese_segmenter_skips_blank_input(self):
        assert JapaneseSegmenter()("") == []


def test_module_level_helpers_use_shared_analyzer():
    from memo_search.search.analyzers import default_analyzer, get_filtered_tokens, tokenize

    assert default_analyzer() is default_analyzer()
    assert tokenize("The Fox") == ["the", "fox"]
    assert get_filtered_tokens("The Fox") == ["fox"]
