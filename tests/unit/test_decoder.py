"""Unit tests for token decoding."""

import numpy as np

from whisper_tflite.bundle import SpecialTokens, Vocabulary
from whisper_tflite.decoder import DecodedText, collapse_spaces, decode


class TestCollapseSpaces:
    """Tests for the space normalization pass."""

    def test_collapses_runs(self):
        assert collapse_spaces(b"a   b  c d") == b"a b c d"

    def test_leading_and_trailing_runs(self):
        assert collapse_spaces(b"   a   ") == b" a "

    def test_other_whitespace_untouched(self):
        assert collapse_spaces(b"a\t\tb\n\nc") == b"a\t\tb\n\nc"

    def test_empty(self):
        assert collapse_spaces(b"") == b""


class TestDecode:
    """Tests for decode."""

    def test_stops_at_end_of_text(self, toy_vocab):
        result = decode([5, 9, 12, 1], toy_vocab)
        assert result.text == "Hello world"
        assert isinstance(result, DecodedText)

    def test_control_ids_skipped(self, toy_vocab):
        assert decode([13, 5, 40000, 9], toy_vocab).text == "Hello world"

    def test_ids_beyond_vocabulary_skipped(self):
        vocab = Vocabulary(tokens=(b"a", b"b"), special=SpecialTokens(eot=100))
        assert decode([0, 50, 1], vocab).text == "ab"

    def test_repeated_spaces_collapsed(self, toy_vocab):
        # "a" + "   " + " b" renders "a    b"
        assert decode([1, 3, 2], toy_vocab).text == "a b"

    def test_spaces_across_tokens_collapsed(self, toy_vocab):
        assert decode([5, 8, 8, 9], toy_vocab).text == "Hello world"

    def test_tabs_preserved(self, toy_vocab):
        assert decode([1, 4, 4, 10], toy_vocab).text == "a\t\tx"

    def test_split_utf8_character_joined(self, toy_vocab):
        assert decode([6, 7], toy_vocab).text == "é"

    def test_dangling_utf8_replaced(self, toy_vocab):
        assert decode([1, 6, 12, 7], toy_vocab).text == "a\ufffd"

    def test_empty_ids(self, toy_vocab):
        assert decode([], toy_vocab).text == ""

    def test_leading_end_of_text(self, toy_vocab):
        assert decode([12, 5], toy_vocab).text == ""

    def test_numpy_ids(self, toy_vocab):
        ids = np.array([5, 9, 12], dtype=np.int32)
        result = decode(ids, toy_vocab)
        assert result.text == "Hello world"
        assert result.token_count == 2

    def test_english_vocab_golden_prefix(self):
        tokens = [b""] * 50256
        tokens[1770] = b" Mr"
        tokens[13] = b"."
        vocab = Vocabulary(tokens=tuple(tokens))
        assert decode([50257, 50362, 1770, 13, 50256, 1770], vocab).text == " Mr."
