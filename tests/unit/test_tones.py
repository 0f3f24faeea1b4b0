"""
Unit tests for tone identification drills.
"""

import pytest

from review_engine.assessment.tones import TONES, check_tone, extract_tone


class TestExtractTone:
    @pytest.mark.parametrize(
        "pinyin, tone",
        [
            ("mā", 1),
            ("má", 2),
            ("mǎ", 3),
            ("mà", 4),
            ("lǜ", 4),
            ("HǍO", 3),
            ("ma3", 3),
            ("ma2 ", 2),
            ("mā4", 1),
            ("ma5", 1),
            ("ma", 1),
            ("", 1),
            (None, 1),
        ],
    )
    def test_extract(self, pinyin, tone):
        assert extract_tone(pinyin) == tone


class TestCheckTone:
    def test_correct_answer(self):
        result = check_tone(3, "mǎ")

        assert result.is_correct
        assert result.accuracy == 100
        assert result.correct_tone == 3
        assert "third tone" in result.feedback
        assert result.suggestion is None

    def test_slow_correct_answer(self):
        assert check_tone(3, "ma3", response_time_ms=12000).accuracy == 80

    @pytest.mark.parametrize(
        "selected, pinyin, accuracy",
        [(2, "mǎ", 25), (4, "mǎ", 25), (1, "mǎ", 15), (1, "mà", 5)],
    )
    def test_partial_credit_by_distance(self, selected, pinyin, accuracy):
        result = check_tone(selected, pinyin)

        assert not result.is_correct
        assert result.accuracy == accuracy

    def test_wrong_answer_explains_contrast(self):
        result = check_tone(1, "mà")

        assert result.selected_tone == 1
        assert result.correct_tone == 4
        assert "fourth tone" in result.feedback
        assert result.suggestion.startswith("Tone 1 is level")

    def test_out_of_range_selection(self):
        result = check_tone(7, "ma1")

        assert not result.is_correct
        assert result.accuracy == 5
        assert "tone 7" in result.feedback
        assert result.suggestion


class TestToneTable:
    def test_four_tones_with_examples(self):
        assert sorted(TONES) == [1, 2, 3, 4]
        assert "马" in TONES[3].examples
        assert TONES[4].marker == "à"
