"""
Unit tests for the quality policy that turns evaluations into review responses.
"""

import pytest

from review_engine.assessment.grading import QualityPolicy
from review_engine.assessment.pronunciation import PronunciationEvaluator, ScoreTier
from review_engine.config import Settings


@pytest.fixture
def evaluator():
    return PronunciationEvaluator()


class TestDefaultPolicy:
    @pytest.mark.parametrize(
        "tier, quality",
        [
            (ScoreTier.EXCELLENT, 5),
            (ScoreTier.GOOD, 4),
            (ScoreTier.FAIR, 3),
            (ScoreTier.POOR, 1),
            ("good", 4),
        ],
    )
    def test_tier_table(self, tier, quality):
        assert QualityPolicy().quality_for(tier) == quality

    def test_excellent_attempt(self, evaluator):
        result = evaluator.evaluate("你好", "你好", timing_ms=1200)

        response = QualityPolicy().to_review_response(result)

        assert response.quality == 5
        assert response.was_correct is True
        assert response.response_time == 1200

    def test_fair_attempt_counts_as_correct(self, evaluator):
        result = evaluator.evaluate("你好", "你好吗")

        response = QualityPolicy().to_review_response(result)

        assert result.score == ScoreTier.FAIR
        assert response.quality == 3
        assert response.was_correct is True

    def test_poor_attempt(self, evaluator):
        result = evaluator.evaluate("谢谢", "你好吗")

        response = QualityPolicy().to_review_response(result)

        assert response.quality == 1
        assert response.was_correct is False

    def test_empty_attempt(self, evaluator):
        response = QualityPolicy().to_review_response(evaluator.evaluate("", "你好"))

        assert response.quality == 1
        assert response.was_correct is False

    def test_response_time_override_is_clamped(self, evaluator):
        result = evaluator.evaluate("你好", "你好", timing_ms=1200)

        assert QualityPolicy().to_review_response(result, response_time=3400).response_time == 3400
        assert QualityPolicy().to_review_response(result, response_time=-5).response_time == 0


class TestCustomPolicy:
    def test_from_settings(self, evaluator):
        settings = Settings(quality_fair=2, pass_threshold=70, _env_file=None)
        policy = QualityPolicy.from_settings(settings)

        response = policy.to_review_response(evaluator.evaluate("你好", "你好吗"))

        assert policy.quality_for(ScoreTier.EXCELLENT) == 5
        assert response.quality == 2
        assert response.was_correct is False

    def test_out_of_scale_table_entries_are_clamped(self):
        policy = QualityPolicy(tier_quality={ScoreTier.EXCELLENT: 9})

        assert policy.quality_for(ScoreTier.EXCELLENT) == 5
        assert policy.quality_for(ScoreTier.POOR) == 0

    def test_threshold_is_inclusive(self, evaluator):
        result = evaluator.evaluate("你好", "你好吗")

        assert QualityPolicy(pass_threshold=result.accuracy).is_correct(result)
        assert not QualityPolicy(pass_threshold=result.accuracy + 1).is_correct(result)
