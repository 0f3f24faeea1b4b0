"""
Quality Policy: pronunciation results -> SM-2 review responses.

The evaluator only reports how an attempt sounded; this table decides what
that means for scheduling.

Default table:
    excellent -> 5, good -> 4, fair -> 3, poor -> 1
    was_correct when accuracy >= 50 (the lower edge of the fair tier)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from review_engine.config import Settings
from review_engine.delivery.scheduler import clamp_quality
from review_engine.delivery.state_store import ReviewResponse

from .pronunciation import PronunciationResult, ScoreTier


def _default_table() -> dict[ScoreTier, int]:
    return {
        ScoreTier.EXCELLENT: 5,
        ScoreTier.GOOD: 4,
        ScoreTier.FAIR: 3,
        ScoreTier.POOR: 1,
    }


@dataclass
class QualityPolicy:
    """Maps score tiers to quality grades and accuracy to correctness."""

    tier_quality: dict[ScoreTier, int] = field(default_factory=_default_table)
    pass_threshold: int = 50  # accuracy (0-100) counted as a correct answer

    @classmethod
    def from_settings(cls, settings: Settings) -> QualityPolicy:
        return cls(
            tier_quality={
                ScoreTier.EXCELLENT: settings.quality_excellent,
                ScoreTier.GOOD: settings.quality_good,
                ScoreTier.FAIR: settings.quality_fair,
                ScoreTier.POOR: settings.quality_poor,
            },
            pass_threshold=settings.pass_threshold,
        )

    def quality_for(self, tier: ScoreTier | str) -> int:
        return clamp_quality(self.tier_quality.get(ScoreTier(tier), 0))

    def is_correct(self, result: PronunciationResult) -> bool:
        return result.accuracy >= self.pass_threshold

    def to_review_response(
        self,
        result: PronunciationResult,
        response_time: int | None = None,
    ) -> ReviewResponse:
        """
        Build the review response for a scored attempt.

        Args:
            result: Evaluator output
            response_time: Overrides ``result.details.timing`` when given (ms)
        """
        timing = result.details.timing if response_time is None else response_time
        return ReviewResponse(
            quality=self.quality_for(result.score),
            response_time=max(0, int(timing)),
            was_correct=self.is_correct(result),
        )
