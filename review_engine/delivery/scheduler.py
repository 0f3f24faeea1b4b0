"""
SM-2 Spaced Repetition Scheduler.

Implements:
- SM-2 algorithm for review intervals and ease factors
- Response-time grading for typed recall
- Mastery-date prediction

SM-2 Grade Scale:
0 - Complete blackout, wrong response
1 - Incorrect, but upon seeing answer remembered
2 - Incorrect, but answer seemed easy to recall
3 - Correct, but with significant difficulty
4 - Correct, with some hesitation
5 - Correct, with perfect recall

Every call takes the current time from the caller; nothing here reads the clock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any

from loguru import logger

from review_engine.core.mastery import GRADUATION_REPETITIONS, Difficulty, difficulty_of

from .state_store import (
    DEFAULT_EASE_FACTOR,
    MIN_EASE_FACTOR,
    MAX_INTERVAL,
    MIN_INTERVAL,
    ReviewRecord,
    ReviewResponse,
    ensure_utc,
)

MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3


def clamp_quality(quality: Any) -> int:
    """
    Coerce any quality value into the 0-5 integer scale.

    Non-numeric and NaN values become 0, everything else is rounded and clamped.
    """
    try:
        value = float(quality)
    except (TypeError, ValueError):
        return MIN_QUALITY
    if math.isnan(value):
        return MIN_QUALITY
    if math.isinf(value):
        return MAX_QUALITY if value > 0 else MIN_QUALITY
    return int(max(MIN_QUALITY, min(MAX_QUALITY, math.floor(value + 0.5))))


# =============================================================================
# SM-2 Algorithm
# =============================================================================


@dataclass
class SM2Config:
    """Configuration for SM-2 algorithm."""

    initial_easiness: float = DEFAULT_EASE_FACTOR
    minimum_easiness: float = MIN_EASE_FACTOR
    first_interval: int = 1  # Days for first review
    second_interval: int = 6  # Days for second review
    max_interval: int = MAX_INTERVAL  # Upper bound so due dates stay representable
    max_prediction_steps: int = 50


class SM2Scheduler:
    """
    Implements the SM-2 spaced repetition algorithm.

    Each item has:
    - Easiness Factor (EF): How easy the item is (2.5 default, min 1.3)
    - Interval: Days until next review
    - Repetitions: Consecutive successful recalls
    """

    def __init__(self, config: SM2Config | None = None):
        """
        Initialize SM-2 scheduler.

        Args:
            config: Custom configuration (uses defaults if None)
        """
        self.config = config or SM2Config()

    def initialize(self, item_id: str, now: datetime) -> ReviewRecord:
        """Create the record for an item scheduled for the first time (due immediately)."""
        now = ensure_utc(now)
        return ReviewRecord(
            item_id=item_id,
            due_date=now,
            last_reviewed=now,
            ease_factor=self.config.initial_easiness,
            interval=MIN_INTERVAL,
            repetitions=0,
            difficulty=Difficulty.MEDIUM,
        )

    def process_review(
        self,
        record: ReviewRecord,
        response: ReviewResponse,
        now: datetime,
    ) -> ReviewRecord:
        """
        Calculate the next review state for a response.

        ``was_correct`` drives the counters, ``quality`` drives the interval
        and ease factor. The input record is left untouched.

        Args:
            record: Current state for the item
            response: Graded review event
            now: Time the review happened

        Returns:
            Updated ReviewRecord
        """
        now = ensure_utc(now)
        quality = clamp_quality(response.quality)

        total_reviews = record.total_reviews + 1
        correct_reviews = record.correct_reviews
        streak = record.streak
        repetitions = max(0, record.repetitions)

        if response.was_correct:
            correct_reviews += 1
            streak += 1
        else:
            streak = 0
            repetitions = 0

        if quality >= PASSING_QUALITY:
            if repetitions == 0:
                interval = self.config.first_interval
            elif repetitions == 1:
                interval = self.config.second_interval
            else:
                grown = max(MIN_INTERVAL, record.interval) * record.ease_factor
                interval = _round_half_up(min(self.config.max_interval, grown))
            repetitions += 1
        else:
            # Failed - reset to beginning
            repetitions = 0
            interval = self.config.first_interval
        interval = min(self.config.max_interval, max(MIN_INTERVAL, interval))

        # EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02))
        ef_delta = 0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02)
        ease_factor = max(self.config.minimum_easiness, record.ease_factor + ef_delta)

        updated = replace(
            record,
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            due_date=now + timedelta(days=interval),
            last_reviewed=now,
            total_reviews=total_reviews,
            correct_reviews=correct_reviews,
            streak=streak,
        )
        updated = replace(updated, difficulty=difficulty_of(updated))

        logger.debug(
            f"Processed review for {record.item_id}: quality={quality}, "
            f"interval={interval}d, ef={ease_factor:.2f}, reps={repetitions}"
        )
        return updated

    def predict_mastery_date(self, record: ReviewRecord, now: datetime) -> datetime:
        """
        Predict when an item graduates (three consecutive successful repetitions).

        Simulates correct, quality-4 reviews taken on each due date, the first
        at whichever is later of ``now`` and the current due date.
        """
        predicted = record
        at = max(ensure_utc(now), record.due_date)
        steps = 0

        while predicted.repetitions < GRADUATION_REPETITIONS and steps < self.config.max_prediction_steps:
            predicted = self.process_review(
                predicted,
                ReviewResponse(quality=4, response_time=3000, was_correct=True),
                at,
            )
            at = predicted.due_date
            steps += 1

        return predicted.due_date

    def grade_from_response(
        self,
        is_correct: bool,
        response_ms: int,
        expected_ms: int = 10000,
    ) -> int:
        """
        Convert a response to an SM-2 grade.

        Args:
            is_correct: Whether the answer was correct
            response_ms: Time taken to respond
            expected_ms: Expected response time

        Returns:
            Grade 0-5
        """
        if not is_correct:
            # Incorrect responses: 0-2
            if response_ms < expected_ms * 0.5:
                return 2  # Quick wrong = almost knew it
            elif response_ms < expected_ms:
                return 1  # Wrong but remembered when shown
            else:
                return 0  # Complete blackout

        # Correct responses: 3-5
        if response_ms < expected_ms * 0.5:
            return 5  # Quick and correct = perfect recall
        elif response_ms < expected_ms:
            return 4  # Correct with some hesitation
        else:
            return 3  # Correct but struggled


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
