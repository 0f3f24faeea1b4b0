"""
Mastery Calculator for review collections.

Reduces a set of review records to progress statistics:
- per-item mastery level (new / learning / review / mastered)
- collection totals, due count and average accuracy
- ease-factor average and difficulty distribution

This is a pure computation module with no I/O; "now" is always supplied.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from review_engine.core.mastery import Difficulty, MasteryLevel, mastery_of
from review_engine.delivery.state_store import DEFAULT_EASE_FACTOR, ReviewRecord, ensure_utc


@dataclass
class ReviewStats:
    """Aggregate statistics over a review collection."""

    total_words: int
    due_words: int
    mastered_words: int
    average_accuracy: float  # 0-100, over all reviews ever taken
    average_ease_factor: float
    difficulty_distribution: dict[str, int] = field(default_factory=dict)
    mastery_distribution: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the camelCase keys used by progress displays."""
        return {
            "totalWords": self.total_words,
            "dueWords": self.due_words,
            "masteredWords": self.mastered_words,
            "averageAccuracy": self.average_accuracy,
            "averageEaseFactor": self.average_ease_factor,
            "difficultyDistribution": dict(self.difficulty_distribution),
            "masteryDistribution": dict(self.mastery_distribution),
        }


class MasteryCalculator:
    """
    Classifies items and summarizes collections.

    Stateless and side-effect free.
    """

    def classify(self, record: ReviewRecord) -> MasteryLevel:
        """Mastery level of a single record."""
        return mastery_of(record)

    def stats(self, records: Iterable[ReviewRecord], now: datetime) -> ReviewStats:
        """
        Summarize a collection of records.

        Args:
            records: Review records to summarize
            now: Reference time for the due count

        Returns:
            ReviewStats
        """
        records = list(records)
        now = ensure_utc(now)

        levels = Counter(self.classify(r).value for r in records)
        difficulties = Counter(r.difficulty.value for r in records)

        total_reviews = sum(r.total_reviews for r in records)
        correct_reviews = sum(r.correct_reviews for r in records)
        average_accuracy = (correct_reviews / total_reviews) * 100 if total_reviews > 0 else 0.0

        average_ease = (
            sum(r.ease_factor for r in records) / len(records) if records else DEFAULT_EASE_FACTOR
        )

        return ReviewStats(
            total_words=len(records),
            due_words=sum(1 for r in records if r.due_date <= now),
            mastered_words=levels.get(MasteryLevel.MASTERED.value, 0),
            average_accuracy=average_accuracy,
            average_ease_factor=average_ease,
            difficulty_distribution={d.value: difficulties[d.value] for d in Difficulty if difficulties[d.value]},
            mastery_distribution={m.value: levels[m.value] for m in MasteryLevel if levels[m.value]},
        )
