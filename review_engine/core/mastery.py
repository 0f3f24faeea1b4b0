"""
Core Mastery Module.

Derived classifications computed from a review record's numeric state.
Neither value is authoritative: both are pure projections recomputed
whenever the record changes.

Design:
- MasteryLevel: new / learning / review / mastered, from repetitions and ease
- Difficulty: easy / medium / hard / very_hard, from ease, streak and accuracy
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from review_engine.delivery.state_store import ReviewRecord

# Repetitions needed before an item leaves the learning phase
GRADUATION_REPETITIONS = 3
MASTERY_MIN_EASE = 2.0


class MasteryLevel(str, Enum):
    """
    Mastery level of a single item.

    NEW: never successfully recalled since the last failure
    LEARNING: one or two successful repetitions
    REVIEW: graduated, but the ease factor is still low
    MASTERED: graduated with a comfortable ease factor
    """

    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return self.value.title()

    @property
    def color(self) -> str:
        """Rich color for CLI display."""
        return {
            MasteryLevel.NEW: "dim",
            MasteryLevel.LEARNING: "yellow",
            MasteryLevel.REVIEW: "cyan",
            MasteryLevel.MASTERED: "green",
        }[self]


class Difficulty(str, Enum):
    """Perceived difficulty of an item, used for reporting and time estimates."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    VERY_HARD = "very_hard"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


def classify_mastery(repetitions: int, ease_factor: float) -> MasteryLevel:
    """
    Classify mastery from the SM-2 state.

    Args:
        repetitions: Consecutive successful repetitions
        ease_factor: Current ease factor

    Returns:
        Corresponding MasteryLevel
    """
    if repetitions <= 0:
        return MasteryLevel.NEW
    if repetitions < GRADUATION_REPETITIONS:
        return MasteryLevel.LEARNING
    if ease_factor >= MASTERY_MIN_EASE:
        return MasteryLevel.MASTERED
    return MasteryLevel.REVIEW


def record_accuracy(total_reviews: int, correct_reviews: int) -> float:
    """Observed accuracy (0-1); an item with no reviews counts as fully accurate."""
    if total_reviews <= 0:
        return 1.0
    return correct_reviews / total_reviews


def calculate_difficulty(
    ease_factor: float,
    streak: int,
    total_reviews: int,
    correct_reviews: int,
) -> Difficulty:
    """
    Derive the difficulty bucket.

    Clauses are evaluated top-down; the first match wins.
    """
    accuracy = record_accuracy(total_reviews, correct_reviews)

    if ease_factor >= 2.2 and streak >= 3 and accuracy >= 0.8:
        return Difficulty.EASY

    if ease_factor <= 1.5 or (accuracy < 0.4 and total_reviews >= 3):
        return Difficulty.VERY_HARD

    if ease_factor <= 1.8 or streak == 0 or accuracy < 0.6:
        return Difficulty.HARD

    return Difficulty.MEDIUM


def difficulty_of(record: ReviewRecord) -> Difficulty:
    """Difficulty projection for a record."""
    return calculate_difficulty(
        record.ease_factor,
        record.streak,
        record.total_reviews,
        record.correct_reviews,
    )


def mastery_of(record: ReviewRecord) -> MasteryLevel:
    """Mastery projection for a record."""
    return classify_mastery(record.repetitions, record.ease_factor)
