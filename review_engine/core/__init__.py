"""
Core Module - Shared derived classifications.

Components:
- mastery: MasteryLevel and Difficulty projections over review state

Design Principle:
The delivery, study and assessment packages import these enums from
review_engine.core rather than re-deriving them.
"""

from review_engine.core.mastery import (
    Difficulty,
    MasteryLevel,
    calculate_difficulty,
    classify_mastery,
    difficulty_of,
    mastery_of,
    record_accuracy,
)

__all__ = [
    "Difficulty",
    "MasteryLevel",
    "calculate_difficulty",
    "classify_mastery",
    "difficulty_of",
    "mastery_of",
    "record_accuracy",
]
