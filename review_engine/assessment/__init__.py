"""
Assessment Module.

Turns a learner's attempt into a normalized quality signal:
- PronunciationEvaluator: transcript vs. expected text scoring
- QualityPolicy: score tier -> SM-2 quality grade and correctness
- Tone drills: pinyin tone extraction and tone identification checks
"""

from review_engine.assessment.grading import QualityPolicy
from review_engine.assessment.pronunciation import (
    EvaluationWeights,
    PronunciationDetails,
    PronunciationEvaluator,
    PronunciationResult,
    ScoreTier,
)
from review_engine.assessment.tones import TONES, ToneCheckResult, check_tone, extract_tone

__all__ = [
    "EvaluationWeights",
    "PronunciationDetails",
    "PronunciationEvaluator",
    "PronunciationResult",
    "QualityPolicy",
    "ScoreTier",
    "TONES",
    "ToneCheckResult",
    "check_tone",
    "extract_tone",
]
