"""
Pronunciation Evaluation.

Scores a recognized-speech (or typed) transcript against the expected text.
No audio is analysed: every signal below is derived from the two strings.

Pipeline:
1. Normalize both strings
2. Character accuracy (best match per expected character)
3. Levenshtein similarity
4. Tone-accuracy proxy (CJK only)
5. Fluency from length ratio and word completeness
6. Weighted composite -> accuracy, tier, feedback and suggestions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from loguru import logger

from .text import character_accuracy, levenshtein_similarity, normalize_text

CJK_LANGUAGE_PREFIXES = ("zh", "ja", "ko")

# Characters sharing the syllable "ma", distinguished only by tone
TONE_SENSITIVE_CHARACTERS = ("妈", "麻", "马", "骂", "吗")
TONE_PENALTY = 0.1


class ScoreTier(str, Enum):
    """Overall pronunciation tier."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @classmethod
    def from_accuracy(cls, accuracy: float) -> ScoreTier:
        """
        Convert a 0-1 composite accuracy to a tier.

        Args:
            accuracy: Composite accuracy between 0 and 1
        """
        if accuracy >= 0.9:
            return cls.EXCELLENT
        elif accuracy >= 0.75:
            return cls.GOOD
        elif accuracy >= 0.5:
            return cls.FAIR
        return cls.POOR


FEEDBACK: dict[ScoreTier, str] = {
    ScoreTier.EXCELLENT: "Excellent! Your pronunciation is very accurate.",
    ScoreTier.GOOD: "Well done! Your pronunciation is quite accurate.",
    ScoreTier.FAIR: "Not bad. Keep practicing to improve.",
    ScoreTier.POOR: "Needs work. Listen to the model and repeat it several times.",
}
RETRY_FEEDBACK = "Nothing was recognized. Please try again, speaking slowly and clearly."

SUGGEST_SLOW_DOWN = "Speak more slowly and clearly"
SUGGEST_MICROPHONE = "Make sure your microphone is working"
SUGGEST_COMPLETE = "Say every word of the phrase"
SUGGEST_TONES = "Practice the tones"
SUGGEST_IMITATE = "Listen to and imitate native speakers"
SUGGEST_MAINTAIN = "Keep practicing to maintain your level"
SUGGEST_RETRY = "Try again"


@dataclass
class PronunciationDetails:
    """Sub-scores of an evaluation (fractions in 0-1, timing in ms)."""

    character_accuracy: float = 0.0
    tone_accuracy: float = 0.0
    fluency: float = 0.0
    timing: int = 0


@dataclass
class PronunciationResult:
    """
    Result of evaluating one attempt.

    ``accuracy`` is a 0-100 percentage, ``confidence`` a 0-1 fraction.
    """

    accuracy: int
    confidence: float
    detected_text: str
    expected_text: str
    feedback: str
    score: ScoreTier
    suggestions: list[str] = field(default_factory=list)
    details: PronunciationDetails = field(default_factory=PronunciationDetails)

    @property
    def passed(self) -> bool:
        """True for the good and excellent tiers."""
        return self.score in (ScoreTier.EXCELLENT, ScoreTier.GOOD)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "accuracy": self.accuracy,
            "confidence": self.confidence,
            "detectedText": self.detected_text,
            "expectedText": self.expected_text,
            "feedback": self.feedback,
            "suggestions": list(self.suggestions),
            "score": self.score.value,
            "details": {
                "characterAccuracy": self.details.character_accuracy,
                "toneAccuracy": self.details.tone_accuracy,
                "fluency": self.details.fluency,
                "timing": self.details.timing,
            },
        }


@dataclass
class EvaluationWeights:
    """Weights of the composite accuracy; they sum to 1."""

    character_accuracy: float = 0.4
    similarity: float = 0.3
    tone_accuracy: float = 0.2
    fluency: float = 0.1


def is_cjk_language(language: str | None) -> bool:
    tag = (language or "").strip().lower()
    return tag.startswith(CJK_LANGUAGE_PREFIXES)


class PronunciationEvaluator:
    """
    Evaluates transcripts against expected text.

    Stateless; ``evaluate`` never raises.
    """

    def __init__(self, weights: EvaluationWeights | None = None):
        self.weights = weights or EvaluationWeights()

    def evaluate(
        self,
        transcript: str | None,
        expected: str | None,
        language: str = "zh-CN",
        timing_ms: int = 0,
    ) -> PronunciationResult:
        """
        Score an attempt.

        Args:
            transcript: What the recognizer heard (or the learner typed)
            expected: Target text
            language: BCP-47 style tag; zh/ja/ko enable the tone proxy
            timing_ms: Response time supplied by the caller

        Returns:
            PronunciationResult
        """
        clean_transcript = normalize_text(transcript)
        clean_expected = normalize_text(expected)
        timing = max(0, int(timing_ms or 0))

        if not clean_transcript or not clean_expected:
            logger.debug("Empty transcript or target, returning zero result")
            return PronunciationResult(
                accuracy=0,
                confidence=0.0,
                detected_text=clean_transcript,
                expected_text=clean_expected,
                feedback=RETRY_FEEDBACK,
                score=ScoreTier.POOR,
                suggestions=[SUGGEST_RETRY, SUGGEST_MICROPHONE],
                details=PronunciationDetails(timing=timing),
            )

        cjk = is_cjk_language(language)
        char_accuracy = character_accuracy(clean_transcript, clean_expected)
        similarity = levenshtein_similarity(clean_transcript, clean_expected)
        tone_accuracy = self._tone_accuracy(clean_transcript, clean_expected, char_accuracy) if cjk else 1.0
        fluency = self._fluency(clean_transcript, clean_expected)

        composite = (
            char_accuracy * self.weights.character_accuracy
            + similarity * self.weights.similarity
            + tone_accuracy * self.weights.tone_accuracy
            + fluency * self.weights.fluency
        )
        composite = min(1.0, max(0.0, composite))
        tier = ScoreTier.from_accuracy(composite)

        result = PronunciationResult(
            accuracy=_to_percent(composite),
            confidence=min(1.0, len(clean_transcript) / len(clean_expected)),
            detected_text=clean_transcript,
            expected_text=clean_expected,
            feedback=FEEDBACK[tier],
            score=tier,
            suggestions=self._suggestions(clean_transcript, clean_expected, composite, cjk),
            details=PronunciationDetails(
                character_accuracy=char_accuracy,
                tone_accuracy=tone_accuracy,
                fluency=fluency,
                timing=timing,
            ),
        )

        logger.debug(
            f"Evaluated {clean_transcript!r} vs {clean_expected!r}: "
            f"{result.accuracy}% ({tier.value})"
        )
        return result

    def _tone_accuracy(self, transcript: str, expected: str, char_accuracy: float) -> float:
        """Character accuracy minus a penalty per tone-sensitive character that went missing."""
        missing = sum(1 for c in TONE_SENSITIVE_CHARACTERS if c in expected and c not in transcript)
        return max(0.0, char_accuracy - missing * TONE_PENALTY)

    def _fluency(self, transcript: str, expected: str) -> float:
        length_ratio = len(transcript) / len(expected)
        length_score = 1.0 if 0.5 < length_ratio < 2.0 else 0.7

        completeness = len(transcript.split(" ")) / len(expected.split(" "))
        return min(1.0, (length_score + min(1.0, completeness)) / 2)

    def _suggestions(self, transcript: str, expected: str, composite: float, cjk: bool) -> list[str]:
        suggestions: list[str] = []

        if composite < 0.5:
            suggestions.append(SUGGEST_SLOW_DOWN)
            suggestions.append(SUGGEST_MICROPHONE)

        if len(transcript) < len(expected) * 0.5:
            suggestions.append(SUGGEST_COMPLETE)

        if composite < 0.8:
            if cjk:
                suggestions.append(SUGGEST_TONES)
            suggestions.append(SUGGEST_IMITATE)

        if not suggestions:
            suggestions.append(SUGGEST_MAINTAIN)

        return suggestions


def _to_percent(fraction: float) -> int:
    """Half-up rounding of a 0-1 fraction to a 0-100 integer."""
    return int(fraction * 100 + 0.5)
