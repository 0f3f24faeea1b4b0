"""
Text comparison helpers for spoken and typed answers.

All functions operate on normalized text (see ``normalize_text``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from rapidfuzz.distance import Levenshtein

# Anything that is not a letter, digit (ideographs included) or whitespace
_PUNCTUATION_RE = re.compile(r"[^\w\s]|_")
_WHITESPACE_RE = re.compile(r"\s+")

CORRECT_CHARACTER_THRESHOLD = 0.8
CONFUSION_CREDIT = 0.7

# Characters commonly swapped by speech recognizers (homophones / near-homophones)
COMMON_CONFUSIONS: dict[str, tuple[str, ...]] = {
    "他": ("她", "它"),
    "的": ("得", "地"),
    "在": ("再",),
    "做": ("作",),
    "那": ("哪",),
    "这": ("者",),
}


@dataclass(frozen=True)
class CharacterMatch:
    """Best transcript match for one expected character."""

    expected: str
    detected: str
    similarity: float

    @property
    def is_correct(self) -> bool:
        return self.similarity > CORRECT_CHARACTER_THRESHOLD


def normalize_text(text: str | None) -> str:
    """Trim, lowercase, strip punctuation and collapse whitespace."""
    if not text:
        return ""
    cleaned = _PUNCTUATION_RE.sub("", text.strip().lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def character_similarity(a: str, b: str) -> float:
    """1.0 for identical characters, partial credit for known confusions, else 0."""
    if a == b:
        return 1.0
    if b in COMMON_CONFUSIONS.get(a, ()) or a in COMMON_CONFUSIONS.get(b, ()):
        return CONFUSION_CREDIT
    return 0.0


def match_characters(transcript: str, expected: str) -> list[CharacterMatch]:
    """
    Match every expected character against its best counterpart anywhere in the transcript.

    Position is ignored; a character repeated in ``expected`` may match the same
    transcript character more than once.
    """
    matches: list[CharacterMatch] = []
    candidates = set(transcript)

    for expected_char in expected:
        best_char = ""
        best_similarity = 0.0
        for candidate in candidates:
            similarity = character_similarity(candidate, expected_char)
            if similarity > best_similarity:
                best_similarity = similarity
                best_char = candidate
                if similarity == 1.0:
                    break
        matches.append(CharacterMatch(expected_char, best_char, best_similarity))

    return matches


def character_accuracy(transcript: str, expected: str) -> float:
    """Share of expected characters matched above the correctness threshold."""
    if not expected or not transcript:
        return 0.0
    matches = match_characters(transcript, expected)
    return sum(1 for m in matches if m.is_correct) / len(expected)


def levenshtein_similarity(a: str, b: str) -> float:
    """(max_len - edit_distance) / max_len; two empty strings are identical."""
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - Levenshtein.distance(a, b)) / longest
