"""
Mandarin tone identification drills.

The learner hears a syllable and picks its tone (1-4); the answer is checked
against the tone carried by the pinyin, either as a tone mark or a trailing digit.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

TONE_MARKS: dict[int, tuple[str, ...]] = {
    1: ("ā", "ē", "ī", "ō", "ū", "ǖ"),  # high level
    2: ("á", "é", "í", "ó", "ú", "ǘ"),  # rising
    3: ("ǎ", "ě", "ǐ", "ǒ", "ǔ", "ǚ"),  # falling-rising
    4: ("à", "è", "ì", "ò", "ù", "ǜ"),  # falling
}

_TONE_DIGIT_RE = re.compile(r"(\d)$")

SLOW_RESPONSE_MS = 10000


@dataclass(frozen=True)
class ToneInfo:
    number: int
    name: str
    contour: str
    marker: str
    examples: tuple[str, ...] = field(default_factory=tuple)


TONES: dict[int, ToneInfo] = {
    1: ToneInfo(1, "First Tone", "high and level", "ā", ("妈", "天", "高", "书")),
    2: ToneInfo(2, "Second Tone", "rising from mid to high", "á", ("麻", "人", "来", "十")),
    3: ToneInfo(3, "Third Tone", "dipping, falls then rises", "ǎ", ("马", "好", "我", "水")),
    4: ToneInfo(4, "Fourth Tone", "sharply falling from high to low", "à", ("骂", "是", "爱", "大")),
}

# Keyed by (selected, correct)
_CONTRASTS: dict[tuple[int, int], str] = {
    (1, 2): "Tone 1 stays high and flat; tone 2 climbs. Listen for the pitch moving up.",
    (1, 3): "Tone 1 holds its pitch; tone 3 dips down before rising again.",
    (1, 4): "Tone 1 is level; tone 4 drops hard and short.",
    (2, 1): "Tone 2 rises; tone 1 stays level at the top of your range.",
    (2, 3): "Tone 2 rises straight up; tone 3 dips first.",
    (2, 4): "Tone 2 goes up while tone 4 goes down, they are opposites.",
    (3, 1): "Tone 3 moves down and up; tone 1 is simple and steady.",
    (3, 2): "Tone 3 curves; tone 2 rises in a straight line.",
    (3, 4): "Tone 3 falls then rises; tone 4 only falls.",
    (4, 1): "Tone 4 falls quickly; tone 1 keeps a steady high pitch.",
    (4, 2): "Tone 4 falls and tone 2 rises, they move in opposite directions.",
    (4, 3): "Tone 4 falls straight down; tone 3 falls and then comes back up.",
}
_DEFAULT_CONTRAST = "Listen closely and focus on how the pitch changes."


@dataclass
class ToneCheckResult:
    """Outcome of one tone identification answer."""

    is_correct: bool
    selected_tone: int
    correct_tone: int
    accuracy: int  # 0-100
    feedback: str
    suggestion: str | None = None


def extract_tone(pinyin: str) -> int:
    """
    Tone number (1-4) of a pinyin syllable.

    Tone marks win over a trailing digit; anything unrecognized counts as tone 1.
    """
    clean = (pinyin or "").strip().lower()

    for tone, marks in TONE_MARKS.items():
        if any(mark in clean for mark in marks):
            return tone

    match = _TONE_DIGIT_RE.search(clean)
    if match:
        tone = int(match.group(1))
        return tone if 1 <= tone <= 4 else 1

    return 1


def check_tone(selected_tone: int, pinyin: str, response_time_ms: int = 0) -> ToneCheckResult:
    """
    Grade a tone identification answer.

    Args:
        selected_tone: Tone picked by the learner
        pinyin: Pinyin of the syllable that was played
        response_time_ms: Time to answer

    Returns:
        ToneCheckResult
    """
    correct_tone = extract_tone(pinyin)
    is_correct = selected_tone == correct_tone

    if is_correct:
        accuracy = 100
        if response_time_ms > SLOW_RESPONSE_MS:
            accuracy = 80
        feedback = f"Correct! That is the {TONES[correct_tone].name.lower()}."
        suggestion = None
    else:
        distance = abs(selected_tone - correct_tone)
        if distance == 1:
            accuracy = 25
        elif distance == 2:
            accuracy = 15
        else:
            accuracy = 5

        correct_info = TONES[correct_tone]
        selected_info = TONES.get(selected_tone)
        selected_name = selected_info.name.lower() if selected_info else f"tone {selected_tone}"
        feedback = (
            f"You chose the {selected_name}, but this is the {correct_info.name.lower()} "
            f"({correct_info.contour})."
        )
        suggestion = _CONTRASTS.get((selected_tone, correct_tone), _DEFAULT_CONTRAST)

    return ToneCheckResult(
        is_correct=is_correct,
        selected_tone=selected_tone,
        correct_tone=correct_tone,
        accuracy=accuracy,
        feedback=feedback,
        suggestion=suggestion,
    )
