"""
Session Planner for time-boxed study sessions.

Key principles:
1. Due reviews always come first, earliest-overdue first
2. New items fill whatever the due share leaves of the session size
3. Session size is derived from the time budget and the collection's difficulty mix
"""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable

from loguru import logger

from review_engine.core.mastery import Difficulty
from review_engine.delivery.state_store import ReviewRecord, ensure_utc


class SessionType(str, Enum):
    """Which pools a session draws from."""

    REVIEW = "review"
    NEW_WORDS = "new_words"
    MIXED = "mixed"


# Estimated seconds-per-item by difficulty, in ms
REVIEW_TIME_MS: dict[Difficulty, int] = {
    Difficulty.EASY: 3000,
    Difficulty.MEDIUM: 5000,
    Difficulty.HARD: 8000,
    Difficulty.VERY_HARD: 12000,
}
DEFAULT_REVIEW_TIME_MS = 5000


@dataclass
class PlannerConfig:
    """Configuration for session planning."""

    min_session_size: int = 5
    max_session_size: int = 30
    due_share: float = 0.7  # Share of a mixed session reserved for due items
    minutes_per_item: float = 0.75  # Used for the reported estimate (45 s per item)


@dataclass
class StudySession:
    """A prepared study session."""

    item_ids: list[str] = field(default_factory=list)
    estimated_time: int = 0  # minutes
    session_type: SessionType = SessionType.MIXED

    @property
    def total_items(self) -> int:
        return len(self.item_ids)


class SessionPlanner:
    """
    Builds study sessions from a review collection.

    Never mutates the records it is given.
    """

    def __init__(self, config: PlannerConfig | None = None):
        """
        Args:
            config: Planning configuration (uses defaults if None)
        """
        self.config = config or PlannerConfig()

    def due_items(self, records: Iterable[ReviewRecord], now: datetime) -> list[ReviewRecord]:
        """Records with ``due_date <= now``, earliest first; ties keep collection order."""
        now = ensure_utc(now)
        due = [r for r in records if r.due_date <= now]
        # list.sort is stable
        due.sort(key=lambda r: r.due_date)
        return due

    def new_items(self, records: Iterable[ReviewRecord], limit: int = 5) -> list[ReviewRecord]:
        """First ``limit`` records with no successful repetitions, in collection order."""
        if limit <= 0:
            return []
        return [r for r in records if r.repetitions == 0][:limit]

    def average_review_time_ms(self, records: Iterable[ReviewRecord]) -> float:
        """Expected time per item, weighted by the difficulty distribution."""
        counts = Counter(r.difficulty for r in records)
        total = sum(counts.values())
        if total == 0:
            return float(DEFAULT_REVIEW_TIME_MS)

        average = sum(
            REVIEW_TIME_MS.get(difficulty, DEFAULT_REVIEW_TIME_MS) * count / total
            for difficulty, count in counts.items()
        )
        return average or float(DEFAULT_REVIEW_TIME_MS)

    def optimal_session_size(self, records: Iterable[ReviewRecord], target_minutes: float = 15) -> int:
        """
        Number of items that fit the time budget.

        Always within [min_session_size, max_session_size].
        """
        average_ms = self.average_review_time_ms(records)
        try:
            budget_ms = float(target_minutes) * 60 * 1000
        except (TypeError, ValueError):
            budget_ms = 0.0

        if math.isnan(budget_ms) or budget_ms <= 0:
            max_items = 0
        elif math.isinf(budget_ms):
            max_items = self.config.max_session_size
        else:
            max_items = math.floor(budget_ms / average_ms)

        return max(self.config.min_session_size, min(max_items, self.config.max_session_size))

    def plan(
        self,
        records: Iterable[ReviewRecord],
        now: datetime,
        target_minutes: float = 15,
        mode: SessionType | str = SessionType.MIXED,
    ) -> StudySession:
        """
        Build a session for the given time budget.

        Args:
            records: Review collection, in collection order
            now: Reference time for due items
            target_minutes: Time budget
            mode: review, new_words or mixed

        Returns:
            StudySession with the ordered item ids
        """
        records = list(records)
        mode = SessionType(mode)
        size = self.optimal_session_size(records, target_minutes)

        if mode is SessionType.REVIEW:
            selected = [r.item_id for r in self.due_items(records, now)[:size]]
        elif mode is SessionType.NEW_WORDS:
            selected = [r.item_id for r in self.new_items(records, size)]
        else:
            due_quota = math.floor(size * self.config.due_share)
            new_quota = size - due_quota

            selected = [r.item_id for r in self.due_items(records, now)[:due_quota]]
            taken = set(selected)
            fresh = [r.item_id for r in self.new_items(records, len(records)) if r.item_id not in taken]
            selected.extend(fresh[:new_quota])

        session = StudySession(
            item_ids=selected,
            estimated_time=math.ceil(len(selected) * self.config.minutes_per_item),
            session_type=mode,
        )

        logger.debug(
            f"Session planned: {mode.value}, size={size}, "
            f"selected={session.total_items} (~{session.estimated_time} min)"
        )
        return session
