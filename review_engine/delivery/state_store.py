"""
Review State for the engine.

Provides:
- ReviewRecord: SM-2 state and counters for a single learnable item
- ReviewResponse: one graded review event
- export_records / import_records: versioned JSON envelope for backup and sync
- StateStore: SQLite persistence keyed by item id

Database location: ~/.review_engine/state.db (see Settings.db_path)
"""

from __future__ import annotations

import json
import math
import sqlite3
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable

from loguru import logger

from review_engine.core.mastery import Difficulty, MasteryLevel, mastery_of, record_accuracy

if TYPE_CHECKING:
    from review_engine.delivery.scheduler import SM2Scheduler

EXPORT_VERSION = "1.0"
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MIN_INTERVAL = 1
MAX_INTERVAL = 36500  # ~100 years; keeps due dates inside datetime's range


def ensure_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class ReviewResponse:
    """A single review event."""

    quality: int  # 0-5 SM-2 scale, 0 = blackout, 5 = perfect
    response_time: int = 0  # Time to answer in ms
    was_correct: bool = False


@dataclass(frozen=True)
class ReviewRecord:
    """SM-2 state for a single item. Updated only by SM2Scheduler.process_review."""

    item_id: str
    due_date: datetime
    last_reviewed: datetime
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval: int = MIN_INTERVAL  # Days until next review
    repetitions: int = 0  # Consecutive successful recalls
    total_reviews: int = 0
    correct_reviews: int = 0
    streak: int = 0  # Consecutive correct answers
    difficulty: Difficulty = Difficulty.MEDIUM

    @property
    def accuracy(self) -> float:
        """Correct reviews over total reviews (1.0 before the first review)."""
        return record_accuracy(self.total_reviews, self.correct_reviews)

    @property
    def mastery_level(self) -> MasteryLevel:
        return mastery_of(self)

    def is_due(self, now: datetime) -> bool:
        """Check if this item is due for review at ``now``."""
        return self.due_date <= ensure_utc(now)

    def days_overdue(self, now: datetime) -> int:
        """Whole days past the scheduled review date."""
        delta = ensure_utc(now) - self.due_date
        return max(0, delta.days)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the export shape (camelCase keys, ISO-8601 dates)."""
        return {
            "itemId": self.item_id,
            "easeFactor": self.ease_factor,
            "interval": self.interval,
            "repetitions": self.repetitions,
            "dueDate": self.due_date.isoformat(),
            "lastReviewed": self.last_reviewed.isoformat(),
            "totalReviews": self.total_reviews,
            "correctReviews": self.correct_reviews,
            "streak": self.streak,
            "difficulty": self.difficulty.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReviewRecord:
        """
        Build a record from its exported shape.

        Raises:
            KeyError: a required field is missing
            ValueError, TypeError, OverflowError: a field cannot be converted or breaks an invariant
        """
        # Backups from older clients keyed items as "wordId"
        item_id = data["itemId"] if "itemId" in data else data["wordId"]
        if not isinstance(item_id, str) or not item_id:
            raise ValueError("itemId must be a non-empty string")

        ease_factor = float(data["easeFactor"])
        interval = int(data["interval"])
        repetitions = int(data["repetitions"])
        if not math.isfinite(ease_factor) or ease_factor < MIN_EASE_FACTOR:
            raise ValueError(f"easeFactor out of range: {ease_factor}")
        if not MIN_INTERVAL <= interval <= MAX_INTERVAL or repetitions < 0:
            raise ValueError(f"interval must be in 1..{MAX_INTERVAL} and repetitions >= 0")

        total_reviews = int(data.get("totalReviews", 0))
        correct_reviews = int(data.get("correctReviews", 0))
        streak = int(data.get("streak", 0))

        try:
            difficulty = Difficulty(data.get("difficulty", Difficulty.MEDIUM.value))
        except ValueError:
            difficulty = Difficulty.MEDIUM

        return cls(
            item_id=item_id,
            due_date=_parse_timestamp(data["dueDate"]),
            last_reviewed=_parse_timestamp(data["lastReviewed"]),
            ease_factor=ease_factor,
            interval=interval,
            repetitions=repetitions,
            total_reviews=total_reviews,
            correct_reviews=correct_reviews,
            streak=streak,
            difficulty=difficulty,
        )


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str):
        raise TypeError(f"expected ISO-8601 string, got {type(value).__name__}")
    return ensure_utc(datetime.fromisoformat(value))


# =============================================================================
# Export / Import
# =============================================================================


def export_records(records: Iterable[ReviewRecord], now: datetime) -> str:
    """
    Serialize records into the versioned export envelope.

    Args:
        records: Records to export, in collection order
        now: Export timestamp written to ``exportDate``

    Returns:
        JSON string ``{"version", "exportDate", "records"}``
    """
    envelope = {
        "version": EXPORT_VERSION,
        "exportDate": ensure_utc(now).isoformat(),
        "records": [record.to_dict() for record in records],
    }
    return json.dumps(envelope, ensure_ascii=False)


def import_records(payload: str | bytes | dict[str, Any]) -> list[ReviewRecord]:
    """
    Parse an export envelope back into records.

    Never raises: an unreadable payload yields an empty list and any record
    that is missing fields or holds invalid values is skipped.
    """
    if isinstance(payload, (str, bytes)):
        try:
            envelope = json.loads(payload)
        except ValueError as e:
            # JSONDecodeError and UnicodeDecodeError are both ValueError
            logger.warning(f"Import aborted, payload is not valid JSON: {e}")
            return []
    else:
        envelope = payload

    if not isinstance(envelope, dict) or not envelope.get("version"):
        logger.warning("Import aborted, envelope has no version")
        return []

    raw_records = envelope.get("records")
    if not isinstance(raw_records, list):
        logger.warning("Import aborted, envelope has no records array")
        return []

    records: list[ReviewRecord] = []
    for index, raw in enumerate(raw_records):
        if not isinstance(raw, dict):
            logger.warning(f"Skipping record #{index}: not an object")
            continue
        try:
            records.append(ReviewRecord.from_dict(raw))
        except (KeyError, ValueError, TypeError, OverflowError) as e:
            logger.warning(f"Skipping record #{index}: {e!r}")

    logger.debug(f"Imported {len(records)}/{len(raw_records)} records (version {envelope['version']})")
    return records


# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """
    SQLite-backed persistence for review records.

    Each operation opens its own connection. ``review`` performs the
    read-modify-write inside ``BEGIN IMMEDIATE`` so two submissions for the
    same item are applied one after the other, never interleaved.
    """

    DEFAULT_DB_PATH = Path.home() / ".review_engine" / "state.db"

    _COLUMNS = (
        "item_id, ease_factor, interval_days, repetitions, due_date, last_reviewed, "
        "total_reviews, correct_reviews, streak, difficulty"
    )

    def __init__(self, db_path: Path | None = None, scheduler: SM2Scheduler | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to ~/.review_engine/state.db)
            scheduler: Scheduler used by ``review`` (creates default if None)
        """
        from review_engine.delivery.scheduler import SM2Scheduler

        self.db_path = Path(db_path) if db_path else self.DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.scheduler = scheduler or SM2Scheduler()
        self._init_schema()

        logger.debug(f"StateStore initialized at {self.db_path}")

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path), timeout=10.0, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS review_records (
                    item_id TEXT PRIMARY KEY,
                    ease_factor REAL NOT NULL DEFAULT 2.5,
                    interval_days INTEGER NOT NULL DEFAULT 1,
                    repetitions INTEGER NOT NULL DEFAULT 0,
                    due_date TEXT NOT NULL,
                    last_reviewed TEXT NOT NULL,
                    total_reviews INTEGER NOT NULL DEFAULT 0,
                    correct_reviews INTEGER NOT NULL DEFAULT 0,
                    streak INTEGER NOT NULL DEFAULT 0,
                    difficulty TEXT NOT NULL DEFAULT 'medium'
                )
            """)
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_review_records_due ON review_records(due_date)"
            )
        finally:
            conn.close()

    # -------------------------------------------------------------------------
    # Row mapping
    # -------------------------------------------------------------------------

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> ReviewRecord:
        return ReviewRecord(
            item_id=row["item_id"],
            due_date=ensure_utc(datetime.fromisoformat(row["due_date"])),
            last_reviewed=ensure_utc(datetime.fromisoformat(row["last_reviewed"])),
            ease_factor=float(row["ease_factor"]),
            interval=int(row["interval_days"]),
            repetitions=int(row["repetitions"]),
            total_reviews=int(row["total_reviews"]),
            correct_reviews=int(row["correct_reviews"]),
            streak=int(row["streak"]),
            difficulty=Difficulty(row["difficulty"]),
        )

    @staticmethod
    def _upsert(conn: sqlite3.Connection, record: ReviewRecord) -> None:
        # ON CONFLICT keeps the original rowid, so all() stays in insertion order
        conn.execute(
            f"""
            INSERT INTO review_records ({StateStore._COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(item_id) DO UPDATE SET
                ease_factor = excluded.ease_factor,
                interval_days = excluded.interval_days,
                repetitions = excluded.repetitions,
                due_date = excluded.due_date,
                last_reviewed = excluded.last_reviewed,
                total_reviews = excluded.total_reviews,
                correct_reviews = excluded.correct_reviews,
                streak = excluded.streak,
                difficulty = excluded.difficulty
            """,
            (
                record.item_id,
                record.ease_factor,
                record.interval,
                record.repetitions,
                record.due_date.isoformat(),
                record.last_reviewed.isoformat(),
                record.total_reviews,
                record.correct_reviews,
                record.streak,
                record.difficulty.value,
            ),
        )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def get(self, item_id: str) -> ReviewRecord | None:
        conn = self._connect()
        try:
            row = conn.execute(
                f"SELECT {self._COLUMNS} FROM review_records WHERE item_id = ?",
                (item_id,),
            ).fetchone()
            return self._row_to_record(row) if row else None
        finally:
            conn.close()

    def get_or_initialize(self, item_id: str, now: datetime) -> ReviewRecord:
        """Return the stored record, creating an immediately-due one if missing."""
        record = self.get(item_id)
        if record is None:
            record = self.scheduler.initialize(item_id, now)
            self.save(record)
        return record

    def save(self, record: ReviewRecord) -> None:
        conn = self._connect()
        try:
            self._upsert(conn, record)
        finally:
            conn.close()

    def all(self) -> list[ReviewRecord]:
        """All records in insertion order."""
        conn = self._connect()
        try:
            rows = conn.execute(
                f"SELECT {self._COLUMNS} FROM review_records ORDER BY rowid"
            ).fetchall()
            return [self._row_to_record(row) for row in rows]
        finally:
            conn.close()

    def review(self, item_id: str, response: ReviewResponse, now: datetime) -> ReviewRecord:
        """
        Apply a review to one item and persist the result.

        Unknown items are initialized first. The whole read-modify-write runs
        under an immediate write lock.
        """
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    f"SELECT {self._COLUMNS} FROM review_records WHERE item_id = ?",
                    (item_id,),
                ).fetchone()
                current = (
                    self._row_to_record(row)
                    if row
                    else self.scheduler.initialize(item_id, now)
                )
                updated = self.scheduler.process_review(current, response, now)
                self._upsert(conn, updated)
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
            return updated
        finally:
            conn.close()

    def export_json(self, now: datetime) -> str:
        return export_records(self.all(), now)

    def import_json(self, payload: str | bytes | dict[str, Any]) -> int:
        """
        Merge an export envelope into the store.

        Returns:
            Number of records written
        """
        records = import_records(payload)
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                for record in records:
                    self._upsert(conn, record)
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()

        logger.info(f"Imported {len(records)} records into {self.db_path}")
        return len(records)
