"""
Review delivery: scheduling and persistence.

Components:
- SM2Scheduler: Spaced repetition algorithm
- ReviewRecord / ReviewResponse: Per-item state and review events
- StateStore: SQLite persistence with per-item serialized updates
- export_records / import_records: Versioned JSON backup format
- cli: Terminal interface (``python -m review_engine.delivery``)
"""

from .scheduler import SM2Config, SM2Scheduler, clamp_quality
from .state_store import (
    ReviewRecord,
    ReviewResponse,
    StateStore,
    export_records,
    import_records,
)

__all__ = [
    # Scheduling
    "SM2Config",
    "SM2Scheduler",
    "clamp_quality",
    # State
    "ReviewRecord",
    "ReviewResponse",
    "StateStore",
    "export_records",
    "import_records",
]
