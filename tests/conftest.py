"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from review_engine.delivery.scheduler import SM2Scheduler  # noqa: E402
from review_engine.delivery.state_store import ReviewRecord, StateStore  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (use a temporary SQLite store)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture
def now():
    """A fixed reference time; nothing under test reads the clock."""
    return datetime(2026, 1, 15, 9, 0, tzinfo=UTC)


@pytest.fixture
def scheduler():
    return SM2Scheduler()


@pytest.fixture
def store(tmp_path):
    """A StateStore backed by a throwaway database file."""
    return StateStore(db_path=tmp_path / "state.db")


@pytest.fixture
def make_record(now):
    """Factory for records with arbitrary state."""

    def _make(item_id: str = "w:nihao", **overrides) -> ReviewRecord:
        fields = {"due_date": now, "last_reviewed": now}
        fields.update(overrides)
        return ReviewRecord(item_id=item_id, **fields)

    return _make
