"""
Shared fixtures for the Fredagsliga test suite.
"""

import sys
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from PySide6.QtCore import QCoreApplication

from models.schemas import MatchRecord
from models.team import Team


# Create QCoreApplication for Qt event loop (required for QTimer)
@pytest.fixture(scope="session")
def qapp():
    """Create a QCoreApplication instance for the test session."""
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication(sys.argv)
    yield app


@pytest.fixture
def store():
    """A fresh in-memory key-value store."""
    from services.storage import KeyValueStore

    kv = KeyValueStore.open("sqlite://")
    yield kv
    kv.close()


@pytest.fixture
def notifier():
    """Notification service double handing out numbered tokens."""
    mock = MagicMock()
    mock.schedule.side_effect = [f"alarm-{i}" for i in range(1, 100)]
    return mock


FIXED_NOW = datetime(2026, 10, 16, 19, 30, tzinfo=timezone.utc)


def make_record(winner: Team, loser: Team, winner_score: int, loser_score: int,
                duration: int = 5, timestamp: datetime = FIXED_NOW) -> MatchRecord:
    return MatchRecord(
        timestamp=timestamp,
        winner=winner,
        loser=loser,
        winner_score=winner_score,
        loser_score=loser_score,
        duration_minutes=duration,
    )


def numbered_records(count: int) -> list[MatchRecord]:
    """``count`` records, one minute apart, oldest first."""
    return [
        make_record(Team.TURKIS, Team.ROD, 1 + i % 5, 0,
                    timestamp=FIXED_NOW + timedelta(minutes=i))
        for i in range(count)
    ]
