"""
Fredagsliga Session Engine

Core session logic: team registry, match clock, state machine,
match history and standings. This module contains no GUI dependencies.
"""

from engine.exceptions import (
    FredagsligaError,
    InvalidSelection,
    InvalidDuration,
    InvalidTransition,
)
from engine.teams import TeamRegistry
from engine.timer import MatchClock
from engine.history import MatchHistoryStore
from engine.session import (
    SessionStateMachine,
    SessionSnapshot,
    Screen,
    Pairing,
    Outcome,
)
from engine.stats import StatsAggregator, TeamStats, StandingRow, HistoryOverview

__all__ = [
    "FredagsligaError",
    "InvalidSelection",
    "InvalidDuration",
    "InvalidTransition",
    "TeamRegistry",
    "MatchClock",
    "MatchHistoryStore",
    "SessionStateMachine",
    "SessionSnapshot",
    "Screen",
    "Pairing",
    "Outcome",
    "StatsAggregator",
    "TeamStats",
    "StandingRow",
    "HistoryOverview",
]
