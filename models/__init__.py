"""
Fredagsliga Data Models

Team catalog, persisted-record schemas, and the SQLAlchemy key-value table.
"""

from models.base import (
    Base,
    create_db_engine,
    make_session_factory,
    get_session,
    init_db,
)
from models.kv_entry import KeyValueEntry
from models.team import Team, TEAM_DISPLAY, empty_scores
from models.schemas import MatchRecord, ActiveTeams

__all__ = [
    "Base",
    "create_db_engine",
    "make_session_factory",
    "get_session",
    "init_db",
    "KeyValueEntry",
    "Team",
    "TEAM_DISPLAY",
    "empty_scores",
    "MatchRecord",
    "ActiveTeams",
]
