"""
Fredagsliga Services

Persistence, notifications, and the event bus.
"""

from services.event_bus import EventBus
from services.notifications import NotificationService, MatchEndFeedback
from services.storage import KeyValueStore, ACTIVE_TEAMS_KEY, MATCH_HISTORY_KEY

__all__ = [
    "EventBus",
    "NotificationService",
    "MatchEndFeedback",
    "KeyValueStore",
    "ACTIVE_TEAMS_KEY",
    "MATCH_HISTORY_KEY",
]
