"""
Fredagsliga Application Controller

Top-level controller that wires together all application components.
"""

import logging
from typing import Optional

from PySide6.QtCore import QObject

from engine.history import MatchHistoryStore
from engine.session import SessionStateMachine
from engine.stats import StatsAggregator
from engine.teams import TeamRegistry
from engine.timer import MatchClock
from models.team import Team
from services.event_bus import EventBus
from services.notifications import NotificationService, MatchEndFeedback
from services.storage import KeyValueStore

logger = logging.getLogger(__name__)


class FredagsligaApp(QObject):
    """
    Top-level application controller.
    Wires together all application components.

    Requires a running QCoreApplication (or QApplication) for the clock
    and alarms to fire.
    """

    def __init__(self, database_url: Optional[str] = None):
        """
        Build the application.

        Args:
            database_url: SQLAlchemy URL for the key-value store
                (default: the per-user database)
        """
        super().__init__()

        # Persistence
        self.store = KeyValueStore.open(database_url)
        self.registry = TeamRegistry(self.store)
        self.history = MatchHistoryStore(self.store)

        # Core services
        self.event_bus = EventBus()
        self.notifier = NotificationService()
        self.feedback = MatchEndFeedback()
        self.clock = MatchClock()

        self.session = SessionStateMachine(
            registry=self.registry,
            history=self.history,
            clock=self.clock,
            notifier=self.notifier,
            feedback=self.feedback,
        )
        self.stats = StatsAggregator(self.history)

        self._wire_event_bus()
        logger.info(
            "Fredagsliga ready: %d active teams, %d matches in history",
            len(self.registry), len(self.history),
        )

    def _wire_event_bus(self) -> None:
        """Forward engine signals to the event bus."""
        self.session.state_changed.connect(self.event_bus.screen_changed.emit)
        self.session.scores_changed.connect(self.event_bus.scores_changed.emit)
        self.session.match_recorded.connect(self.event_bus.match_recorded.emit)
        self.session.session_ended.connect(self.event_bus.session_ended.emit)
        self.session.time_remaining_changed.connect(self.event_bus.timer_tick.emit)
        self.session.pause_changed.connect(self.event_bus.emit_pause_state)

        self.notifier.alarm_fired.connect(self.event_bus.full_time_alarm.emit)
        self.feedback.played.connect(self.event_bus.match_end_feedback.emit)

    def toggle_team(self, team: Team) -> bool:
        """
        Toggle a team in or out of the active set (home screen).

        Returns:
            True if the team is active afterwards
        """
        active = self.registry.toggle(team)
        self.event_bus.active_teams_changed.emit([t.value for t in self.registry.active])
        return active

    def clear_history(self) -> None:
        """Erase the match history. The caller has already asked the user."""
        self.history.clear()
        self.event_bus.history_cleared.emit()
        self.event_bus.emit_message("info", "Match history cleared")

    def shutdown(self) -> None:
        """Stop timers and release the database."""
        self.session.quit()
        self.notifier.cancel_all()
        self.store.close()
