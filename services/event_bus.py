"""
Event Bus - Central signal hub for inter-module communication.

All front-end components connect to this single object rather than
directly to the session engine, keeping the engine free of GUI code.
"""

from PySide6.QtCore import QObject, Signal


class EventBus(QObject):
    """
    Central signal hub for Fredagsliga.

    The EventBus acts as a mediator between the engine and any display:
    - SessionStateMachine emits screen, score and clock events
    - NotificationService emits the full-time alarm
    - History/registry changes are announced for the home and stats screens

    Usage:
        # In the app controller
        session.scores_changed.connect(event_bus.scores_changed.emit)

        # In a scoreboard
        event_bus.scores_changed.connect(self._on_scores_changed)
    """

    # ============ Session Lifecycle ============
    screen_changed = Signal(str)        # Screen value
    session_ended = Signal()

    # ============ Match Events ============
    scores_changed = Signal(dict)       # {team id: goals}
    match_recorded = Signal(object)     # MatchRecord
    match_end_feedback = Signal()       # whistle/vibration

    # ============ Timer Events ============
    timer_tick = Signal(int)            # seconds remaining
    timer_paused = Signal()
    timer_resumed = Signal()
    full_time_alarm = Signal(str)       # notification token

    # ============ Data Events ============
    active_teams_changed = Signal(list) # [team id, ...]
    history_cleared = Signal()

    # ============ System Events ============
    system_message = Signal(str, str)   # (level, message) - e.g., ("info", "Match saved")

    def __init__(self):
        super().__init__()

    def emit_pause_state(self, paused: bool) -> None:
        """Translate a pause flag into the paused/resumed signals."""
        if paused:
            self.timer_paused.emit()
        else:
            self.timer_resumed.emit()

    def emit_message(self, level: str, message: str) -> None:
        """Emit a system message (info, warning, error)."""
        self.system_message.emit(level, message)
