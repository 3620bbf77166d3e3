"""
Match Clock - Whole-second countdown for a futsal match.

Counts down from the configured match length, one signal per second,
and fires a single terminal ``expired`` signal when it reaches zero.
"""

import logging

from PySide6.QtCore import QObject, Qt, Signal, QTimer

from config import TIMER_SETTINGS
from engine.exceptions import InvalidDuration

logger = logging.getLogger(__name__)


class MatchClock(QObject):
    """
    Countdown timer with pause/resume.

    Emits second_elapsed once per second while running and not paused,
    and expired exactly once when the countdown hits zero. After expiry
    or cancel() the clock is silent until the next start().

    Usage:
        clock = MatchClock()
        clock.second_elapsed.connect(on_second)
        clock.expired.connect(on_expired)
        clock.start(5 * 60)
    """

    # Signals
    second_elapsed = Signal(int)    # seconds remaining
    expired = Signal()              # countdown reached zero

    def __init__(self, tick_interval_ms: int = TIMER_SETTINGS.tick_interval_ms):
        super().__init__()

        self._total_seconds = 0
        self._remaining_seconds = 0
        self._is_running = False
        self._is_paused = False
        self._has_expired = False

        self._timer = QTimer(self)
        self._timer.setInterval(tick_interval_ms)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.timeout.connect(self._on_tick)

    @property
    def is_running(self) -> bool:
        """Check if the clock is counting down right now."""
        return self._is_running and not self._is_paused

    @property
    def is_paused(self) -> bool:
        return self._is_paused

    @property
    def has_expired(self) -> bool:
        return self._has_expired

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def total_seconds(self) -> int:
        return self._total_seconds

    @property
    def elapsed_seconds(self) -> int:
        return self._total_seconds - self._remaining_seconds

    def start(self, total_seconds: int) -> None:
        """
        Start a fresh countdown.

        Raises:
            InvalidDuration: If total_seconds is not positive
        """
        if total_seconds <= 0:
            raise InvalidDuration(f"Countdown must be positive, got {total_seconds}s")

        self._total_seconds = total_seconds
        self._remaining_seconds = total_seconds
        self._is_running = True
        self._is_paused = False
        self._has_expired = False
        self._timer.start()
        logger.debug("Clock started: %ds", total_seconds)

    def pause(self) -> None:
        """Pause the countdown, keeping the remaining time."""
        if self._is_running and not self._is_paused:
            self._timer.stop()
            self._is_paused = True
            logger.debug("Clock paused at %ds", self._remaining_seconds)

    def resume(self) -> None:
        """Continue a paused countdown from where it stopped."""
        if self._is_running and self._is_paused:
            self._is_paused = False
            self._timer.start()
            logger.debug("Clock resumed at %ds", self._remaining_seconds)

    def cancel(self) -> None:
        """Stop all future signals. Safe in any state."""
        self._timer.stop()
        self._is_running = False
        self._is_paused = False

    def _on_tick(self) -> None:
        """Handle one elapsed second."""
        if not self.is_running:
            return

        self._remaining_seconds = max(0, self._remaining_seconds - 1)
        self.second_elapsed.emit(self._remaining_seconds)

        # A listener may have cancelled us while handling the second
        if not self._is_running:
            return

        if self._remaining_seconds == 0:
            self._timer.stop()
            self._is_running = False
            self._has_expired = True
            logger.debug("Clock expired")
            self.expired.emit()
