"""
Notifications - Match-end alarm and feedback services.

NotificationService fires a one-shot alarm after a given number of
seconds; the session uses it so the phone buzzes at full time even if
nobody is looking at the clock. MatchEndFeedback is the fire-and-forget
whistle played when a match ends.
"""

import logging
import uuid

from PySide6.QtCore import QObject, Qt, Signal, QTimer

logger = logging.getLogger(__name__)


class NotificationService(QObject):
    """
    One-shot alarms backed by single-shot QTimers.

    Usage:
        notifier = NotificationService()
        notifier.alarm_fired.connect(show_full_time_banner)
        token = notifier.schedule(300)
        notifier.cancel(token)
    """

    alarm_fired = Signal(str)   # token

    def __init__(self):
        super().__init__()
        self._pending: dict[str, QTimer] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def is_pending(self, token: str) -> bool:
        return token in self._pending

    def schedule(self, after_seconds: int) -> str:
        """
        Schedule an alarm.

        Returns:
            Token identifying the alarm, for cancel()
        """
        token = uuid.uuid4().hex
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.setTimerType(Qt.TimerType.PreciseTimer)
        timer.setInterval(max(0, after_seconds) * 1000)
        timer.timeout.connect(lambda: self._fire(token))

        self._pending[token] = timer
        timer.start()
        logger.debug("Alarm %s scheduled in %ds", token, after_seconds)
        return token

    def cancel(self, token: str) -> None:
        """Cancel an alarm. Unknown or already-fired tokens are ignored."""
        timer = self._pending.pop(token, None)
        if timer is None:
            return
        timer.stop()
        timer.deleteLater()
        logger.debug("Alarm %s cancelled", token)

    def cancel_all(self) -> None:
        for token in list(self._pending):
            self.cancel(token)

    def _fire(self, token: str) -> None:
        timer = self._pending.pop(token, None)
        if timer is None:
            return
        timer.deleteLater()
        logger.info("Full-time alarm fired")
        self.alarm_fired.emit(token)


class MatchEndFeedback(QObject):
    """
    Fire-and-forget match-end feedback.

    Front-ends connect ``played`` to whatever sound or vibration the
    platform offers.
    """

    played = Signal()

    def __init__(self):
        super().__init__()
        self.play_count = 0

    def notify_match_end(self) -> None:
        self.play_count += 1
        logger.debug("Match-end feedback")
        self.played.emit()
