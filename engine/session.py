"""
Session State Machine - Core orchestration for a Fredagsliga session.

Drives a session from team selection through timed matches, sudden
death, results and the winner-stays-on rotation. Runs independently of
any GUI; front-ends follow along through Qt signals.
"""

import logging
from collections import deque
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Callable, ClassVar, Iterator, Optional, Union

from PySide6.QtCore import QObject, Signal

from config import SESSION_SETTINGS
from engine.exceptions import InvalidSelection, InvalidTransition
from engine.history import MatchHistoryStore
from engine.teams import TeamRegistry
from engine.timer import MatchClock
from models.schemas import MatchRecord
from models.team import Team, empty_scores

logger = logging.getLogger(__name__)


class Screen(Enum):
    """The screens a session moves through."""
    SELECTING_TEAMS = "selecting_teams"
    SETTING_DURATION = "setting_duration"
    IN_PROGRESS = "in_progress"
    TIE_BREAK = "tie_break"
    RESULT = "result"


@dataclass(frozen=True)
class Pairing:
    """The two teams on the pitch."""
    first: Team
    second: Team

    def __post_init__(self):
        if self.first == self.second:
            raise InvalidSelection(f"A team cannot play itself: {self.first.value}")

    def __iter__(self) -> Iterator[Team]:
        return iter((self.first, self.second))

    def __contains__(self, team: object) -> bool:
        return team == self.first or team == self.second

    def opponent_of(self, team: Team) -> Team:
        if team == self.first:
            return self.second
        if team == self.second:
            return self.first
        raise InvalidSelection(f"{team.value} is not playing")


@dataclass(frozen=True)
class Outcome:
    """Winner and loser of a concluded match."""
    winner: Team
    loser: Team


# ============ Screen States ============

@dataclass(frozen=True)
class SelectingTeams:
    screen: ClassVar[Screen] = Screen.SELECTING_TEAMS


@dataclass(frozen=True)
class SettingDuration:
    pair: Pairing
    screen: ClassVar[Screen] = Screen.SETTING_DURATION


@dataclass(frozen=True)
class InProgress:
    pair: Pairing
    remaining_seconds: int
    paused: bool = False
    screen: ClassVar[Screen] = Screen.IN_PROGRESS


@dataclass(frozen=True)
class TieBreak:
    pair: Pairing
    screen: ClassVar[Screen] = Screen.TIE_BREAK


@dataclass(frozen=True)
class Result:
    pair: Pairing
    outcome: Outcome
    screen: ClassVar[Screen] = Screen.RESULT


SessionState = Union[SelectingTeams, SettingDuration, InProgress, TieBreak, Result]


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for display."""
    screen: Screen
    pair: Optional[Pairing]
    waiting: tuple[Team, ...]
    duration_minutes: int
    remaining_seconds: int
    paused: bool
    scores: dict[Team, int]
    outcome: Optional[Outcome] = None


class SessionStateMachine(QObject):
    """
    Orchestrates one play session.

    Every operation validates first and raises before touching any
    state, so a rejected call leaves the session exactly as it was.
    Expiry signals arriving outside a running match are ignored.

    Collaborators:
        registry: Supplies and locks the active team set
        history: Receives a MatchRecord for every concluded match
        clock: Countdown driving tick()/on_expire()
        notifier: Optional one-shot alarm service (schedule/cancel)
        feedback: Optional match-end sound/vibration service
    """

    # Signals
    state_changed = Signal(str)             # Screen value
    scores_changed = Signal(dict)           # {team id: goals}
    time_remaining_changed = Signal(int)    # seconds
    pause_changed = Signal(bool)            # paused flag
    match_recorded = Signal(object)         # MatchRecord
    session_ended = Signal()                # queue ran dry or quit

    MIN_DURATION = SESSION_SETTINGS.min_duration_minutes
    MAX_DURATION = SESSION_SETTINGS.max_duration_minutes

    def __init__(self, registry: TeamRegistry, history: MatchHistoryStore,
                 clock: Optional[MatchClock] = None, notifier=None, feedback=None,
                 now: Optional[Callable[[], datetime]] = None):
        super().__init__()
        self.registry = registry
        self.history = history
        self.clock = clock if clock is not None else MatchClock()
        self.notifier = notifier
        self.feedback = feedback
        self._now = now or (lambda: datetime.now().astimezone())

        self._state: SessionState = SelectingTeams()
        self._waiting: deque[Team] = deque()
        self._scores: dict[Team, int] = empty_scores()
        self._duration_minutes: int = SESSION_SETTINGS.default_duration_minutes
        self._alarm_token = None

        self.clock.second_elapsed.connect(self._on_clock_second)
        self.clock.expired.connect(self.on_expire)

    # ============ Read Access ============

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def screen(self) -> Screen:
        return self._state.screen

    @property
    def pair(self) -> Optional[Pairing]:
        return getattr(self._state, "pair", None)

    @property
    def waiting(self) -> list[Team]:
        """Teams waiting to play, front of the queue first."""
        return list(self._waiting)

    @property
    def scores(self) -> dict[Team, int]:
        return dict(self._scores)

    @property
    def duration_minutes(self) -> int:
        return self._duration_minutes

    @property
    def remaining_seconds(self) -> int:
        if isinstance(self._state, InProgress):
            return self._state.remaining_seconds
        return 0

    @property
    def paused(self) -> bool:
        return isinstance(self._state, InProgress) and self._state.paused

    @property
    def outcome(self) -> Optional[Outcome]:
        return getattr(self._state, "outcome", None)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            screen=self.screen,
            pair=self.pair,
            waiting=tuple(self._waiting),
            duration_minutes=self._duration_minutes,
            remaining_seconds=self.remaining_seconds,
            paused=self.paused,
            scores=self.scores,
            outcome=self.outcome,
        )

    # ============ Internal Helpers ============

    def _require(self, *screens: Screen, action: str) -> None:
        if self.screen not in screens:
            raise InvalidTransition(f"Cannot {action} from state: {self.screen.value}")

    def _set_state(self, new_state: SessionState) -> None:
        changed = new_state.screen != self._state.screen
        self._state = new_state
        if changed:
            logger.info("Session -> %s", new_state.screen.value)
            self.state_changed.emit(new_state.screen.value)

    def _emit_scores(self) -> None:
        self.scores_changed.emit({team.value: goals for team, goals in self._scores.items()})

    def _schedule_alarm(self, seconds: int) -> None:
        """Schedule the expiry alarm, replacing any outstanding one."""
        self._cancel_alarm()
        if self.notifier is not None:
            self._alarm_token = self.notifier.schedule(seconds)

    def _cancel_alarm(self) -> None:
        if self._alarm_token is not None and self.notifier is not None:
            self.notifier.cancel(self._alarm_token)
        self._alarm_token = None

    def _reset_session(self) -> None:
        self._waiting.clear()
        self._scores = empty_scores()
        self.registry.locked = False
        self._set_state(SelectingTeams())
        self._emit_scores()
        self.session_ended.emit()

    def _check_scoring(self, team: Team) -> InProgress:
        self._require(Screen.IN_PROGRESS, action="change the score")
        if self._state.paused:
            raise InvalidTransition("Cannot change the score while paused")
        if team not in self._state.pair:
            raise InvalidSelection(f"{team.value} is not playing")
        return self._state

    # ============ Transitions ============

    def select_pair(self, team_a: Team, team_b: Team) -> None:
        """
        Choose the two teams for the opening match.

        The remaining active teams queue up in their registration order.

        Raises:
            InvalidSelection: Same team twice, or a team outside the active set
            InvalidTransition: Not on the team selection screen
        """
        self._require(Screen.SELECTING_TEAMS, action="select teams")
        if team_a == team_b:
            raise InvalidSelection(f"Pick two different teams, got {team_a.value} twice")
        for team in (team_a, team_b):
            if team not in self.registry:
                raise InvalidSelection(f"{team.value} is not an active team")

        pair = Pairing(team_a, team_b)
        self._waiting = deque(t for t in self.registry.active if t not in pair)
        self.registry.locked = True
        logger.info(
            "Pair selected: %s vs %s, waiting: %s",
            team_a.value, team_b.value, [t.value for t in self._waiting],
        )
        self._set_state(SettingDuration(pair))

    def set_duration(self, minutes: int) -> int:
        """
        Set the match length, clamped to the allowed range.
        Ignored unless on the duration screen.

        Returns:
            The effective duration in minutes
        """
        if self.screen != Screen.SETTING_DURATION:
            logger.debug("Ignoring duration change in state %s", self.screen.value)
            return self._duration_minutes

        self._duration_minutes = max(self.MIN_DURATION, min(self.MAX_DURATION, int(minutes)))
        return self._duration_minutes

    def start_match(self) -> None:
        """Kick off: reset scores, start the clock and schedule the expiry alarm."""
        self._require(Screen.SETTING_DURATION, action="start match")

        total_seconds = self._duration_minutes * 60
        pair = self._state.pair

        self.clock.start(total_seconds)
        self._scores = empty_scores()
        self._set_state(InProgress(pair, remaining_seconds=total_seconds))
        self._schedule_alarm(total_seconds)

        logger.info(
            "Match started: %s vs %s, %d min",
            pair.first.value, pair.second.value, self._duration_minutes,
        )
        self._emit_scores()
        self.time_remaining_changed.emit(total_seconds)

    def record_goal(self, team: Team) -> int:
        """
        Credit a goal to a playing team.

        Returns:
            The team's new score
        """
        self._check_scoring(team)
        self._scores[team] += 1
        self._emit_scores()
        return self._scores[team]

    def revoke_goal(self, team: Team) -> int:
        """
        Take back a goal. A score of zero stays at zero.

        Returns:
            The team's new score
        """
        self._check_scoring(team)
        if self._scores[team] > 0:
            self._scores[team] -= 1
            self._emit_scores()
        return self._scores[team]

    def toggle_pause(self) -> bool:
        """
        Pause or resume the match.

        Pausing cancels the expiry alarm; resuming schedules a new one for
        exactly the time left on the clock.

        Returns:
            True if the match is now paused
        """
        self._require(Screen.IN_PROGRESS, action="pause")
        state = self._state

        if not state.paused:
            self._cancel_alarm()
            self.clock.pause()
        else:
            self.clock.resume()
            self._schedule_alarm(state.remaining_seconds)

        self._state = replace(state, paused=not state.paused)
        logger.info("Match %s at %ds", "paused" if self._state.paused else "resumed",
                    state.remaining_seconds)
        self.pause_changed.emit(self._state.paused)
        return self._state.paused

    def _on_clock_second(self, _remaining: int) -> None:
        self.tick()

    def tick(self) -> None:
        """Count down one second; expire the match when time runs out."""
        if not isinstance(self._state, InProgress) or self._state.paused:
            return

        remaining = max(0, self._state.remaining_seconds - 1)
        self._state = replace(self._state, remaining_seconds=remaining)
        self.time_remaining_changed.emit(remaining)

        if remaining == 0:
            self.on_expire()

    def on_expire(self) -> None:
        """
        Handle full time. Level scores go to sudden death; otherwise the
        higher score wins and the match is recorded.
        """
        if self.screen != Screen.IN_PROGRESS:
            logger.debug("Ignoring stale expiry in state %s", self.screen.value)
            return

        self.clock.cancel()
        self._cancel_alarm()
        if self.feedback is not None:
            self.feedback.notify_match_end()

        pair = self._state.pair
        first_score = self._scores[pair.first]
        second_score = self._scores[pair.second]

        if first_score == second_score:
            logger.info("Full time %d-%d: sudden death", first_score, second_score)
            self._set_state(TieBreak(pair))
            return

        if first_score > second_score:
            self._conclude(pair, winner=pair.first, loser=pair.second)
        else:
            self._conclude(pair, winner=pair.second, loser=pair.first)

    def resolve_tie_break(self, winning_team: Team) -> None:
        """
        Settle sudden death. The recorded scores stay level; the deciding
        goal is not credited.
        """
        self._require(Screen.TIE_BREAK, action="resolve tie-break")
        pair = self._state.pair
        if winning_team not in pair:
            raise InvalidSelection(f"{winning_team.value} is not playing")

        self._conclude(pair, winner=winning_team, loser=pair.opponent_of(winning_team))

    def _conclude(self, pair: Pairing, winner: Team, loser: Team) -> None:
        record = MatchRecord(
            timestamp=self._now(),
            winner=winner,
            loser=loser,
            winner_score=self._scores[winner],
            loser_score=self._scores[loser],
            duration_minutes=self._duration_minutes,
        )
        self.history.append(record)
        self._set_state(Result(pair, Outcome(winner, loser)))
        self.match_recorded.emit(record)

    def advance_to_next_match(self) -> None:
        """
        Rotate: winner stays on, the front of the queue comes in, the
        loser joins the back. With nobody waiting the session ends.
        """
        self._require(Screen.RESULT, action="advance to next match")
        outcome = self._state.outcome

        if not self._waiting:
            logger.info("No teams waiting; back to team selection")
            self._reset_session()
            return

        next_opponent = self._waiting.popleft()
        self._waiting.append(outcome.loser)
        logger.info(
            "Next match: %s vs %s, waiting: %s",
            outcome.winner.value, next_opponent.value, [t.value for t in self._waiting],
        )
        self._set_state(SettingDuration(Pairing(outcome.winner, next_opponent)))

    def quit(self) -> None:
        """Abandon the session. Scores of an unfinished match are discarded."""
        if self.screen == Screen.SELECTING_TEAMS:
            return

        self.clock.cancel()
        self._cancel_alarm()
        logger.info("Session quit from %s", self.screen.value)
        self._reset_session()
