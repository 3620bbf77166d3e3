"""
Unit tests for the SessionStateMachine.

Tests cover team selection, scoring, pause/resume, full time, sudden
death, the winner-stays-on rotation and quitting.
"""

import pytest
from unittest.mock import MagicMock, call

from conftest import FIXED_NOW
from engine.exceptions import InvalidSelection, InvalidTransition
from engine.history import MatchHistoryStore
from engine.session import Outcome, Pairing, Screen, SessionStateMachine
from engine.teams import TeamRegistry
from engine.timer import MatchClock
from models.team import Team

A, B, C, D = Team.TURKIS, Team.ORANSJE, Team.GRONN, Team.SVART


def run_out_clock(machine: SessionStateMachine) -> None:
    """Tick until full time."""
    for _ in range(machine.remaining_seconds):
        machine.tick()


def assert_rotation_complete(machine: SessionStateMachine) -> None:
    pair = list(machine.pair) if machine.pair else []
    assert len(pair) + len(machine.waiting) == len(machine.registry)
    assert set(pair) | set(machine.waiting) == set(machine.registry.active)
    assert not set(pair) & set(machine.waiting)


class SessionTestBase:
    """Builds a machine over teams A, B, C, D with test doubles."""

    active = [A, B, C, D]

    @pytest.fixture(autouse=True)
    def _machine(self, qapp, notifier):
        self.registry = TeamRegistry(active=self.active)
        self.history = MatchHistoryStore()
        self.clock = MagicMock()
        self.notifier = notifier
        self.feedback = MagicMock()
        self.machine = SessionStateMachine(
            registry=self.registry,
            history=self.history,
            clock=self.clock,
            notifier=self.notifier,
            feedback=self.feedback,
            now=lambda: FIXED_NOW,
        )

    def start(self, first=A, second=B, minutes=5) -> None:
        self.machine.select_pair(first, second)
        self.machine.set_duration(minutes)
        self.machine.start_match()

    def play(self, goals: dict) -> None:
        for team, count in goals.items():
            for _ in range(count):
                self.machine.record_goal(team)


class TestTeamSelection(SessionTestBase):
    """Tests for select_pair()."""

    def test_initial_state_is_selecting_teams(self):
        """A new session waits for a pair."""
        assert self.machine.screen == Screen.SELECTING_TEAMS
        assert self.machine.pair is None
        assert self.machine.waiting == []

    def test_select_pair_moves_to_duration(self):
        """Selecting two teams moves on to the duration screen."""
        self.machine.select_pair(A, B)

        assert self.machine.screen == Screen.SETTING_DURATION
        assert self.machine.pair == Pairing(A, B)

    def test_waiting_queue_keeps_registration_order(self):
        """Teams not picked queue up in active-set order."""
        self.machine.select_pair(C, A)

        assert self.machine.waiting == [B, D]
        assert_rotation_complete(self.machine)

    def test_same_team_twice_rejected(self):
        """A team cannot be picked against itself."""
        with pytest.raises(InvalidSelection):
            self.machine.select_pair(A, A)

        assert self.machine.screen == Screen.SELECTING_TEAMS

    def test_inactive_team_rejected(self):
        """Teams outside the active set cannot play."""
        with pytest.raises(InvalidSelection):
            self.machine.select_pair(A, Team.ROD)

        assert self.machine.screen == Screen.SELECTING_TEAMS
        assert self.machine.waiting == []

    def test_select_pair_twice_rejected(self):
        """Selection is only possible on the selection screen."""
        self.machine.select_pair(A, B)

        with pytest.raises(InvalidTransition):
            self.machine.select_pair(C, D)

        assert self.machine.pair == Pairing(A, B)

    def test_selection_locks_registry(self):
        """The active set is frozen once a session is underway."""
        self.machine.select_pair(A, B)

        assert self.registry.locked
        with pytest.raises(InvalidTransition):
            self.registry.add(Team.ROD)


class TestDuration(SessionTestBase):
    """Tests for set_duration()."""

    def test_default_duration(self):
        assert self.machine.duration_minutes == 5

    @pytest.mark.parametrize("requested,expected", [
        (0, 1),
        (-4, 1),
        (1, 1),
        (12, 12),
        (30, 30),
        (45, 30),
    ])
    def test_duration_is_clamped(self, requested, expected):
        """Durations are clamped to 1-30 minutes."""
        self.machine.select_pair(A, B)

        assert self.machine.set_duration(requested) == expected
        assert self.machine.duration_minutes == expected

    def test_duration_ignored_outside_duration_screen(self):
        """Changing the duration elsewhere has no effect."""
        assert self.machine.set_duration(20) == 5

        self.start()
        assert self.machine.set_duration(20) == 5
        assert self.machine.duration_minutes == 5


class TestStartMatch(SessionTestBase):
    """Tests for start_match()."""

    def test_start_requires_duration_screen(self):
        """Matches cannot start before a pair is chosen."""
        with pytest.raises(InvalidTransition):
            self.machine.start_match()

        self.clock.start.assert_not_called()
        self.notifier.schedule.assert_not_called()

    def test_start_runs_clock_and_schedules_alarm(self):
        """Kick-off starts the clock and books the full-time alarm."""
        self.start(minutes=5)

        assert self.machine.screen == Screen.IN_PROGRESS
        assert self.machine.remaining_seconds == 300
        assert not self.machine.paused
        self.clock.start.assert_called_once_with(300)
        self.notifier.schedule.assert_called_once_with(300)

    def test_start_resets_every_score(self):
        """All scores are zeroed at kick-off, not just the playing pair's."""
        self.start()
        self.play({A: 2})
        run_out_clock(self.machine)
        self.machine.advance_to_next_match()

        self.machine.start_match()

        assert all(goals == 0 for goals in self.machine.scores.values())
        assert set(self.machine.scores) == set(Team)


class TestScoring(SessionTestBase):
    """Tests for record_goal() and revoke_goal()."""

    def test_record_goal_increments(self):
        self.start()

        assert self.machine.record_goal(A) == 1
        assert self.machine.record_goal(A) == 2
        assert self.machine.scores[A] == 2
        assert self.machine.scores[B] == 0

    def test_goal_outside_match_rejected(self):
        """Goals can only be scored during a match."""
        self.machine.select_pair(A, B)

        with pytest.raises(InvalidTransition):
            self.machine.record_goal(A)

    def test_goal_while_paused_rejected(self):
        """The scoreboard is frozen while paused."""
        self.start()
        self.machine.toggle_pause()

        with pytest.raises(InvalidTransition):
            self.machine.record_goal(A)
        with pytest.raises(InvalidTransition):
            self.machine.revoke_goal(A)

        assert self.machine.scores[A] == 0

    def test_goal_for_team_not_playing_rejected(self):
        """Only the two teams on the pitch can score."""
        self.start()

        with pytest.raises(InvalidSelection):
            self.machine.record_goal(C)

        assert self.machine.scores[C] == 0

    def test_revoke_goal_decrements(self):
        self.start()
        self.play({A: 3})

        assert self.machine.revoke_goal(A) == 2

    def test_revoke_never_below_zero(self):
        """Revoking at zero is a no-op, whatever the sequence."""
        self.start()
        sequence = [
            ("revoke", A), ("goal", A), ("revoke", A), ("revoke", A),
            ("revoke", B), ("goal", B), ("goal", B), ("revoke", B),
            ("revoke", B), ("revoke", B), ("goal", A),
        ]

        for action, team in sequence:
            if action == "goal":
                self.machine.record_goal(team)
            else:
                self.machine.revoke_goal(team)
            assert all(goals >= 0 for goals in self.machine.scores.values())

        assert self.machine.scores[A] == 1
        assert self.machine.scores[B] == 0

    def test_scores_changed_signal(self):
        """Score changes are broadcast keyed by team id."""
        received = []
        self.machine.scores_changed.connect(received.append)
        self.start()

        self.machine.record_goal(B)

        assert received[-1]["oransje"] == 1
        assert received[-1]["turkis"] == 0


class TestPauseResume(SessionTestBase):
    """Tests for toggle_pause() and tick()."""

    def test_pause_requires_match(self):
        with pytest.raises(InvalidTransition):
            self.machine.toggle_pause()

    def test_pause_cancels_alarm_and_clock(self):
        """Pausing cancels the pending alarm before anything else."""
        self.start()

        assert self.machine.toggle_pause() is True

        assert self.machine.paused
        self.notifier.cancel.assert_called_once_with("alarm-1")
        self.clock.pause.assert_called_once()

    def test_resume_reschedules_for_remaining_time(self):
        """The new alarm matches the clock, not the full match length."""
        self.start(minutes=5)
        for _ in range(40):
            self.machine.tick()
        self.machine.toggle_pause()

        assert self.machine.toggle_pause() is False

        assert self.notifier.schedule.call_args_list == [call(300), call(260)]
        self.clock.resume.assert_called_once()

    def test_tick_ignored_while_paused(self):
        self.start()
        self.machine.toggle_pause()

        for _ in range(10):
            self.machine.tick()

        assert self.machine.remaining_seconds == 300

    def test_pause_resume_preserves_exact_remaining(self):
        """300s, 40s elapse, pause, resume, 10s elapse: 250s left."""
        self.start(minutes=5)
        for _ in range(40):
            self.machine.tick()
        assert self.machine.remaining_seconds == 260

        self.machine.toggle_pause()
        self.machine.toggle_pause()
        for _ in range(10):
            self.machine.tick()

        assert self.machine.remaining_seconds == 250

    def test_tick_outside_match_ignored(self):
        self.machine.tick()

        assert self.machine.screen == Screen.SELECTING_TEAMS


class TestFullTime(SessionTestBase):
    """Tests for on_expire() and resolve_tie_break()."""

    def test_higher_score_wins(self):
        """Full time with a leader records the match and shows the result."""
        self.start(minutes=7)
        self.play({A: 1, B: 4})

        run_out_clock(self.machine)

        assert self.machine.screen == Screen.RESULT
        assert self.machine.outcome == Outcome(winner=B, loser=A)
        record = self.history.all()[0]
        assert record.winner == B
        assert record.loser == A
        assert record.winner_score == 4
        assert record.loser_score == 1
        assert record.duration_minutes == 7
        assert record.timestamp == FIXED_NOW

    def test_full_time_stops_clock_alarm_and_plays_feedback(self):
        self.start()
        self.play({A: 1})

        run_out_clock(self.machine)

        self.clock.cancel.assert_called()
        self.notifier.cancel.assert_called_once_with("alarm-1")
        self.feedback.notify_match_end.assert_called_once()

    def test_level_scores_go_to_sudden_death(self):
        """3-3 at full time is a tie-break, not a result."""
        self.start()
        self.play({A: 3, B: 3})

        run_out_clock(self.machine)

        assert self.machine.screen == Screen.TIE_BREAK
        assert self.machine.scores[A] == 3
        assert self.machine.scores[B] == 3
        assert len(self.history) == 0

    def test_resolve_tie_break_records_level_scores(self):
        """The sudden-death winner is recorded with the full-time scores."""
        self.start()
        self.play({A: 3, B: 3})
        run_out_clock(self.machine)

        self.machine.resolve_tie_break(A)

        assert self.machine.screen == Screen.RESULT
        assert self.machine.outcome == Outcome(winner=A, loser=B)
        record = self.history.all()[0]
        assert (record.winner, record.loser) == (A, B)
        assert (record.winner_score, record.loser_score) == (3, 3)
        assert self.machine.scores[A] == 3

    def test_tie_break_does_not_replay_feedback(self):
        """Feedback fires once per match, at full time only."""
        self.start()
        run_out_clock(self.machine)

        self.machine.resolve_tie_break(B)

        self.feedback.notify_match_end.assert_called_once()

    def test_tie_break_requires_playing_team(self):
        self.start()
        run_out_clock(self.machine)

        with pytest.raises(InvalidSelection):
            self.machine.resolve_tie_break(C)

        assert self.machine.screen == Screen.TIE_BREAK

    def test_tie_break_requires_tie_break_state(self):
        self.start()

        with pytest.raises(InvalidTransition):
            self.machine.resolve_tie_break(A)

    def test_stale_expiry_ignored(self):
        """An expiry arriving after the result changes nothing."""
        self.start()
        self.play({A: 2})
        run_out_clock(self.machine)

        self.machine.on_expire()
        self.machine.on_expire()

        assert self.machine.screen == Screen.RESULT
        assert len(self.history) == 1
        self.feedback.notify_match_end.assert_called_once()

    def test_expiry_during_tie_break_ignored(self):
        self.start()
        run_out_clock(self.machine)

        self.machine.on_expire()

        assert self.machine.screen == Screen.TIE_BREAK
        assert len(self.history) == 0

    def test_match_recorded_signal(self):
        received = []
        self.machine.match_recorded.connect(received.append)
        self.start()
        self.play({A: 1})

        run_out_clock(self.machine)

        assert len(received) == 1
        assert received[0].winner == A


class TestRotation(SessionTestBase):
    """Tests for advance_to_next_match()."""

    def win(self, team: Team) -> None:
        self.machine.start_match()
        self.play({team: 1})
        run_out_clock(self.machine)

    def test_advance_requires_result(self):
        self.start()

        with pytest.raises(InvalidTransition):
            self.machine.advance_to_next_match()

    def test_winner_stays_loser_to_back(self):
        """Winner stays on, front of the queue comes in, loser joins the back."""
        self.machine.select_pair(A, B)
        self.win(B)

        self.machine.advance_to_next_match()

        assert self.machine.screen == Screen.SETTING_DURATION
        assert self.machine.pair == Pairing(B, C)
        assert self.machine.waiting == [D, A]

    def test_rotation_cycle_when_one_team_always_wins(self):
        """Opponents arrive strictly in turn: C, D, B, C, D, B."""
        self.machine.select_pair(A, B)
        opponents = []

        for _ in range(6):
            self.win(A)
            self.machine.advance_to_next_match()
            opponents.append(self.machine.pair.second)

        assert opponents == [C, D, B, C, D, B]

    def test_every_transition_preserves_team_count(self):
        """Pair plus queue always covers the active set exactly."""
        self.machine.select_pair(B, D)
        assert_rotation_complete(self.machine)

        for winner_index in [0, 1, 1, 0, 1]:
            self.machine.start_match()
            assert_rotation_complete(self.machine)
            self.play({list(self.machine.pair)[winner_index]: 2})
            run_out_clock(self.machine)
            assert_rotation_complete(self.machine)
            self.machine.advance_to_next_match()
            assert_rotation_complete(self.machine)

    def test_duration_carries_over(self):
        """The next match defaults to the previous match length."""
        self.machine.select_pair(A, B)
        self.machine.set_duration(8)
        self.win(A)

        self.machine.advance_to_next_match()

        assert self.machine.duration_minutes == 8


class TestTwoTeamSession(SessionTestBase):
    """A session with nobody waiting."""

    active = [A, B]

    def test_empty_queue_ends_session(self):
        """With no challengers the session goes back to team selection."""
        ended = MagicMock()
        self.machine.session_ended.connect(ended)
        self.start()
        self.play({A: 1})
        run_out_clock(self.machine)

        self.machine.advance_to_next_match()

        assert self.machine.screen == Screen.SELECTING_TEAMS
        assert self.machine.pair is None
        assert not self.registry.locked
        ended.assert_called_once()
        assert len(self.history) == 1


class TestQuit(SessionTestBase):
    """Tests for quit()."""

    def test_quit_mid_match_discards_scores(self):
        """Quitting never writes a record."""
        self.start()
        self.play({A: 4, B: 1})

        self.machine.quit()

        assert self.history.all() == []
        assert self.machine.screen == Screen.SELECTING_TEAMS
        assert self.machine.pair is None
        assert self.machine.waiting == []
        assert all(goals == 0 for goals in self.machine.scores.values())

    def test_quit_cancels_clock_and_alarm(self):
        self.start()

        self.machine.quit()

        self.clock.cancel.assert_called_once()
        self.notifier.cancel.assert_called_once_with("alarm-1")

    def test_quit_while_paused_does_not_cancel_twice(self):
        """The alarm was already cancelled by the pause."""
        self.start()
        self.machine.toggle_pause()

        self.machine.quit()

        self.notifier.cancel.assert_called_once_with("alarm-1")

    def test_quit_unlocks_registry(self):
        self.start()

        self.machine.quit()

        assert not self.registry.locked
        self.registry.add(Team.ROD)
        assert Team.ROD in self.registry

    def test_quit_from_tie_break_and_result(self):
        self.start()
        run_out_clock(self.machine)
        self.machine.quit()
        assert self.machine.screen == Screen.SELECTING_TEAMS

        self.start()
        self.play({B: 1})
        run_out_clock(self.machine)
        self.machine.quit()
        assert self.machine.screen == Screen.SELECTING_TEAMS
        assert len(self.history) == 1

    def test_quit_when_idle_is_noop(self):
        ended = MagicMock()
        self.machine.session_ended.connect(ended)

        self.machine.quit()

        ended.assert_not_called()
        self.clock.cancel.assert_not_called()


class TestSnapshotAndSignals(SessionTestBase):
    """Tests for snapshot() and state_changed."""

    def test_snapshot_during_match(self):
        self.start(C, D, minutes=3)
        self.play({D: 2})
        self.machine.tick()

        snap = self.machine.snapshot()

        assert snap.screen == Screen.IN_PROGRESS
        assert snap.pair == Pairing(C, D)
        assert snap.waiting == (A, B)
        assert snap.duration_minutes == 3
        assert snap.remaining_seconds == 179
        assert snap.scores[D] == 2
        assert snap.outcome is None

    def test_state_changed_sequence(self):
        screens = []
        self.machine.state_changed.connect(screens.append)

        self.start()
        run_out_clock(self.machine)
        self.machine.resolve_tie_break(A)
        self.machine.advance_to_next_match()

        assert screens == [
            "setting_duration",
            "in_progress",
            "tie_break",
            "result",
            "setting_duration",
        ]


class TestWithRealClock:
    """The machine driven by a real MatchClock."""

    def test_clock_drives_match_to_result(self, qapp, notifier):
        clock = MatchClock()
        history = MatchHistoryStore()
        machine = SessionStateMachine(
            registry=TeamRegistry(active=[A, B, C]),
            history=history,
            clock=clock,
            notifier=notifier,
            now=lambda: FIXED_NOW,
        )
        machine.select_pair(A, B)
        machine.set_duration(1)
        machine.start_match()
        machine.record_goal(B)

        for _ in range(30):
            clock._on_tick()
        machine.toggle_pause()
        for _ in range(30):
            clock._on_tick()
        assert machine.remaining_seconds == 30

        machine.toggle_pause()
        for _ in range(30):
            clock._on_tick()

        assert machine.screen == Screen.RESULT
        assert machine.outcome == Outcome(winner=B, loser=A)
        assert not clock.is_running
        assert len(history) == 1
        assert notifier.schedule.call_args_list == [call(60), call(30)]
