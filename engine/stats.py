"""
Stats Aggregator - Standings derived from the match history.

Everything here is recomputed from the records on every call. Nothing
is cached and nothing is written back.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional

from engine.history import MatchHistoryStore
from models.schemas import MatchRecord
from models.team import Team


RecordFilter = Callable[[MatchRecord], bool]


@dataclass
class TeamStats:
    """Win/loss and goal tallies for one team."""
    wins: int = 0
    losses: int = 0
    goals_for: int = 0
    goals_against: int = 0
    matches_played: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against

    @property
    def win_rate(self) -> int:
        return win_rate(self)


@dataclass(frozen=True)
class StandingRow:
    """One line of the league table."""
    position: int
    team: Team
    stats: TeamStats


@dataclass(frozen=True)
class HistoryOverview:
    """Headline numbers for a set of matches."""
    total_matches: int
    average_duration_minutes: int
    average_goals_per_match: int


def _round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded to nearest, halves away from zero (non-negative inputs)."""
    return (2 * numerator + denominator) // (2 * denominator)


def win_rate(stats: TeamStats) -> int:
    """Wins as a whole percentage of matches played. 0 if none played."""
    if stats.matches_played == 0:
        return 0
    return _round_half_up(stats.wins * 100, stats.matches_played)


def same_day_as(moment: datetime) -> RecordFilter:
    """
    Filter for records played on the same local calendar day as ``moment``.

    Aware timestamps are converted to local time before comparing;
    naive ones are taken as local already.
    """
    day = _local_date(moment)

    def _filter(record: MatchRecord) -> bool:
        return _local_date(record.timestamp) == day

    return _filter


def _local_date(moment: datetime):
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


def aggregate(records: Iterable[MatchRecord],
              record_filter: Optional[RecordFilter] = None) -> dict[Team, TeamStats]:
    """
    Tally wins, losses and goals per team.

    Args:
        records: Match records in any order
        record_filter: Optional predicate selecting which records count

    Returns:
        Stats for every catalog team, in catalog order; teams without
        matches are present with all zeros
    """
    stats = {team: TeamStats() for team in Team}

    for record in records:
        if record_filter is not None and not record_filter(record):
            continue

        winner = stats[record.winner]
        winner.wins += 1
        winner.goals_for += record.winner_score
        winner.goals_against += record.loser_score
        winner.matches_played += 1

        loser = stats[record.loser]
        loser.losses += 1
        loser.goals_for += record.loser_score
        loser.goals_against += record.winner_score
        loser.matches_played += 1

    return stats


def standings(stats: dict[Team, TeamStats]) -> list[StandingRow]:
    """
    Rank teams that have played: most wins first, then best goal
    difference. Full ties keep catalog order.
    """
    played = [team for team in Team if stats[team].matches_played > 0]
    # sorted() is stable, so catalog order breaks full ties
    ranked = sorted(
        played,
        key=lambda team: (-stats[team].wins, -stats[team].goal_difference),
    )
    return [
        StandingRow(position=i + 1, team=team, stats=stats[team])
        for i, team in enumerate(ranked)
    ]


def overview(records: Iterable[MatchRecord],
             record_filter: Optional[RecordFilter] = None) -> HistoryOverview:
    """Match count, average length and average goals per match."""
    selected = [r for r in records if record_filter is None or record_filter(r)]
    if not selected:
        return HistoryOverview(0, 0, 0)

    count = len(selected)
    return HistoryOverview(
        total_matches=count,
        average_duration_minutes=_round_half_up(sum(r.duration_minutes for r in selected), count),
        average_goals_per_match=_round_half_up(sum(r.goal_total for r in selected), count),
    )


class StatsAggregator:
    """
    Read-only statistics over a MatchHistoryStore.

    Usage:
        stats = StatsAggregator(history)
        for row in stats.standings(today=True):
            print(row.position, row.team.display_name, row.stats.wins)
    """

    def __init__(self, history: MatchHistoryStore,
                 now: Optional[Callable[[], datetime]] = None):
        self.history = history
        self._now = now or (lambda: datetime.now().astimezone())

    def _filter(self, today: bool) -> Optional[RecordFilter]:
        return same_day_as(self._now()) if today else None

    def aggregate(self, record_filter: Optional[RecordFilter] = None) -> dict[Team, TeamStats]:
        return aggregate(self.history.all(), record_filter)

    def team_stats(self, today: bool = False) -> dict[Team, TeamStats]:
        return aggregate(self.history.all(), self._filter(today))

    def standings(self, today: bool = False) -> list[StandingRow]:
        return standings(self.team_stats(today))

    def overview(self, today: bool = False) -> HistoryOverview:
        return overview(self.history.all(), self._filter(today))
