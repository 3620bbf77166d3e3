"""
Tests for the pydantic schemas.
"""

import pytest
from pydantic import ValidationError

from conftest import FIXED_NOW
from models.schemas import ActiveTeams, MatchRecord
from models.team import Team


def record_data(**overrides) -> dict:
    data = {
        "timestamp": FIXED_NOW.isoformat(),
        "winner": "turkis",
        "loser": "rød",
        "winnerScore": 3,
        "loserScore": 1,
        "durationMinutes": 5,
    }
    data.update(overrides)
    return data


class TestMatchRecord:
    """Validation rules for MatchRecord."""

    def test_parses_camel_case(self):
        record = MatchRecord.model_validate(record_data())

        assert record.winner == Team.TURKIS
        assert record.loser == Team.ROD
        assert record.winner_score == 3
        assert record.goal_total == 4

    def test_records_are_immutable(self):
        record = MatchRecord.model_validate(record_data())

        with pytest.raises(ValidationError):
            record.winner_score = 10

    @pytest.mark.parametrize("overrides", [
        {"loser": "turkis"},
        {"winner": "lilla"},
        {"winnerScore": -1},
        {"loserScore": -2},
        {"winnerScore": 1, "loserScore": 2},
        {"durationMinutes": 0},
        {"durationMinutes": 31},
    ])
    def test_invalid_records_rejected(self, overrides):
        with pytest.raises(ValidationError):
            MatchRecord.model_validate(record_data(**overrides))

    def test_level_scores_allowed(self):
        """Sudden-death winners are recorded with level scores."""
        record = MatchRecord.model_validate(record_data(winnerScore=2, loserScore=2))

        assert record.winner_score == record.loser_score


class TestActiveTeams:
    """Validation rules for ActiveTeams."""

    def test_valid(self):
        teams = ActiveTeams(teams=["svart", "blå"])

        assert teams.teams == [Team.SVART, Team.BLA]
        assert teams.to_json() == ["svart", "blå"]

    @pytest.mark.parametrize("teams", [[], ["svart"], ["svart", "svart"]])
    def test_invalid(self, teams):
        with pytest.raises(ValidationError):
            ActiveTeams(teams=teams)
