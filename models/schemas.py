"""
Pydantic schemas for data validation.

These describe the JSON stored under the persisted keys.
"""

from datetime import datetime

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from config import SESSION_SETTINGS
from models.team import Team


# ============ Match History ============

class MatchRecord(BaseModel):
    """
    A completed match, as persisted in the history log.

    Serialized with camelCase keys. Logs written by the old phone app
    used ``date`` and ``duration``; both are accepted on read.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime = Field(
        ...,
        validation_alias=AliasChoices("timestamp", "date"),
    )
    winner: Team
    loser: Team
    winner_score: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("winnerScore", "winner_score"),
        serialization_alias="winnerScore",
    )
    loser_score: int = Field(
        ...,
        ge=0,
        validation_alias=AliasChoices("loserScore", "loser_score"),
        serialization_alias="loserScore",
    )
    duration_minutes: int = Field(
        ...,
        ge=SESSION_SETTINGS.min_duration_minutes,
        le=SESSION_SETTINGS.max_duration_minutes,
        validation_alias=AliasChoices("durationMinutes", "duration_minutes", "duration"),
        serialization_alias="durationMinutes",
    )

    @model_validator(mode="after")
    def winner_beats_loser(self) -> "MatchRecord":
        if self.winner == self.loser:
            raise ValueError("Winner and loser must be different teams")
        if self.winner_score < self.loser_score:
            raise ValueError("Winner cannot have scored fewer goals than loser")
        return self

    @property
    def goal_total(self) -> int:
        return self.winner_score + self.loser_score

    def to_json(self) -> dict:
        """JSON-ready dict with the persisted key names."""
        return self.model_dump(mode="json", by_alias=True)


# ============ Active Teams ============

class ActiveTeams(BaseModel):
    """The ordered set of teams taking part in sessions."""
    teams: list[Team] = Field(..., min_length=SESSION_SETTINGS.min_active_teams)

    @field_validator("teams")
    @classmethod
    def teams_distinct(cls, v: list[Team]) -> list[Team]:
        if len(set(v)) != len(v):
            raise ValueError("Active teams must be distinct")
        return v

    def to_json(self) -> list[str]:
        return [team.value for team in self.teams]
