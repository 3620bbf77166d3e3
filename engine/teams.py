"""
Team Registry

Holds the set of teams taking part in sessions. The set is chosen on
the home screen, persisted under ``active_teams``, and frozen while a
session is underway.
"""

import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from config import SESSION_SETTINGS
from engine.exceptions import InvalidSelection, InvalidTransition
from models.schemas import ActiveTeams
from models.team import Team
from services.storage import KeyValueStore, ACTIVE_TEAMS_KEY

logger = logging.getLogger(__name__)


def default_active_teams() -> list[Team]:
    return [Team(value) for value in SESSION_SETTINGS.default_active_teams]


class TeamRegistry:
    """
    Catalog of selectable teams and the ordered active subset.

    Attributes:
        locked: True while a session is in progress; changes are refused
    """

    MIN_ACTIVE = SESSION_SETTINGS.min_active_teams

    def __init__(self, store: Optional[KeyValueStore] = None,
                 active: Optional[Iterable[Team]] = None):
        """
        Initialize the registry.

        Args:
            store: Store to load from and persist to (optional)
            active: Explicit initial active set; overrides the stored one
        """
        self._store = store
        self.locked = False

        if active is not None:
            self._active = self._validate(list(active))
        else:
            self._active = self._load()

    @property
    def catalog(self) -> list[Team]:
        """Every selectable team, in catalog order."""
        return list(Team)

    @property
    def active(self) -> list[Team]:
        """The active teams, in selection order."""
        return list(self._active)

    def __contains__(self, team: object) -> bool:
        return team in self._active

    def __len__(self) -> int:
        return len(self._active)

    def _validate(self, teams: list[Team]) -> list[Team]:
        try:
            return ActiveTeams(teams=teams).teams
        except ValidationError as e:
            raise InvalidSelection(f"Invalid active team set: {teams}") from e

    def _load(self) -> list[Team]:
        if self._store is None:
            return default_active_teams()

        raw = self._store.get(ACTIVE_TEAMS_KEY)
        if raw is None:
            return default_active_teams()

        try:
            return ActiveTeams(teams=raw).teams
        except ValidationError:
            logger.warning("Stored active teams %r are invalid; using defaults", raw)
            return default_active_teams()

    def _persist(self) -> None:
        if self._store is not None:
            self._store.set(ACTIVE_TEAMS_KEY, ActiveTeams(teams=self._active).to_json())

    def _check_unlocked(self) -> None:
        if self.locked:
            raise InvalidTransition("Active teams cannot change during a session")

    def set_active(self, teams: Iterable[Team]) -> None:
        """Replace the active set. Must hold at least two distinct teams."""
        self._check_unlocked()
        self._active = self._validate(list(teams))
        self._persist()

    def add(self, team: Team) -> None:
        """Add a team at the end of the active set. Adding an active team is a no-op."""
        self._check_unlocked()
        if team in self._active:
            return
        self._active.append(team)
        self._persist()
        logger.info("Team %s joined the active set", team.value)

    def remove(self, team: Team) -> None:
        """
        Remove a team from the active set.

        Raises:
            InvalidSelection: If the removal would leave fewer than two teams
        """
        self._check_unlocked()
        if team not in self._active:
            return
        if len(self._active) <= self.MIN_ACTIVE:
            raise InvalidSelection(
                f"At least {self.MIN_ACTIVE} teams must stay active"
            )
        self._active.remove(team)
        self._persist()
        logger.info("Team %s left the active set", team.value)

    def toggle(self, team: Team) -> bool:
        """
        Add an inactive team or remove an active one.

        Returns:
            True if the team is active afterwards
        """
        if team in self._active:
            self.remove(team)
            return False
        self.add(team)
        return True
