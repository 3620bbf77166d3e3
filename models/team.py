"""
Team catalog for Fredagsliga sessions.
"""

import enum


class Team(enum.Enum):
    """
    The fixed catalog of bibs available on Friday nights.

    Member order is the catalog order, used wherever a stable
    ordering of teams is needed (score tables, standings ties).
    """
    TURKIS = "turkis"
    ORANSJE = "oransje"
    GRONN = "grønn"
    SVART = "svart"
    ROD = "rød"
    BLA = "blå"

    def __repr__(self) -> str:
        return f"<Team.{self.name}>"

    @property
    def display_name(self) -> str:
        return TEAM_DISPLAY[self][0]

    @property
    def color(self) -> str:
        """Hex color used for the team's bib."""
        return TEAM_DISPLAY[self][1]


# Presentation metadata: (display name, hex color)
TEAM_DISPLAY: dict[Team, tuple[str, str]] = {
    Team.TURKIS: ("Turkis", "#06b6d4"),
    Team.ORANSJE: ("Oransje", "#f97316"),
    Team.GRONN: ("Grønn", "#22c55e"),
    Team.SVART: ("Svart", "#1f2937"),
    Team.ROD: ("Rød", "#ef4444"),
    Team.BLA: ("Blå", "#3b82f6"),
}


def empty_scores() -> dict[Team, int]:
    """A score table with every catalog team at zero."""
    return {team: 0 for team in Team}
