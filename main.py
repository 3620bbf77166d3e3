"""
Fredagsliga - Friday futsal session manager

Entry point. Prints today's and all-time standings plus the most recent
matches from the local history.
"""

import sys

from PySide6.QtCore import QCoreApplication

from config import init_config, APP_NAME, APP_VERSION
from logging_config import setup_logging


def format_standings(title: str, rows) -> list[str]:
    lines = [title]
    if not rows:
        lines.append("  No matches played")
        return lines

    lines.append(f"  {'#':>2}  {'Team':<10} {'P':>3} {'W':>3} {'L':>3} {'GF':>4} {'GA':>4} {'GD':>4} {'Win%':>5}")
    for row in rows:
        s = row.stats
        lines.append(
            f"  {row.position:>2}  {row.team.display_name:<10} {s.matches_played:>3} "
            f"{s.wins:>3} {s.losses:>3} {s.goals_for:>4} {s.goals_against:>4} "
            f"{s.goal_difference:>+4} {s.win_rate:>4}%"
        )
    return lines


def main() -> int:
    """Main entry point for Fredagsliga."""
    # Initialize configuration and directories
    init_config()
    setup_logging(level="WARNING")

    # Qt objects need an application instance
    app = QCoreApplication(sys.argv)
    app.setApplicationName(APP_NAME)
    app.setApplicationVersion(APP_VERSION)

    from app import FredagsligaApp
    fl_app = FredagsligaApp()

    lines = [f"{APP_NAME} {APP_VERSION}", ""]
    lines += format_standings("Today", fl_app.stats.standings(today=True))
    lines.append("")
    lines += format_standings("All time", fl_app.stats.standings())

    summary = fl_app.stats.overview()
    lines.append("")
    lines.append(
        f"{summary.total_matches} matches, "
        f"avg {summary.average_duration_minutes} min, "
        f"avg {summary.average_goals_per_match} goals"
    )

    recent = fl_app.history.recent()
    if recent:
        lines.append("")
        lines.append("Recent matches")
        for record in recent:
            lines.append(
                f"  {record.timestamp:%d.%m %H:%M}  {record.winner.display_name} "
                f"{record.winner_score}-{record.loser_score} {record.loser.display_name}"
            )

    print("\n".join(lines))
    fl_app.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
