"""
Fredagsliga Configuration

Centralized settings, paths, and constants for the application.
"""

import os
from pathlib import Path
from dataclasses import dataclass
import appdirs


# Application info
APP_NAME = "Fredagsliga"
APP_AUTHOR = "Fredagsliga"
APP_VERSION = "1.0.0"

# Environment override for the database location (e.g. "sqlite://" in tests)
DATABASE_URL_ENV = "FREDAGSLIGA_DATABASE_URL"


@dataclass(frozen=True)
class Paths:
    """Application paths."""
    # Data directory (stores the key-value database)
    data_dir: Path = Path(appdirs.user_data_dir(APP_NAME, APP_AUTHOR))

    # Log directory
    log_dir: Path = Path(appdirs.user_log_dir(APP_NAME, APP_AUTHOR))

    @property
    def database(self) -> Path:
        return self.data_dir / "fredagsliga.db"

    @property
    def database_url(self) -> str:
        return os.environ.get(DATABASE_URL_ENV, f"sqlite:///{self.database}")

    def ensure_directories(self) -> None:
        """Create all required directories."""
        for dir_path in [self.data_dir, self.log_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class SessionSettings:
    """Session and match settings."""
    # Match length bounds in minutes
    min_duration_minutes: int = 1
    max_duration_minutes: int = 30
    default_duration_minutes: int = 5

    # Active team set must never drop below this size
    min_active_teams: int = 2

    # Teams used when nothing has been saved yet
    default_active_teams: tuple[str, ...] = ("turkis", "oransje", "grønn", "svart")

    # Bounded match history
    history_limit: int = 50

    # Matches shown on the home screen
    recent_matches: int = 3


@dataclass(frozen=True)
class TimerSettings:
    """Timer-related settings."""
    # Countdown tick interval in milliseconds
    tick_interval_ms: int = 1000


# Singleton instances
PATHS = Paths()
SESSION_SETTINGS = SessionSettings()
TIMER_SETTINGS = TimerSettings()


def init_config() -> None:
    """Initialize configuration and create required directories."""
    PATHS.ensure_directories()
