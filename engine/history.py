"""
Match History - Bounded, newest-first log of completed matches.

The log lives in memory and is written through to the key-value store
after every change. Losing a write is logged by the store and otherwise
ignored; the in-memory log stays authoritative for the session.
"""

import logging
from collections import deque
from typing import Optional

from pydantic import ValidationError

from config import SESSION_SETTINGS
from models.schemas import MatchRecord
from services.storage import KeyValueStore, MATCH_HISTORY_KEY

logger = logging.getLogger(__name__)


class MatchHistoryStore:
    """
    Append-only log of MatchRecords, capped at ``limit`` entries.

    Index 0 is always the newest match. Appending beyond the cap drops
    the oldest entry.

    Usage:
        history = MatchHistoryStore(store)
        history.append(record)
        latest = history.recent()
    """

    def __init__(self, store: Optional[KeyValueStore] = None,
                 limit: int = SESSION_SETTINGS.history_limit):
        self._store = store
        self.limit = limit
        self._records: deque[MatchRecord] = deque(maxlen=limit)
        self._load()

    def __len__(self) -> int:
        return len(self._records)

    def _load(self) -> None:
        """Load persisted records, skipping any that fail validation."""
        if self._store is None:
            return

        raw = self._store.get(MATCH_HISTORY_KEY, default=[])
        if not isinstance(raw, list):
            logger.warning("Ignoring malformed match history (%s)", type(raw).__name__)
            return

        skipped = 0
        for item in raw[:self.limit]:
            try:
                self._records.append(MatchRecord.model_validate(item))
            except ValidationError:
                skipped += 1

        if skipped:
            logger.warning("Skipped %d invalid match record(s) in history", skipped)
        logger.info("Loaded %d match record(s)", len(self._records))

    def _persist(self) -> None:
        if self._store is not None:
            self._store.set(MATCH_HISTORY_KEY, [r.to_json() for r in self._records])

    def append(self, record: MatchRecord) -> None:
        """Insert a record at the front, dropping the oldest past the cap."""
        if len(self._records) == self.limit:
            logger.debug("History full; dropping match from %s", self._records[-1].timestamp)
        self._records.appendleft(record)
        self._persist()
        logger.info(
            "Recorded match: %s %d-%d %s",
            record.winner.value, record.winner_score,
            record.loser_score, record.loser.value,
        )

    def all(self) -> list[MatchRecord]:
        """All records, newest first."""
        return list(self._records)

    def recent(self, limit: int = SESSION_SETTINGS.recent_matches) -> list[MatchRecord]:
        """The ``limit`` newest records."""
        return list(self._records)[:limit]

    def clear(self) -> None:
        """Erase the whole log. Callers must confirm with the user first."""
        self._records.clear()
        if self._store is not None:
            self._store.remove(MATCH_HISTORY_KEY)
        logger.info("Match history cleared")
