"""
Key-Value Store - Local durable mapping from string keys to JSON values.

Backed by the ``kv_store`` SQLite table. Failures never propagate:
reads fall back to the caller's default and writes are skipped and
logged, so a broken disk cannot take down a running match.
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy import Engine, select
from sqlalchemy.exc import SQLAlchemyError

from config import PATHS
from models.base import create_db_engine, get_session, init_db, make_session_factory
from models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


# Persisted keys
ACTIVE_TEAMS_KEY = "active_teams"
MATCH_HISTORY_KEY = "match_history"


class KeyValueStore:
    """
    JSON key-value store on top of SQLAlchemy.

    Usage:
        store = KeyValueStore.open("sqlite://")
        store.set("active_teams", ["turkis", "rød"])
        teams = store.get("active_teams", default=[])
    """

    def __init__(self, db_engine: Engine):
        self._engine = db_engine
        self._session_factory = make_session_factory(db_engine)

    @classmethod
    def open(cls, url: Optional[str] = None) -> "KeyValueStore":
        """Create a store for the given database URL, creating tables if needed."""
        if url is None:
            try:
                PATHS.ensure_directories()
            except OSError:
                logger.exception("Could not create data directory %s", PATHS.data_dir)

        db_engine = create_db_engine(url)
        try:
            init_db(db_engine)
        except SQLAlchemyError:
            logger.exception("Could not initialize key-value store at %s", db_engine.url)
        return cls(db_engine)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read and decode the value for a key.

        Returns:
            The decoded JSON value, or ``default`` if the key is absent
            or the store cannot be read.
        """
        try:
            with get_session(self._session_factory) as session:
                raw = session.scalar(
                    select(KeyValueEntry.value).where(KeyValueEntry.key == key)
                )
        except SQLAlchemyError:
            logger.exception("Could not read key '%s'; using default", key)
            return default

        if raw is None:
            return default

        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored value for '%s' is not valid JSON; using default", key)
            return default

    def set(self, key: str, value: Any) -> bool:
        """
        Encode and write a value.

        Returns:
            True if the write was committed
        """
        try:
            encoded = json.dumps(value, ensure_ascii=False)
        except (TypeError, ValueError):
            logger.exception("Value for '%s' is not JSON-serializable; skipping write", key)
            return False

        try:
            with get_session(self._session_factory) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=encoded))
                else:
                    entry.value = encoded
        except SQLAlchemyError:
            logger.exception("Could not write key '%s'; continuing in memory", key)
            return False

        logger.debug("Stored key '%s' (%d bytes)", key, len(encoded))
        return True

    def remove(self, key: str) -> bool:
        """
        Delete a key. Removing an absent key succeeds.

        Returns:
            True if the delete was committed
        """
        try:
            with get_session(self._session_factory) as session:
                entry = session.get(KeyValueEntry, key)
                if entry is not None:
                    session.delete(entry)
        except SQLAlchemyError:
            logger.exception("Could not remove key '%s'", key)
            return False
        return True

    def close(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()
