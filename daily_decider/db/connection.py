"""
Opening the SQLite decision store.

``open_decision_store(config)`` is how the CLI gets persistent engine state:
it opens the database file from ``[database]``, applies the schema, and
yields an ``EngineState`` whose history and profile collaborators are the
SQLite repositories, with the history cap taken from ``[engine]``.

Usage::

    from daily_decider.db.connection import open_decision_store

    with open_decision_store(config) as state:
        engine = DecisionEngine(config=config, state=state)
        result = engine.make_decision("Should I go for a run?", ["Yes", "No"])

Every repository write commits on its own, so a decision recorded before an
error later in the block stays recorded.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional

from daily_decider.db.repositories.history_repo import DecisionHistoryRepository
from daily_decider.db.repositories.profile_repo import UserProfileRepository
from daily_decider.db.schema import apply_schema
from daily_decider.engine.state import EngineState

if TYPE_CHECKING:
    from daily_decider.config import AppConfig, DatabaseConfig

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


def connect(database: "DatabaseConfig", db_path: Optional[str] = None) -> sqlite3.Connection:
    """Open the decision database with the schema applied.

    Args:
        database: ``[database]`` config section.
        db_path:  Overrides ``database.db_path`` (the CLI ``--db-path`` flag).

    Raises:
        sqlite3.OperationalError: If the file cannot be opened or stays locked.
    """
    path = db_path or database.db_path
    if path != MEMORY_DB:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path, timeout=database.busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    if database.wal_mode and path != MEMORY_DB:
        conn.execute("PRAGMA journal_mode = WAL;")
    apply_schema(conn)
    return conn


@contextmanager
def open_decision_store(
    config: "AppConfig",
    db_path: Optional[str] = None,
) -> Iterator[EngineState]:
    """Yield SQLite-backed ``EngineState``; the connection closes on exit."""
    conn = connect(config.database, db_path)
    try:
        history = DecisionHistoryRepository(
            conn,
            cap=config.engine.history_cap,
            trim_to=config.engine.history_trim_to,
        )
        profiles = UserProfileRepository(conn)
        logger.debug(
            "Decision store opened | path=%s records=%d profiles=%d",
            db_path or config.database.db_path,
            history.count(),
            profiles.count(),
        )
        yield EngineState(history=history, profiles=profiles)
    finally:
        conn.close()
