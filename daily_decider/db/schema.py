"""
SQLite schema DDL.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

Tables:
  1. decision_history  — one row per recorded decision (capped by the repository)
  2. user_profiles     — one row per session, profile stored as JSON
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_DECISION_HISTORY = """
CREATE TABLE IF NOT EXISTS decision_history (
    record_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id      TEXT    NOT NULL,
    question_hash   TEXT    NOT NULL,
    keyword_hashes  TEXT    NOT NULL DEFAULT '[]',
    recorded_at_ms  INTEGER NOT NULL,
    result_json     TEXT    NOT NULL,
    engine_version  TEXT    NOT NULL,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_USER_PROFILES = """
CREATE TABLE IF NOT EXISTS user_profiles (
    session_id      TEXT    PRIMARY KEY,
    profile_json    TEXT    NOT NULL,
    updated_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_history_question_hash ON decision_history(question_hash);",
    "CREATE INDEX IF NOT EXISTS idx_history_session ON decision_history(session_id);",
)

ALL_TABLE_NAMES: tuple[str, ...] = ("decision_history", "user_profiles")


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and indexes (idempotent)."""
    for ddl in (_DDL_DECISION_HISTORY, _DDL_USER_PROFILES, *_DDL_INDEXES):
        conn.execute(ddl)
    conn.commit()
    logger.debug("Schema applied | tables=%s", ", ".join(ALL_TABLE_NAMES))
