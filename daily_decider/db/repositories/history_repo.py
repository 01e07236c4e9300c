"""
Repository for the capped ``decision_history`` table.

Implements the ``HistorySink`` collaborator over SQLite. Each ``append`` runs
insert → count → trim in one transaction and commits it, so other
connections never see the table above ``cap`` rows.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Optional

from daily_decider.db.repositories.base import BaseRepository
from daily_decider.engine.state import DEFAULT_HISTORY_CAP, DEFAULT_HISTORY_TRIM_TO
from daily_decider.models.decision import DecisionRecord, DecisionResult

logger = logging.getLogger(__name__)


class DecisionHistoryRepository(BaseRepository):
    """Read/write access to ``decision_history``.

    Args:
        conn:    Open SQLite connection with the schema applied.
        cap:     Row count that triggers a trim.
        trim_to: Rows kept (most recent) after a trim.
    """

    table = "decision_history"

    def __init__(
        self,
        conn: sqlite3.Connection,
        cap: int = DEFAULT_HISTORY_CAP,
        trim_to: int = DEFAULT_HISTORY_TRIM_TO,
    ) -> None:
        super().__init__(conn)
        if not 0 < trim_to < cap:
            raise ValueError(f"trim_to ({trim_to}) must be in (0, cap={cap}).")
        self.cap = cap
        self.trim_to = trim_to

    def append(self, record: DecisionRecord) -> int:
        """Insert ``record``, trimming to the most recent ``trim_to`` rows past ``cap``.

        Returns:
            The new ``record_id``.
        """
        with self.transaction() as conn:
            cursor = conn.execute(
                """
                INSERT INTO decision_history (
                    session_id, question_hash, keyword_hashes,
                    recorded_at_ms, result_json, engine_version
                ) VALUES (?, ?, ?, ?, ?, ?);
                """,
                (
                    record.session_id,
                    record.question_hash,
                    json.dumps(record.keyword_hashes),
                    record.timestamp,
                    self.dump_model(record.result),
                    record.engine_version,
                ),
            )
            record_id = int(cursor.lastrowid)

            if self.count() > self.cap:
                cursor = conn.execute(
                    """
                    DELETE FROM decision_history
                    WHERE record_id NOT IN (
                        SELECT record_id FROM decision_history
                        ORDER BY record_id DESC
                        LIMIT ?
                    );
                    """,
                    (self.trim_to,),
                )
                logger.info(
                    "Decision history trimmed | dropped=%d kept=%d",
                    cursor.rowcount, self.trim_to,
                )
        return record_id

    def read_recent(self, limit: int) -> list[DecisionRecord]:
        """Return up to ``limit`` most recent records, oldest first."""
        if limit <= 0:
            return []
        rows = self.fetchall(
            """
            SELECT * FROM decision_history
            ORDER BY record_id DESC
            LIMIT ?;
            """,
            (limit,),
        )
        return [_row_to_record(r) for r in reversed(rows)]

    def get_by_session(self, session_id: str, limit: Optional[int] = None) -> list[DecisionRecord]:
        """Records for one session, oldest first."""
        rows = self.fetchall(
            """
            SELECT * FROM decision_history
            WHERE session_id = ?
            ORDER BY record_id DESC
            LIMIT ?;
            """,
            (session_id, limit if limit is not None else -1),
        )
        return [_row_to_record(r) for r in reversed(rows)]


def _row_to_record(row: sqlite3.Row) -> DecisionRecord:
    return DecisionRecord(
        record_id=row["record_id"],
        session_id=row["session_id"],
        question_hash=row["question_hash"],
        keyword_hashes=json.loads(row["keyword_hashes"]),
        timestamp=row["recorded_at_ms"],
        result=BaseRepository.load_model(DecisionResult, row["result_json"]),
        engine_version=row["engine_version"],
    )
