"""
Base repository for the decision store.

Both tables keep a pydantic model serialised as JSON next to a handful of
indexed columns. ``BaseRepository`` owns the pieces the two repositories
share: the per-table row count, JSON column (de)serialisation, and a
``transaction()`` block that commits every write before returning.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator, Optional, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

Params = tuple[Any, ...]


class BaseRepository:
    """Shared plumbing for the ``decision_history`` and ``user_profiles`` repositories.

    Subclasses set ``table``; the connection is opened by
    ``open_decision_store`` (or a test fixture) and must have the schema applied.
    """

    table: ClassVar[str]

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit the enclosed writes together, or roll all of them back."""
        try:
            yield self.conn
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            logger.warning("Rolled back write to %s", self.table, exc_info=True)
            raise

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchall()

    def count(self) -> int:
        """Rows currently stored in this repository's table."""
        row = self.conn.execute(f"SELECT COUNT(*) FROM {self.table};").fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def dump_model(model: BaseModel) -> str:
        return model.model_dump_json()

    @staticmethod
    def load_model(model_cls: type[ModelT], raw: str) -> ModelT:
        return model_cls.model_validate_json(raw)
