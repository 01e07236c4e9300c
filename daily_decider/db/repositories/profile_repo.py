"""
Repository for ``user_profiles`` — the ``ProfileBackend`` collaborator over SQLite.
"""

from __future__ import annotations

import logging
from typing import Optional

from daily_decider.db.repositories.base import BaseRepository
from daily_decider.models.profile import UserProfile

logger = logging.getLogger(__name__)


class UserProfileRepository(BaseRepository):
    """Read/write access to ``user_profiles`` (UPSERT on session_id)."""

    table = "user_profiles"

    def get(self, session_id: str) -> Optional[UserProfile]:
        row = self.fetchone(
            "SELECT profile_json FROM user_profiles WHERE session_id = ?;",
            (session_id,),
        )
        if row is None:
            return None
        return self.load_model(UserProfile, row["profile_json"])

    def put(self, session_id: str, profile: UserProfile) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                INSERT INTO user_profiles (session_id, profile_json)
                VALUES (?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    profile_json = excluded.profile_json,
                    updated_at   = strftime('%Y-%m-%dT%H:%M:%SZ', 'now');
                """,
                (session_id, self.dump_model(profile)),
            )
