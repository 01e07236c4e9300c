"""
Engine-owned state and the persistence collaborator interfaces.

``EngineState`` replaces process-wide globals: it bundles the decision history
and the session → profile mapping, and is constructed once per process (or per
test) and handed to a ``DecisionEngine``.

Collaborators
-------------
HistorySink     : ``append(record)`` / ``read_recent(limit)``.
ProfileBackend  : ``get(session_id)`` / ``put(session_id, profile)``.

The in-memory implementations below are thread-safe. Append and trim happen
under one lock, so a reader never observes a history longer than the cap.
SQLite-backed implementations live in ``daily_decider.db.repositories``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Optional, Protocol, runtime_checkable

from daily_decider.models.decision import DecisionRecord
from daily_decider.models.profile import UserProfile

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAP = 1000
DEFAULT_HISTORY_TRIM_TO = 500


@runtime_checkable
class HistorySink(Protocol):
    def append(self, record: DecisionRecord) -> None:
        ...

    def read_recent(self, limit: int) -> list[DecisionRecord]:
        ...


@runtime_checkable
class ProfileBackend(Protocol):
    def get(self, session_id: str) -> Optional[UserProfile]:
        ...

    def put(self, session_id: str, profile: UserProfile) -> None:
        ...


class InMemoryDecisionHistory:
    """Capped, ordered list of decision records (oldest first).

    When an append takes the length past ``cap``, the list is cut back to the
    most recent ``trim_to`` records before the lock is released.
    """

    def __init__(
        self,
        cap: int = DEFAULT_HISTORY_CAP,
        trim_to: int = DEFAULT_HISTORY_TRIM_TO,
    ) -> None:
        if not 0 < trim_to < cap:
            raise ValueError(f"trim_to ({trim_to}) must be in (0, cap={cap}).")
        self.cap = cap
        self.trim_to = trim_to
        self._records: list[DecisionRecord] = []
        self._lock = threading.Lock()

    def append(self, record: DecisionRecord) -> None:
        with self._lock:
            self._records.append(record)
            if len(self._records) > self.cap:
                dropped = len(self._records) - self.trim_to
                self._records = self._records[-self.trim_to:]
                logger.info(
                    "Decision history trimmed | dropped=%d kept=%d", dropped, self.trim_to
                )

    def read_recent(self, limit: int) -> list[DecisionRecord]:
        """Return up to ``limit`` most recent records, oldest first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(self._records[-limit:])

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryProfileBackend:
    """Session → profile mapping. Sessions are never evicted."""

    def __init__(self) -> None:
        self._profiles: dict[str, UserProfile] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[UserProfile]:
        with self._lock:
            profile = self._profiles.get(session_id)
            return profile.model_copy(deep=True) if profile is not None else None

    def put(self, session_id: str, profile: UserProfile) -> None:
        with self._lock:
            self._profiles[session_id] = profile.model_copy(deep=True)

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)


@dataclass
class EngineState:
    """Everything a ``DecisionEngine`` mutates, in one injectable object."""

    history: HistorySink = field(default_factory=InMemoryDecisionHistory)
    profiles: ProfileBackend = field(default_factory=InMemoryProfileBackend)

    @classmethod
    def in_memory(
        cls,
        cap: int = DEFAULT_HISTORY_CAP,
        trim_to: int = DEFAULT_HISTORY_TRIM_TO,
    ) -> "EngineState":
        return cls(
            history=InMemoryDecisionHistory(cap=cap, trim_to=trim_to),
            profiles=InMemoryProfileBackend(),
        )
