"""Tests for repository round-trip operations using in-memory SQLite."""

from __future__ import annotations

import random
import sqlite3

import pytest

from daily_decider.db.repositories.history_repo import DecisionHistoryRepository
from daily_decider.db.repositories.profile_repo import UserProfileRepository
from daily_decider.engine.decision_engine import DecisionEngine
from daily_decider.engine.state import EngineState, HistorySink, ProfileBackend
from daily_decider.models.profile import UserProfile
from daily_decider.taxonomy.decision_taxonomy import ComplexityLevel


# ── DecisionHistoryRepository ─────────────────────────────────────────────────

class TestDecisionHistoryRepository:
    def test_append_and_read(self, in_memory_db, make_record):
        repo = DecisionHistoryRepository(in_memory_db)
        rid = repo.append(make_record())
        assert rid > 0
        assert repo.count() == 1

        (loaded,) = repo.read_recent(10)
        assert loaded.record_id == rid
        assert loaded.question_hash == make_record().question_hash
        assert loaded.keyword_hashes == make_record().keyword_hashes
        assert loaded.result.decision == "Yes"
        assert loaded.result.alternatives == ["No"]

    def test_read_recent_oldest_first(self, in_memory_db, make_record):
        repo = DecisionHistoryRepository(in_memory_db)
        for i in range(5):
            repo.append(make_record(timestamp=i))
        assert [r.timestamp for r in repo.read_recent(3)] == [2, 3, 4]
        assert repo.read_recent(0) == []

    def test_trim_past_cap(self, in_memory_db, make_record):
        repo = DecisionHistoryRepository(in_memory_db, cap=5, trim_to=2)
        for i in range(5):
            repo.append(make_record(timestamp=i))
        assert repo.count() == 5
        repo.append(make_record(timestamp=5))
        assert repo.count() == 2
        assert [r.timestamp for r in repo.read_recent(10)] == [4, 5]

    def test_default_cap(self, in_memory_db, make_record):
        repo = DecisionHistoryRepository(in_memory_db)
        record = make_record()
        for _ in range(1001):
            repo.append(record)
        assert repo.count() == 500

    def test_get_by_session(self, in_memory_db, make_record):
        repo = DecisionHistoryRepository(in_memory_db)
        repo.append(make_record(session_id="a"))
        repo.append(make_record(session_id="b"))
        repo.append(make_record(session_id="a"))
        assert len(repo.get_by_session("a")) == 2
        assert len(repo.get_by_session("a", limit=1)) == 1

    def test_invalid_bounds(self, in_memory_db):
        with pytest.raises(ValueError):
            DecisionHistoryRepository(in_memory_db, cap=5, trim_to=5)

    def test_full_result_round_trip(self, in_memory_db, engine, tuesday_morning_ms):
        result = engine.make_decision(
            "Should I take the new job offer?", ["No", "Yes"], {"timestamp": tuesday_morning_ms}
        )
        (record,) = engine.state.history.read_recent(1)
        repo = DecisionHistoryRepository(in_memory_db)
        repo.append(record)
        (loaded,) = repo.read_recent(1)
        assert loaded.result.decision == result.decision
        assert loaded.result.factors.temporal.decision_bias == pytest.approx(
            result.factors.temporal.decision_bias
        )
        assert loaded.result.factors.temporal.timestamp == result.factors.temporal.timestamp


# ── UserProfileRepository ─────────────────────────────────────────────────────

class TestUserProfileRepository:
    def test_missing_profile(self, in_memory_db):
        assert UserProfileRepository(in_memory_db).get("nobody") is None

    def test_put_and_get(self, in_memory_db):
        repo = UserProfileRepository(in_memory_db)
        profile = UserProfile(decision_count=3, complexity_counts={"simple": 3})
        repo.put("s1", profile)
        loaded = repo.get("s1")
        assert loaded.decision_count == 3
        assert loaded.complexity_counts == {"simple": 3}

    def test_upsert_overwrites(self, in_memory_db):
        repo = UserProfileRepository(in_memory_db)
        repo.put("s1", UserProfile())
        repo.put("s1", UserProfile(preferred_complexity=ComplexityLevel.COMPLEX))
        assert repo.count() == 1
        assert repo.get("s1").preferred_complexity == ComplexityLevel.COMPLEX


# ── BaseRepository ────────────────────────────────────────────────────────────

class TestTransaction:
    def test_rolls_back_on_error(self, in_memory_db):
        repo = UserProfileRepository(in_memory_db)
        with pytest.raises(RuntimeError):
            with repo.transaction() as conn:
                conn.execute(
                    "INSERT INTO user_profiles (session_id, profile_json) VALUES (?, ?);",
                    ("s1", repo.dump_model(UserProfile())),
                )
                raise RuntimeError("boom")
        assert repo.count() == 0

    def test_failed_append_leaves_history_untouched(self, in_memory_db, make_record):
        repo = DecisionHistoryRepository(in_memory_db, cap=3, trim_to=1)
        for i in range(3):
            repo.append(make_record(timestamp=i))
        bad = make_record(timestamp=99).model_copy(update={"session_id": None})
        with pytest.raises(sqlite3.IntegrityError):
            repo.append(bad)
        assert [r.timestamp for r in repo.read_recent(10)] == [0, 1, 2]

    def test_count_is_per_table(self, in_memory_db, make_record):
        DecisionHistoryRepository(in_memory_db).append(make_record())
        assert UserProfileRepository(in_memory_db).count() == 0
        assert DecisionHistoryRepository(in_memory_db).count() == 1


# ── Engine over SQLite ────────────────────────────────────────────────────────

class TestEngineOverSqlite:
    def test_repositories_satisfy_protocols(self, in_memory_db):
        assert isinstance(DecisionHistoryRepository(in_memory_db), HistorySink)
        assert isinstance(UserProfileRepository(in_memory_db), ProfileBackend)

    def test_decisions_persist(self, in_memory_db, tuesday_morning_ms):
        state = EngineState(
            history=DecisionHistoryRepository(in_memory_db),
            profiles=UserProfileRepository(in_memory_db),
        )
        engine = DecisionEngine(state=state, rng=random.Random(0))
        ctx = {"timestamp": tuesday_morning_ms, "session_id": "s1"}

        engine.make_decision("Should I take the new job offer?", ["No", "Yes"], ctx)
        second = engine.make_decision("Should I take the new job offer?", ["No", "Yes"], ctx)

        assert state.history.count() == 2
        assert second.factors.pattern.match_count == 1
        assert state.profiles.get("s1").decision_count == 2
