"""
Shared pytest fixtures for the Daily Decider test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the schema
    applied. Created anew for each test that requests it.
  - Fixed timestamps (Tuesday 2025-04-08 09:00 UTC) as datetime and epoch-ms.
  - ``engine``: a ``DecisionEngine`` with a seeded random source and fresh
    in-memory state.
  - ``make_factors``: factory for hand-built ``DecisionFactors``.
  - ``make_record``: factory for ``DecisionRecord`` history entries.
"""

from __future__ import annotations

import random
import sqlite3
from datetime import datetime, timezone
from typing import Generator, Optional

import pytest

from daily_decider.analysis.pattern import keyword_hashes, question_hash
from daily_decider.config import AppConfig
from daily_decider.db.schema import apply_schema
from daily_decider.engine.decision_engine import DecisionEngine
from daily_decider.engine.state import EngineState
from daily_decider.models.decision import DecisionRecord, DecisionResult
from daily_decider.models.signals import (
    ComplexityAssessment,
    ContextualFactors,
    DecisionFactors,
    PatternSignal,
    SentimentScore,
    TemporalFactors,
)
from daily_decider.taxonomy.decision_taxonomy import (
    ComplexityLevel,
    DayOfWeek,
    DecisionType,
    MoonPhase,
    Season,
    TimeOfDay,
)
from daily_decider.utils.time_utils import to_epoch_ms

# Tuesday, spring, 09:00 UTC
TUESDAY_MORNING = datetime(2025, 4, 8, 9, 0, 0, tzinfo=timezone.utc)
TUESDAY_MORNING_MS = to_epoch_ms(TUESDAY_MORNING)


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Time fixtures ─────────────────────────────────────────────────────────────

@pytest.fixture
def tuesday_morning() -> datetime:
    return TUESDAY_MORNING


@pytest.fixture
def tuesday_morning_ms() -> int:
    return TUESDAY_MORNING_MS


# ── Engine fixtures ───────────────────────────────────────────────────────────

@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def engine(app_config: AppConfig) -> DecisionEngine:
    """Seeded engine over fresh in-memory state."""
    return DecisionEngine(
        config=app_config,
        state=EngineState.in_memory(),
        rng=random.Random(42),
    )


# ── Domain object factories ───────────────────────────────────────────────────

@pytest.fixture
def make_factors():
    """Return a builder for ``DecisionFactors`` with neutral defaults."""

    def _make(
        polarity: float = 0.0,
        decision_bias: float = 0.0,
        strength: float = 0.0,
        option_bias: Optional[list[float]] = None,
        accuracy: float = 0.5,
        urgency: float = 0.0,
        clarity: float = 0.5,
        alignment: float = 0.5,
        time_of_day: TimeOfDay = TimeOfDay.AFTERNOON,
        complexity: ComplexityLevel = ComplexityLevel.MEDIUM,
    ) -> DecisionFactors:
        return DecisionFactors(
            temporal=TemporalFactors(
                timestamp=TUESDAY_MORNING,
                time_of_day=time_of_day,
                day_of_week=DayOfWeek.TUESDAY,
                season=Season.SPRING,
                moon_phase=MoonPhase.FULL,
                combined_factors={"clarity": 0.5},
                overall_score=0.5,
                decision_bias=decision_bias,
            ),
            sentiment=SentimentScore(polarity=polarity),
            pattern=PatternSignal(
                recommendation_strength=strength,
                option_bias=option_bias or [],
                historical_accuracy=accuracy,
            ),
            contextual=ContextualFactors(urgency_factor=urgency, clarity=clarity),
            complexity=ComplexityAssessment(level=complexity, word_count=7),
            personal_alignment=alignment,
        )

    return _make


@pytest.fixture
def make_record():
    """Return a builder for ``DecisionRecord`` entries."""

    def _make(
        question: str = "Should I take the new job offer?",
        decision: str = "Yes",
        options: Optional[list[str]] = None,
        confidence: float = 0.8,
        timestamp: int = TUESDAY_MORNING_MS,
        session_id: str = "dd_test_session",
    ) -> DecisionRecord:
        options = options if options is not None else ["No", "Yes"]
        result = DecisionResult(
            decision=decision,
            reasoning="test",
            confidence=confidence,
            alternatives=[o for o in options if o != decision],
            engine_version="2.1.0",
            algorithm="2.1.0",
            decision_type=DecisionType.for_option_count(len(options)),
            session_id=session_id,
        )
        return DecisionRecord(
            session_id=session_id,
            question_hash=question_hash(question),
            keyword_hashes=keyword_hashes(question),
            timestamp=timestamp,
            result=result,
            engine_version="2.1.0",
        )

    return _make
