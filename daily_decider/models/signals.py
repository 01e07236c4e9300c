"""
Analytical signal models.

Each analyser in ``daily_decider.analysis`` returns one of these frozen models.
``DecisionFactors`` bundles them for a single request and is echoed back to the
caller inside ``DecisionResult.factors``.

Range checks live here so that no analyser can hand an out-of-range value to
the scorer: polarity in [-1, 1], decision bias in [-0.5, 0.5], everything else
in [0, 1].
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from daily_decider.taxonomy.decision_taxonomy import (
    ComplexityLevel,
    DayOfWeek,
    MoonPhase,
    QuestionType,
    Season,
    SentimentCategory,
    TimeOfDay,
)


class SentimentScore(BaseModel):
    """Lexical polarity of a piece of text.

    Attributes:
        polarity:          (positive − negative) / max(1, positive + negative).
        category:          Sign of ``polarity``; zero is neutral.
        positive_matches:  Number of positive lexicon hits.
        negative_matches:  Number of negative lexicon hits.
    """

    model_config = ConfigDict(frozen=True)

    polarity: float = Field(0.0, ge=-1.0, le=1.0)
    category: SentimentCategory = SentimentCategory.NEUTRAL
    positive_matches: int = 0
    negative_matches: int = 0


class TemporalFactors(BaseModel):
    """Clock-derived factors for one instant.

    Attributes:
        timestamp:        The wall-clock datetime that was analysed.
        time_of_day:      Hour bucket.
        day_of_week:      Weekday name.
        season:           Season of the month.
        moon_phase:       Lunar phase proxy.
        combined_factors: Factor name → mean across the four lookup tables.
        overall_score:    Mean of ``combined_factors``.
        decision_bias:    Lean toward action (+) or caution (−), in [-0.5, 0.5].
        recommendations:  Timing advice sentences.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    time_of_day: TimeOfDay
    day_of_week: DayOfWeek
    season: Season
    moon_phase: MoonPhase
    combined_factors: dict[str, float]
    overall_score: float = Field(ge=0.0, le=1.0)
    decision_bias: float = Field(ge=-0.5, le=0.5)
    recommendations: list[str] = []

    @field_validator("combined_factors")
    @classmethod
    def validate_factor_range(cls, v: dict[str, float]) -> dict[str, float]:
        for name, value in v.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"factor '{name}' must be in [0, 1], got {value}.")
        return v

    def factor(self, name: str, default: float = 0.5) -> float:
        """Return a combined factor by name, or ``default`` when absent."""
        return self.combined_factors.get(name, default)


class DecisionWindow(BaseModel):
    """One candidate day in an optimal-window lookahead."""

    model_config = ConfigDict(frozen=True)

    window_date: date
    score: float
    time_of_day: TimeOfDay
    factors: dict[str, float]


class OptimalWindow(BaseModel):
    """Best day (plus two runners-up) over a 7-day static lookahead."""

    model_config = ConfigDict(frozen=True)

    window_date: date
    score: float
    time_of_day: TimeOfDay
    reasoning: str
    factors: dict[str, float]
    alternative_windows: list[DecisionWindow]


class PatternSignal(BaseModel):
    """Similarity of the current question to recorded decisions.

    Attributes:
        question_hash:           Rolling-hash signature of the question.
        recommendation_strength: Grows with match count and recency, in [0, 1].
        option_bias:             Per-option nudge, parallel to the option list.
        historical_accuracy:     How often past picks would still apply.
        match_count:             Number of matching history records.
    """

    model_config = ConfigDict(frozen=True)

    question_hash: str = ""
    recommendation_strength: float = Field(0.0, ge=0.0, le=1.0)
    option_bias: list[float] = []
    historical_accuracy: float = Field(0.5, ge=0.0, le=1.0)
    match_count: int = 0

    def bias_for(self, index: int) -> float:
        """Option bias at ``index``; zero when the index is out of range."""
        if 0 <= index < len(self.option_bias):
            return self.option_bias[index]
        return 0.0


class ContextualFactors(BaseModel):
    """Request-level context: urgency, clarity and framing of the question."""

    model_config = ConfigDict(frozen=True)

    urgency_factor: float = Field(0.0, ge=0.0, le=1.0)
    clarity: float = Field(0.5, ge=0.0, le=1.0)
    question_type: QuestionType = QuestionType.STATEMENT
    guidance: Optional[str] = None


class ComplexityAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: ComplexityLevel
    word_count: int
    option_count: int = 0


class DecisionFactors(BaseModel):
    """Every signal gathered for one request."""

    model_config = ConfigDict(frozen=True)

    temporal: TemporalFactors
    sentiment: SentimentScore
    pattern: PatternSignal
    contextual: ContextualFactors
    complexity: ComplexityAssessment
    personal_alignment: float = Field(0.5, ge=0.0, le=1.0)
