"""
Per-session preference profile.

``UserProfile`` is the only mutable model in the system: the profile store
updates its bookkeeping after every decision. ``historical_satisfaction`` and
``adaptation_rate`` are carried for callers but no satisfaction signal ever
feeds back into them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from daily_decider.taxonomy.decision_taxonomy import ComplexityLevel

UNIFORM_TIME_WEIGHT = 1.0 / 3.0

DEFAULT_TIME_PREFERENCES: dict[str, float] = {
    "morning":   UNIFORM_TIME_WEIGHT,
    "afternoon": UNIFORM_TIME_WEIGHT,
    "evening":   UNIFORM_TIME_WEIGHT,
}

DEFAULT_PERSONALITY_TRAITS: dict[str, float] = {
    "analytical": 0.5,
    "creative":   0.5,
    "decisive":   0.5,
    "cautious":   0.5,
}


class UserProfile(BaseModel):
    """Adaptive preference model for one session.

    Attributes:
        decision_style:          Free-form label, "balanced" by default.
        risk_tolerance:          0 (averse) – 1 (seeking).
        preferred_complexity:    Complexity level this session asks about most.
        time_preferences:        Time-of-day → weight; weights sum to 1.
        personality_traits:      Trait → strength in [0, 1].
        historical_satisfaction: Carried, never learned.
        adaptation_rate:         Step size for time-preference updates.
        decision_count:          Decisions recorded against this profile.
        complexity_counts:       Complexity level → times seen.
        last_decision_at:        UTC datetime of the most recent update.
    """

    # Not frozen: the profile store mutates it after each decision
    model_config = ConfigDict(frozen=False, validate_assignment=True)

    decision_style: str = "balanced"
    risk_tolerance: float = Field(0.5, ge=0.0, le=1.0)
    preferred_complexity: ComplexityLevel = ComplexityLevel.MEDIUM
    time_preferences: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_TIME_PREFERENCES)
    )
    personality_traits: dict[str, float] = Field(
        default_factory=lambda: dict(DEFAULT_PERSONALITY_TRAITS)
    )
    historical_satisfaction: float = Field(0.75, ge=0.0, le=1.0)
    adaptation_rate: float = Field(0.1, ge=0.0, le=1.0)
    decision_count: int = 0
    complexity_counts: dict[str, int] = Field(default_factory=dict)
    last_decision_at: Optional[datetime] = None

    @field_validator("time_preferences")
    @classmethod
    def validate_time_preferences(cls, v: dict[str, float]) -> dict[str, float]:
        if v and abs(sum(v.values()) - 1.0) > 1e-6:
            raise ValueError(f"time_preferences must sum to 1, got {sum(v.values()):.6f}.")
        return v

    @field_validator("personality_traits")
    @classmethod
    def validate_traits(cls, v: dict[str, float]) -> dict[str, float]:
        for trait, value in v.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"trait '{trait}' must be in [0, 1], got {value}.")
        return v
