"""
Per-session profile store and personal-alignment scoring.

Profiles are created lazily on first use and updated after every decision.
The update records context only: decision count, complexity mix, time-of-day
habit. No satisfaction signal exists, so ``historical_satisfaction`` never
changes and ``adaptation_rate`` is used solely as the time-preference step.

Personal alignment
------------------
    alignment = 0.5
              + 0.2                      if complexity level == preferred_complexity
              + 0.5 · (w_tod − 1/3)      w_tod = profile weight for the current time of day
    clamped to [0, 1]; a time of day missing from the profile uses the 1/3 baseline.
"""

from __future__ import annotations

import logging
from typing import Optional

from daily_decider.engine.state import InMemoryProfileBackend, ProfileBackend
from daily_decider.models.decision import DecisionResult
from daily_decider.models.profile import UNIFORM_TIME_WEIGHT, UserProfile
from daily_decider.models.signals import ComplexityAssessment, DecisionFactors, TemporalFactors
from daily_decider.taxonomy.decision_taxonomy import ComplexityLevel
from daily_decider.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class UserProfileStore:
    """Reads, lazily creates and updates session profiles via a ``ProfileBackend``."""

    def __init__(self, backend: Optional[ProfileBackend] = None) -> None:
        self.backend = backend if backend is not None else InMemoryProfileBackend()

    @staticmethod
    def create_default() -> UserProfile:
        """Risk 0.5, uniform 1/3 time preferences, mid-range traits."""
        return UserProfile()

    def get_profile(self, session_id: str) -> UserProfile:
        """Return the session's profile, creating and storing a default one if absent."""
        profile = self.backend.get(session_id)
        if profile is None:
            profile = self.create_default()
            self.backend.put(session_id, profile)
            logger.debug("Created default profile | session=%s", session_id)
        return profile

    def update(self, session_id: str, factors: DecisionFactors, result: DecisionResult) -> UserProfile:
        """Fold one decision's context into the session profile and store it.

        Args:
            session_id: Session to update.
            factors:    Signals gathered for the decision.
            result:     The returned result (recorded, not learned from).

        Returns:
            The updated profile.
        """
        profile = self.get_profile(session_id)

        counts = dict(profile.complexity_counts)
        level = factors.complexity.level.value
        counts[level] = counts.get(level, 0) + 1
        profile.complexity_counts = counts
        profile.preferred_complexity = _most_frequent(counts, profile.preferred_complexity)

        tod = factors.temporal.time_of_day.value
        if tod in profile.time_preferences:
            profile.time_preferences = _shift_toward(
                profile.time_preferences, tod, profile.adaptation_rate
            )

        profile.decision_count += 1
        profile.last_decision_at = utcnow()

        self.backend.put(session_id, profile)
        logger.debug(
            "Profile updated | session=%s decisions=%d preferred=%s confidence=%.2f",
            session_id, profile.decision_count, profile.preferred_complexity,
            result.confidence,
        )
        return profile


def calculate_personal_alignment(
    complexity: ComplexityAssessment,
    temporal: TemporalFactors,
    profile: UserProfile,
) -> float:
    """How well the current request fits the session's habits, in [0, 1]."""
    alignment = 0.5
    if complexity.level == profile.preferred_complexity:
        alignment += 0.2

    weight = profile.time_preferences.get(temporal.time_of_day.value, UNIFORM_TIME_WEIGHT)
    alignment += (weight - UNIFORM_TIME_WEIGHT) * 0.5

    return max(0.0, min(1.0, alignment))


# ── Helpers ───────────────────────────────────────────────────────────────────

def _shift_toward(weights: dict[str, float], key: str, rate: float) -> dict[str, float]:
    """Move ``rate`` of the mass toward ``key``; the result still sums to 1."""
    shifted = {
        name: (1.0 - rate) * w + (rate if name == key else 0.0)
        for name, w in weights.items()
    }
    total = sum(shifted.values())
    return {name: w / total for name, w in shifted.items()}


def _most_frequent(counts: dict[str, int], current: ComplexityLevel) -> ComplexityLevel:
    # Ties keep the current preference
    best = max(counts.values())
    if counts.get(current.value, 0) == best:
        return current
    for level in ComplexityLevel:
        if counts.get(level.value, 0) == best:
            return level
    return current
