"""
Reasoning and follow-up text for a decision.

Reasoning is deterministic template assembly: each named condition that fires
contributes one sentence, sentences are joined with ". ", and a generic
sentence is used when nothing fires.

    time of day   morning → "Morning energy favors decisive action"
                  evening → "Evening reflection supports thoughtful choices"
    polarity      > 0.3   → readiness   |  < -0.3 → address concerns first
    confidence    > 0.7   → strong alignment  |  < 0.3 → balanced either way
"""

from __future__ import annotations

from daily_decider.engine.scorer import BranchDecision
from daily_decider.models.signals import DecisionFactors
from daily_decider.taxonomy.decision_taxonomy import TimeOfDay

GENERIC_REASONING = "Based on current context and timing factors."
OPEN_ENDED_REASONING = (
    "This guidance considers your question's context, current timing, and potential outcomes."
)

FOLLOW_UP_GATHER = "Consider gathering more information before finalizing"
FOLLOW_UP_TIMEFRAME = "Set a specific timeframe for making this decision"
FOLLOW_UP_REFLECT = "Reflect on what might make this decision feel more positive"
FOLLOW_UP_REVISIT = "Check back in 24-48 hours to see how you feel about this choice"

LOW_CONFIDENCE_THRESHOLD = 0.6


def _signal_reasons(factors: DecisionFactors, confidence: float) -> list[str]:
    reasons: list[str] = []

    if factors.temporal.time_of_day == TimeOfDay.MORNING:
        reasons.append("Morning energy favors decisive action")
    elif factors.temporal.time_of_day == TimeOfDay.EVENING:
        reasons.append("Evening reflection supports thoughtful choices")

    polarity = factors.sentiment.polarity
    if polarity > 0.3:
        reasons.append("Your positive framing suggests readiness for this step")
    elif polarity < -0.3:
        reasons.append("Consider addressing underlying concerns first")

    if confidence > 0.7:
        reasons.append("Multiple factors align strongly with this choice")
    elif confidence < 0.3:
        reasons.append("This appears to be a balanced decision either way")

    return reasons


def build_reasoning(factors: DecisionFactors, confidence: float) -> str:
    """Binary-decision rationale from time of day, polarity and confidence band."""
    return ". ".join(_signal_reasons(factors, confidence)) or GENERIC_REASONING


def build_multi_choice_reasoning(
    factors: DecisionFactors,
    branch: BranchDecision,
    option_count: int,
) -> str:
    """Rationale naming the winner, the field size and any history nudge."""
    reasons = [f"'{branch.choice}' scored highest among {option_count} options"]
    if branch.winner_index is not None and factors.pattern.bias_for(branch.winner_index) > 0:
        reasons.append("Similar past decisions leaned toward this option")
    reasons.extend(_signal_reasons(factors, branch.confidence))
    return ". ".join(reasons)


def build_follow_ups(raw_confidence: float, factors: DecisionFactors) -> list[str]:
    """Next-step suggestions; the revisit reminder is always last."""
    suggestions: list[str] = []
    if raw_confidence < LOW_CONFIDENCE_THRESHOLD:
        suggestions.append(FOLLOW_UP_GATHER)
        suggestions.append(FOLLOW_UP_TIMEFRAME)
    if factors.sentiment.polarity < 0:
        suggestions.append(FOLLOW_UP_REFLECT)
    suggestions.append(FOLLOW_UP_REVISIT)
    return suggestions
