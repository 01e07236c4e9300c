"""
Decision scoring: one branch per option cardinality, plus confidence refinement.

Binary (exactly two options)
----------------------------
    score = 0.5
          + polarity                * w.sentiment      (0.20)
          + decision_bias           * w.temporal       (0.25)
          + recommendation_strength * w.pattern        (0.30)
          + urgency_factor          * w.contextual     (0.15)
          + U(-0.5, 0.5)            * w.randomization  (0.10)
    clamped to [0, 1];  choice = options[1] if score > 0.5 else options[0]
    raw confidence = |score − 0.5| · 2

Multiple choice (one option, or more than two)
----------------------------------------------
    score[i] = U(0, 1)
             + polarity      * w.sentiment * U(0.5, 1.0)
             + decision_bias * w.temporal  * U(0.7, 1.0)
             + option_bias[i]
    choice = arg-max;  raw confidence = (max − min) / max  (0 when max ≤ 0)

Open-ended (no options)
-----------------------
    One of four guidance templates, each with a uniformly chosen phrase.
    Confidence is fixed at 0.75 and is not refined.

Refinement (binary and multiple choice)
---------------------------------------
    + 0.10 if historical_accuracy > 0.8
    + 0.15 if personal_alignment  > 0.7
    + 0.10 if contextual clarity  > 0.6
    clamped to [0, 1]

Every random draw comes from the ``random.Random`` passed in, so a seeded
generator makes each branch reproducible.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Optional

from daily_decider.config import WeightsConfig
from daily_decider.models.signals import DecisionFactors
from daily_decider.taxonomy.decision_taxonomy import DecisionType

OPEN_ENDED_CONFIDENCE = 0.75

FOCUS_AREAS = (
    "the long-term benefits", "immediate impact", "personal growth",
    "practical considerations", "emotional well-being",
)
APPROACHES = ("analytical", "creative", "systematic", "intuitive", "collaborative")
KEY_FACTORS = ("timing", "resources", "relationships", "personal values", "future goals")
ACTION_TYPES = (
    "careful planning", "bold action", "seeking advice",
    "gathering more information", "trusting your instincts",
)

# (template, phrase pool for its single placeholder)
OPEN_ENDED_TEMPLATES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Based on your question, I suggest focusing on {phrase}", FOCUS_AREAS),
    ("Consider approaching this from a {phrase} perspective", APPROACHES),
    ("The key factor here seems to be {phrase}", KEY_FACTORS),
    ("Your best path forward likely involves {phrase}", ACTION_TYPES),
)


@dataclass(frozen=True)
class BranchDecision:
    """Outcome of one scoring branch, before refinement and text generation.

    Attributes:
        decision_type: Branch that produced this outcome.
        choice:        Chosen option, or guidance text when open-ended.
        alternatives:  Options other than ``choice``.
        confidence:    Raw, branch-specific confidence in [0, 1].
        score:         Binary score in [0, 1]; ``None`` for other branches.
        scores:        Per-option scores for multiple choice.
        winner_index:  Index of ``choice`` in the option list, if any.
    """

    decision_type: DecisionType
    choice: str
    alternatives: list[str]
    confidence: float
    score: Optional[float] = None
    scores: list[float] = field(default_factory=list)
    winner_index: Optional[int] = None


def score_binary(
    options: list[str],
    factors: DecisionFactors,
    weights: WeightsConfig,
    rng: random.Random,
) -> BranchDecision:
    """Weighted-sum score between ``options[0]`` (≤ 0.5) and ``options[1]`` (> 0.5)."""
    score = 0.5
    score += factors.sentiment.polarity * weights.sentiment
    score += factors.temporal.decision_bias * weights.temporal
    score += factors.pattern.recommendation_strength * weights.pattern
    score += factors.contextual.urgency_factor * weights.contextual
    score += (rng.random() - 0.5) * weights.randomization
    score = _clamp(score, 0.0, 1.0)

    index = 1 if score > 0.5 else 0
    choice = options[index]
    return BranchDecision(
        decision_type=DecisionType.BINARY,
        choice=choice,
        alternatives=alternatives_to(options, choice),
        confidence=_clamp(abs(score - 0.5) * 2.0, 0.0, 1.0),
        score=score,
        winner_index=index,
    )


def alternatives_to(options: list[str], choice: str) -> list[str]:
    """Options other than ``choice``, compared by value.

    A duplicate of the chosen option is dropped along with it, so
    ``["Yes", "Yes"]`` leaves no alternatives.
    """
    return [o for o in options if o != choice]


def score_multiple_choice(
    options: list[str],
    factors: DecisionFactors,
    weights: WeightsConfig,
    rng: random.Random,
) -> BranchDecision:
    """Random base score per option plus jittered signal adjustments; arg-max wins."""
    polarity = factors.sentiment.polarity
    bias = factors.temporal.decision_bias

    scores: list[float] = []
    for i in range(len(options)):
        s = rng.random()
        s += polarity * weights.sentiment * (rng.random() * 0.5 + 0.5)
        s += bias * weights.temporal * (rng.random() * 0.3 + 0.7)
        s += factors.pattern.bias_for(i)
        scores.append(s)

    best = max(scores)
    worst = min(scores)
    winner = scores.index(best)
    confidence = (best - worst) / best if best > 0 else 0.0

    choice = options[winner]
    return BranchDecision(
        decision_type=DecisionType.MULTIPLE_CHOICE,
        choice=choice,
        alternatives=alternatives_to(options, choice),
        confidence=_clamp(confidence, 0.0, 1.0),
        scores=scores,
        winner_index=winner,
    )


def generate_open_ended(rng: random.Random) -> BranchDecision:
    """Pick a guidance template and fill it with a uniformly chosen phrase."""
    template, pool = rng.choice(OPEN_ENDED_TEMPLATES)
    return BranchDecision(
        decision_type=DecisionType.OPEN_ENDED,
        choice=template.format(phrase=rng.choice(pool)),
        alternatives=[],
        confidence=OPEN_ENDED_CONFIDENCE,
    )


def refine_confidence(raw: float, factors: DecisionFactors) -> float:
    """Apply the accuracy / alignment / clarity bonuses and clamp to [0, 1]."""
    confidence = raw
    if factors.pattern.historical_accuracy > 0.8:
        confidence += 0.10
    if factors.personal_alignment > 0.7:
        confidence += 0.15
    if factors.contextual.clarity > 0.6:
        confidence += 0.10
    return _clamp(confidence, 0.0, 1.0)


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
