"""
Crash-proof fallback decision.

Used when any analysis or scoring stage raises, and available to callers that
impose their own timeout. Never raises for any option list.

    2 options  → uniform pick, confidence 0.5
    1 or >2    → uniform pick, confidence 0.4
    0 options  → fixed suggestion, confidence 0.6
"""

from __future__ import annotations

import random
from typing import Optional

from daily_decider.models.decision import FALLBACK_ALGORITHM, DecisionResult
from daily_decider.taxonomy.decision_taxonomy import DecisionType

RETRY_SUGGESTION = "Try asking again for a more detailed analysis"
OPEN_ENDED_SUGGESTION = "Consider taking some time to think this through carefully"
BREAK_DOWN_SUGGESTION = "Break down your question into specific options"


def fallback_decision(
    options: list[str],
    rng: random.Random,
    engine_version: str,
    session_id: Optional[str] = None,
    processing_duration_ms: float = 0.0,
) -> DecisionResult:
    """Build a minimal, always-valid ``DecisionResult``."""
    decision_type = DecisionType.for_option_count(len(options))

    if decision_type == DecisionType.OPEN_ENDED:
        decision = OPEN_ENDED_SUGGESTION
        reasoning = "Open-ended guidance"
        confidence = 0.6
        follow_ups = [BREAK_DOWN_SUGGESTION]
    elif decision_type == DecisionType.BINARY:
        decision = options[1] if rng.random() > 0.5 else options[0]
        reasoning = "Random selection due to processing constraints"
        confidence = 0.5
        follow_ups = [RETRY_SUGGESTION]
    else:
        decision = rng.choice(options)
        reasoning = "Random selection from available options"
        confidence = 0.4
        follow_ups = [RETRY_SUGGESTION]

    return DecisionResult(
        decision=decision,
        reasoning=reasoning,
        confidence=confidence,
        factors=None,
        alternatives=[o for o in options if o != decision],
        follow_up_suggestions=follow_ups,
        processing_duration_ms=max(0.0, processing_duration_ms),
        engine_version=engine_version,
        algorithm=FALLBACK_ALGORITHM,
        decision_type=decision_type,
        session_id=session_id,
    )
