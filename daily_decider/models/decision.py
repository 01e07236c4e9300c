"""
Decision request, result and history record models.

``DecisionRequest`` is what a caller hands the engine; ``DecisionResult`` is
what comes back, always syntactically valid even when the engine fell back.
``DecisionRecord`` is the history entry appended after each decision; it
stores the question only as hashes, never as text.

All three are frozen; a recorded decision is never rewritten.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from daily_decider.models.signals import DecisionFactors
from daily_decider.taxonomy.decision_taxonomy import DecisionType

FALLBACK_ALGORITHM = "fallback"


class DecisionContext(BaseModel):
    """Situational context supplied with a request.

    Attributes:
        timestamp:         Epoch milliseconds of the request; ``None`` = now.
        session_id:        Caller session; generated by the engine when absent.
        time_zone:         IANA zone for interpreting ``timestamp``; ``None``
                           uses the engine default.
        session_decisions: Decisions the caller has already made this session.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: Optional[float] = None
    session_id: Optional[str] = Field(None, alias="sessionId")
    time_zone: Optional[str] = Field(None, alias="timeZone")
    session_decisions: int = Field(0, ge=0, alias="sessionDecisions")


class DecisionRequest(BaseModel):
    """Question plus optional discrete options plus context.

    No validation beyond types: an empty question or an odd option count
    still yields a (low-quality) result rather than an error.
    """

    model_config = ConfigDict(frozen=True)

    question: str
    options: list[str] = []
    context: DecisionContext = DecisionContext()

    @property
    def decision_type(self) -> DecisionType:
        return DecisionType.for_option_count(len(self.options))


class DecisionResult(BaseModel):
    """The engine's answer.

    Attributes:
        decision:               Chosen option, or guidance text when open-ended.
        reasoning:              Generated rationale.
        confidence:             Self-reported certainty in [0, 1].
        factors:                Signals used; ``None`` on the fallback path.
        alternatives:           Options not chosen.
        follow_up_suggestions:  Next-step advice.
        processing_duration_ms: Wall time from receipt to return.
        engine_version:         Version of the engine that produced this result.
        algorithm:              ``engine_version`` normally, ``"fallback"`` otherwise.
        decision_type:          Scoring branch taken.
        session_id:             Session the decision was attributed to.
    """

    model_config = ConfigDict(frozen=True)

    decision: str
    reasoning: str
    confidence: float = Field(ge=0.0, le=1.0)
    factors: Optional[DecisionFactors] = None
    alternatives: list[str] = []
    follow_up_suggestions: list[str] = []
    processing_duration_ms: float = Field(0.0, ge=0.0)
    engine_version: str
    algorithm: str
    decision_type: DecisionType
    session_id: Optional[str] = None

    @model_validator(mode="after")
    def validate_alternatives(self) -> "DecisionResult":
        if self.decision_type != DecisionType.OPEN_ENDED and self.decision in self.alternatives:
            raise ValueError(
                f"alternatives must not include the chosen option '{self.decision}'."
            )
        return self

    @property
    def is_fallback(self) -> bool:
        return self.algorithm == FALLBACK_ALGORITHM


class DecisionRecord(BaseModel):
    """One entry in the bounded decision history.

    Attributes:
        record_id:      DB PK when stored in SQLite; ``None`` in memory.
        session_id:     Session that made the decision.
        question_hash:  Rolling hash of the normalized question.
        keyword_hashes: Rolling hashes of the question's content words.
        timestamp:      Epoch milliseconds when the decision was recorded.
        result:         The returned ``DecisionResult``.
        engine_version: Engine version at record time.
    """

    model_config = ConfigDict(frozen=True)

    record_id: Optional[int] = None
    session_id: str
    question_hash: str
    keyword_hashes: list[str] = []
    timestamp: int
    result: DecisionResult
    engine_version: str
