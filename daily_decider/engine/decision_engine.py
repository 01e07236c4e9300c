"""
Decision engine: the orchestrator behind ``make_decision``.

Per-call lifecycle
------------------
    Received → Analyzed → Scored → Recorded → Returned
                  └──────────┴──→ FallbackReturned

1. Receive   — build a ``DecisionRequest``; generate a session id if none.
2. Analyze   — temporal, sentiment, pattern, contextual, complexity signals;
               fetch (or lazily create) the session profile; personal alignment.
3. Score     — branch on option count (see ``engine/scorer.py``).
4. Refine    — confidence bonuses (not applied to open-ended guidance).
5. Narrate   — reasoning and follow-up suggestions.
6. Record    — append a ``DecisionRecord`` and update the profile.
7. Return    — ``DecisionResult`` with processing time measured from step 1.

Any exception in steps 2–5 is logged and answered by the fallback decision.
Failures in step 6 are logged and swallowed: the computed result is returned
regardless and nothing is retried.

The engine owns no globals. History and profiles live in the injected
``EngineState``; randomness comes from an injectable ``random.Random``; each
analyser can be swapped for a stub that satisfies ``Analyzer``.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Any, Mapping, Optional, Union
from uuid import uuid4

from daily_decider.analysis.base import Analyzer
from daily_decider.analysis.context import ContextAnalyzer, ContextQuery, assess_complexity
from daily_decider.analysis.pattern import PatternMatcher, PatternQuery, keyword_hashes, question_hash
from daily_decider.analysis.sentiment import SentimentAnalyzer
from daily_decider.analysis.temporal import TemporalProcessor
from daily_decider.config import AppConfig
from daily_decider.engine.fallback import fallback_decision
from daily_decider.engine.narrative import (
    OPEN_ENDED_REASONING,
    build_follow_ups,
    build_multi_choice_reasoning,
    build_reasoning,
)
from daily_decider.engine.profile import UserProfileStore, calculate_personal_alignment
from daily_decider.engine.scorer import (
    BranchDecision,
    generate_open_ended,
    refine_confidence,
    score_binary,
    score_multiple_choice,
)
from daily_decider.engine.state import EngineState
from daily_decider.models.decision import (
    DecisionContext,
    DecisionRecord,
    DecisionRequest,
    DecisionResult,
)
from daily_decider.models.signals import (
    ContextualFactors,
    DecisionFactors,
    PatternSignal,
    SentimentScore,
    TemporalFactors,
)
from daily_decider.taxonomy.decision_taxonomy import DecisionType
from daily_decider.utils.logging import decision_log_context
from daily_decider.utils.time_utils import now_ms, resolve_timestamp

logger = logging.getLogger(__name__)

ContextLike = Union[DecisionContext, Mapping[str, Any], None]


def generate_session_id() -> str:
    """``dd_<epoch-ms>_<9 hex chars>``."""
    return f"dd_{now_ms()}_{uuid4().hex[:9]}"


class DecisionEngine:
    """Multi-signal decision recommender.

    Args:
        config:    Application config; defaults to ``AppConfig()``.
        state:     History + profile state; defaults to fresh in-memory state
                   sized from ``config.engine``.
        rng:       Random source for the stochastic branches; defaults to
                   ``random.Random(config.engine.seed)``.
        sentiment: Analyzer[str, SentimentScore].
        temporal:  Analyzer[datetime, TemporalFactors].
        pattern:   Analyzer[PatternQuery, PatternSignal].
        context:   Analyzer[ContextQuery, ContextualFactors].
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        state: Optional[EngineState] = None,
        rng: Optional[random.Random] = None,
        sentiment: Optional[Analyzer[str, SentimentScore]] = None,
        temporal: Optional[Analyzer[Any, TemporalFactors]] = None,
        pattern: Optional[Analyzer[PatternQuery, PatternSignal]] = None,
        context: Optional[Analyzer[ContextQuery, ContextualFactors]] = None,
    ) -> None:
        self.config = config or AppConfig()
        engine_cfg = self.config.engine

        self.state = state or EngineState.in_memory(
            cap=engine_cfg.history_cap, trim_to=engine_cfg.history_trim_to
        )
        self.profiles = UserProfileStore(self.state.profiles)
        self.rng = rng or random.Random(engine_cfg.seed)

        self.sentiment = sentiment or SentimentAnalyzer()
        self.temporal = temporal or TemporalProcessor(
            time_zone=engine_cfg.time_zone,
            reference_new_moon=engine_cfg.reference_new_moon,
            window_hour=engine_cfg.optimal_window_hour,
        )
        self.pattern = pattern or PatternMatcher(
            similarity_threshold=self.config.pattern.similarity_threshold,
            recency_half_life_days=self.config.pattern.recency_half_life_days,
            saturation=self.config.pattern.saturation,
        )
        self.context = context or ContextAnalyzer()

    @property
    def version(self) -> str:
        return self.config.engine.version

    # ── Public API ────────────────────────────────────────────────────────────

    def make_decision(
        self,
        question: str,
        options: Optional[list[str]] = None,
        context: ContextLike = None,
    ) -> DecisionResult:
        """Recommend a choice for ``question``.

        Args:
            question: Natural-language question.
            options:  0 (open-ended), 2 (binary) or more discrete options.
            context:  ``DecisionContext`` or a mapping with ``timestamp``
                      (epoch-ms), ``session_id``, ``time_zone``,
                      ``session_decisions``.

        Returns:
            A ``DecisionResult``. Never raises: malformed input and internal
            failures produce a fallback result instead.
        """
        start = time.perf_counter()
        option_list: list[str] = []
        try:
            option_list = _coerce_options(options)
            request = DecisionRequest(
                question=str(question or ""),
                options=option_list,
                context=_coerce_context(context),
            )
        except Exception:
            logger.warning("Malformed decision request; using fallback", exc_info=True)
            return self.fallback_decision(option_list, elapsed_ms=_elapsed_ms(start))
        return self.decide(request, started_at=start)

    def decide(self, request: DecisionRequest, started_at: Optional[float] = None) -> DecisionResult:
        """Run the full lifecycle for an already-built request."""
        start = started_at if started_at is not None else time.perf_counter()
        session_id = request.context.session_id or generate_session_id()

        with decision_log_context(session_id, self.version):
            try:
                factors = self.analyze_request(request, session_id)
                result = self._build_result(request, factors, session_id, start)
            except Exception:
                logger.warning("Decision analysis failed; using fallback", exc_info=True)
                return self.fallback_decision(
                    request.options, session_id=session_id, elapsed_ms=_elapsed_ms(start)
                )

            self._record(request, factors, result, session_id)

            result = result.model_copy(update={"processing_duration_ms": _elapsed_ms(start)})
            logger.info(
                "Decision made | type=%s confidence=%.2f duration_ms=%.2f",
                result.decision_type, result.confidence, result.processing_duration_ms,
            )
        return result

    def fallback_decision(
        self,
        options: list[str],
        session_id: Optional[str] = None,
        elapsed_ms: float = 0.0,
    ) -> DecisionResult:
        """Crash-proof default result; also usable after a caller-side timeout."""
        return fallback_decision(
            options,
            rng=self.rng,
            engine_version=self.version,
            session_id=session_id,
            processing_duration_ms=elapsed_ms,
        )

    # ── Stages ────────────────────────────────────────────────────────────────

    def analyze_request(self, request: DecisionRequest, session_id: str) -> DecisionFactors:
        """Gather every signal for ``request`` (step 2)."""
        ctx = request.context
        moment = resolve_timestamp(ctx.timestamp, ctx.time_zone or self.config.engine.time_zone)

        temporal = self.temporal.analyze(moment)
        sentiment = self.sentiment.analyze(request.question)
        history = self.state.history.read_recent(self.config.engine.history_cap)
        pattern = self.pattern.analyze(
            PatternQuery(
                question=request.question,
                history=history,
                options=list(request.options),
                now=moment,
            )
        )
        contextual = self.context.analyze(
            ContextQuery(
                question=request.question,
                options=list(request.options),
                session_decisions=ctx.session_decisions,
            )
        )
        complexity = assess_complexity(request.question, request.options)

        profile = self.profiles.get_profile(session_id)
        alignment = calculate_personal_alignment(complexity, temporal, profile)

        return DecisionFactors(
            temporal=temporal,
            sentiment=sentiment,
            pattern=pattern,
            contextual=contextual,
            complexity=complexity,
            personal_alignment=alignment,
        )

    def _score(self, options: list[str], factors: DecisionFactors) -> BranchDecision:
        decision_type = DecisionType.for_option_count(len(options))
        if decision_type == DecisionType.OPEN_ENDED:
            return generate_open_ended(self.rng)
        if decision_type == DecisionType.BINARY:
            return score_binary(options, factors, self.config.weights, self.rng)
        return score_multiple_choice(options, factors, self.config.weights, self.rng)

    def _build_result(
        self,
        request: DecisionRequest,
        factors: DecisionFactors,
        session_id: str,
        start: float,
    ) -> DecisionResult:
        branch = self._score(list(request.options), factors)

        if branch.decision_type == DecisionType.OPEN_ENDED:
            confidence = branch.confidence
            reasoning = OPEN_ENDED_REASONING
        else:
            confidence = refine_confidence(branch.confidence, factors)
            if branch.decision_type == DecisionType.BINARY:
                reasoning = build_reasoning(factors, branch.confidence)
            else:
                reasoning = build_multi_choice_reasoning(
                    factors, branch, len(request.options)
                )

        return DecisionResult(
            decision=branch.choice,
            reasoning=reasoning,
            confidence=confidence,
            factors=factors,
            alternatives=branch.alternatives,
            follow_up_suggestions=build_follow_ups(branch.confidence, factors),
            processing_duration_ms=_elapsed_ms(start),
            engine_version=self.version,
            algorithm=self.version,
            decision_type=branch.decision_type,
            session_id=session_id,
        )

    def _record(
        self,
        request: DecisionRequest,
        factors: DecisionFactors,
        result: DecisionResult,
        session_id: str,
    ) -> None:
        """Append to history and update the profile; failures are logged only."""
        try:
            record = DecisionRecord(
                session_id=session_id,
                question_hash=question_hash(request.question),
                keyword_hashes=keyword_hashes(request.question),
                timestamp=now_ms(),
                result=result,
                engine_version=self.version,
            )
            self.state.history.append(record)
        except Exception:
            logger.warning(
                "Failed to record decision history (best effort)", exc_info=True
            )

        try:
            self.profiles.update(session_id, factors, result)
        except Exception:
            logger.warning(
                "Failed to update user profile (best effort)", exc_info=True
            )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _coerce_options(options: Any) -> list[str]:
    """Stringify each option; a missing value means open-ended.

    Raises:
        TypeError: If ``options`` is a bare string or not iterable.
    """
    if options is None:
        return []
    if isinstance(options, (str, bytes)):
        raise TypeError(f"options must be a sequence of strings, got {type(options).__name__}")
    return [str(o) for o in options]


def _coerce_context(context: ContextLike) -> DecisionContext:
    if context is None:
        return DecisionContext()
    if isinstance(context, DecisionContext):
        return context
    return DecisionContext.model_validate(dict(context))


def _elapsed_ms(start: float) -> float:
    return max(0.0, (time.perf_counter() - start) * 1000.0)
