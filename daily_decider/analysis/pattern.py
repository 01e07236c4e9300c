"""
Pattern matching against the bounded decision history.

Questions are never stored as text. A record carries the rolling hash of the
normalized question (lower-cased, whitespace collapsed; hashed over UTF-16
code units) plus the hashes of its content words, and similarity is
computed over those hashes only:

    similarity = 1.0                              if question hashes are equal
               = |kw ∩ kw'| / |kw ∪ kw'|          otherwise (Jaccard)

A record matches when similarity >= ``similarity_threshold``. Each match is
weighted by recency:

    weight = similarity · 0.5 ^ (age_days / half_life_days)

    recommendation_strength = min(1, Σ weight / saturation)
    historical_accuracy     = Σ weight[pick still offered] / Σ weight
                              (open-ended: weighted mean past confidence;
                               0.5 when nothing matches)
    option_bias[i]          = 0.2 · Σ weight·confidence[picked option i] / Σ weight

The 32-bit rolling hash collides; a collision simply counts as a match. The
signal is a heuristic, not an exact-match guarantee.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from daily_decider.analysis.sentiment import tokenize
from daily_decider.models.decision import DecisionRecord
from daily_decider.models.signals import PatternSignal
from daily_decider.utils.time_utils import age_days, utcnow

logger = logging.getLogger(__name__)

MAX_OPTION_BIAS = 0.2
NEUTRAL_ACCURACY = 0.5

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

STOPWORDS: frozenset[str] = frozenset({
    "a", "an", "the", "i", "me", "my", "we", "you", "your", "it", "is", "are",
    "am", "be", "to", "of", "and", "or", "in", "on", "at", "for", "with",
    "should", "would", "could", "do", "does", "what", "which", "how", "this",
    "that", "today", "now",
})


# ── Hashing ───────────────────────────────────────────────────────────────────

def rolling_hash(text: str) -> str:
    """31-multiplier rolling hash, wrapped to signed 32 bits, rendered base-36.

    Runs over UTF-16 code units, so a character outside the Basic
    Multilingual Plane (an emoji, say) contributes its two surrogates.
    """
    h = 0
    for unit in _utf16_units(text):
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(h)


def _utf16_units(text: str) -> list[int]:
    data = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2)]


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return sign + "".join(reversed(digits))


def normalize_question(question: str) -> str:
    """Lower-case and collapse whitespace."""
    return " ".join(question.lower().split())


def question_hash(question: str) -> str:
    """Signature stored as ``DecisionRecord.question_hash``.

    Hashes the normalized question, so questions differing only in case or
    spacing share a signature.
    """
    return rolling_hash(normalize_question(question))


def keyword_hashes(question: str) -> list[str]:
    """Sorted, de-duplicated hashes of the question's content words."""
    words = {w for w in tokenize(question) if w not in STOPWORDS and len(w) > 1}
    return sorted({rolling_hash(w) for w in words})


# ── Matcher ───────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PatternQuery:
    """Input to ``PatternMatcher.analyze``."""

    question: str
    history: Sequence[DecisionRecord] = ()
    options: list[str] = field(default_factory=list)
    now: Optional[datetime] = None


@dataclass
class _Match:
    record: DecisionRecord
    weight: float


class PatternMatcher:
    """Compares a question with recorded decisions.

    Args:
        similarity_threshold:   Minimum Jaccard overlap for a non-identical match.
        recency_half_life_days: Age at which a match counts half.
        saturation:             Summed weight mapped to strength 1.0.
    """

    def __init__(
        self,
        similarity_threshold: float = 0.5,
        recency_half_life_days: float = 7.0,
        saturation: float = 5.0,
    ) -> None:
        self.similarity_threshold = similarity_threshold
        self.recency_half_life_days = recency_half_life_days
        self.saturation = saturation

    def analyze(self, query: PatternQuery) -> PatternSignal:
        return self.find_patterns(query.question, query.history, query.options, query.now)

    def find_patterns(
        self,
        question: str,
        history: Sequence[DecisionRecord],
        options: Optional[list[str]] = None,
        now: Optional[datetime] = None,
    ) -> PatternSignal:
        """Build a ``PatternSignal`` for ``question`` against ``history``.

        Args:
            question: The current question text.
            history:  Recorded decisions, oldest first.
            options:  Current option list; ``option_bias`` is parallel to it.
            now:      Reference time for recency; defaults to current UTC.

        Returns:
            ``PatternSignal``; neutral (zero strength and bias, 0.5 accuracy)
            when nothing in ``history`` matches.
        """
        options = list(options or [])
        now = now or utcnow()
        q_hash = question_hash(question)
        q_keywords = set(keyword_hashes(question))

        matches: list[_Match] = []
        for record in history:
            similarity = self._similarity(q_hash, q_keywords, record)
            if similarity < self.similarity_threshold:
                continue
            decay = 0.5 ** (age_days(record.timestamp, now) / self.recency_half_life_days)
            matches.append(_Match(record=record, weight=similarity * decay))

        if not matches:
            return PatternSignal(
                question_hash=q_hash,
                option_bias=[0.0] * len(options),
            )

        total = sum(m.weight for m in matches)
        strength = min(1.0, total / self.saturation)

        if total <= 0:
            accuracy = NEUTRAL_ACCURACY
        elif options:
            still_offered = sum(m.weight for m in matches if m.record.result.decision in options)
            accuracy = still_offered / total
        else:
            accuracy = sum(m.weight * m.record.result.confidence for m in matches) / total

        option_bias = [0.0] * len(options)
        if total > 0:
            for i, option in enumerate(options):
                picked = sum(
                    m.weight * m.record.result.confidence
                    for m in matches
                    if m.record.result.decision == option
                )
                option_bias[i] = MAX_OPTION_BIAS * picked / total

        logger.debug(
            "Pattern match | hash=%s matches=%d strength=%.3f accuracy=%.3f",
            q_hash, len(matches), strength, accuracy,
        )
        return PatternSignal(
            question_hash=q_hash,
            recommendation_strength=strength,
            option_bias=option_bias,
            historical_accuracy=max(0.0, min(1.0, accuracy)),
            match_count=len(matches),
        )

    @staticmethod
    def _similarity(q_hash: str, q_keywords: set[str], record: DecisionRecord) -> float:
        if record.question_hash == q_hash:
            return 1.0
        other = set(record.keyword_hashes)
        if not q_keywords or not other:
            return 0.0
        return len(q_keywords & other) / len(q_keywords | other)
