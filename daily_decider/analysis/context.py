"""
Request context analysis: urgency, clarity, question framing and complexity.

Urgency
-------
    0.25 per urgency keyword in the question
    + 0.05 per decision already made this session (capped at 0.20)
    clamped to [0, 1]

Clarity
-------
    0.50 baseline
    + 0.15 when the question contains "?"
    + 0.10 when it asks "should" or is framed as a choice
    + 0.10 when discrete options are supplied
    − 0.20 when the question is under 3 words or over 40 words
    clamped to [0, 1]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from daily_decider.analysis.sentiment import tokenize
from daily_decider.models.signals import ComplexityAssessment, ContextualFactors
from daily_decider.taxonomy.decision_taxonomy import ComplexityLevel, QuestionType

URGENCY_WORDS: frozenset[str] = frozenset({
    "now", "today", "urgent", "urgently", "asap", "tonight", "immediately",
    "deadline", "quickly", "soon",
})

_URGENCY_PER_WORD = 0.25
_URGENCY_PER_SESSION_DECISION = 0.05
_SESSION_URGENCY_CAP = 0.20


@dataclass(frozen=True)
class ContextQuery:
    """Input to ``ContextAnalyzer.analyze``."""

    question: str
    options: list[str] = field(default_factory=list)
    session_decisions: int = 0


def classify_question(question: str) -> QuestionType:
    """Classify the surface form: "?" > "should" > "or" > statement."""
    lowered = question.lower()
    if "?" in question:
        return QuestionType.QUESTION
    if "should" in lowered:
        return QuestionType.DECISION
    if " or " in f" {lowered} ":
        return QuestionType.CHOICE
    return QuestionType.STATEMENT


def assess_complexity(question: str, options: Optional[list[str]] = None) -> ComplexityAssessment:
    """Bucket a question by whitespace word count: <5 simple, <15 medium, else complex."""
    word_count = len(question.split())
    if word_count < 5:
        level = ComplexityLevel.SIMPLE
    elif word_count < 15:
        level = ComplexityLevel.MEDIUM
    else:
        level = ComplexityLevel.COMPLEX
    return ComplexityAssessment(
        level=level,
        word_count=word_count,
        option_count=len(options or []),
    )


def question_guidance(question: str, has_options: bool) -> Optional[str]:
    """Hint for reframing a question, or ``None`` when it reads fine."""
    lowered = question.lower()
    if "should i" in lowered and not has_options and " or " not in f" {lowered} ":
        return "Consider adding specific options to get more targeted guidance."
    if len(question) > 200:
        return "Try to keep your question focused for the best results."
    if "?" not in question and "should" not in lowered:
        return "Frame this as a decision you need to make for better guidance."
    return None


class ContextAnalyzer:
    """Derives ``ContextualFactors`` from the question text and session context."""

    def analyze(self, query: ContextQuery) -> ContextualFactors:
        words = tokenize(query.question)
        question_type = classify_question(query.question)

        urgency = _URGENCY_PER_WORD * sum(1 for w in words if w in URGENCY_WORDS)
        urgency += min(
            _SESSION_URGENCY_CAP,
            _URGENCY_PER_SESSION_DECISION * max(0, query.session_decisions),
        )

        word_count = len(query.question.split())
        clarity = 0.5
        if "?" in query.question:
            clarity += 0.15
        if question_type in (QuestionType.DECISION, QuestionType.CHOICE) or (
            "should" in query.question.lower()
        ):
            clarity += 0.10
        if query.options:
            clarity += 0.10
        if word_count < 3 or word_count > 40:
            clarity -= 0.20

        return ContextualFactors(
            urgency_factor=max(0.0, min(1.0, urgency)),
            clarity=max(0.0, min(1.0, clarity)),
            question_type=question_type,
            guidance=question_guidance(query.question, bool(query.options)),
        )
