"""
Enumerations shared by the analysers, the models and the engine.

Temporal buckets (``TimeOfDay``, ``DayOfWeek``, ``Season``, ``MoonPhase``) key
the static lookup tables in ``analysis/temporal.py``. The remaining enums label
lexical and structural properties of a decision request.

This module has NO imports from any other ``daily_decider`` package.
"""

from enum import StrEnum


class TimeOfDay(StrEnum):
    """Wall-clock bucket of the request hour."""

    MORNING = "morning"
    """05:00–11:59."""

    AFTERNOON = "afternoon"
    """12:00–16:59."""

    EVENING = "evening"
    """17:00–21:59."""

    NIGHT = "night"
    """22:00–04:59."""


class DayOfWeek(StrEnum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class Season(StrEnum):
    """Northern-hemisphere meteorological season."""

    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"


class MoonPhase(StrEnum):
    """Coarse lunar phase derived from days since a reference new moon."""

    NEW = "new"
    WAXING = "waxing"
    FULL = "full"
    WANING = "waning"


class SentimentCategory(StrEnum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class ComplexityLevel(StrEnum):
    """Question complexity by word count: <5 simple, <15 medium, else complex."""

    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class QuestionType(StrEnum):
    """Surface form of the question text."""

    QUESTION = "question"
    """Contains a question mark."""

    DECISION = "decision"
    """Phrased with "should" but no question mark."""

    CHOICE = "choice"
    """Offers alternatives with "or"."""

    STATEMENT = "statement"
    """None of the above."""


class DecisionType(StrEnum):
    """Scoring branch, selected by option count."""

    OPEN_ENDED = "open_ended"
    BINARY = "binary"
    MULTIPLE_CHOICE = "multiple_choice"

    @classmethod
    def for_option_count(cls, count: int) -> "DecisionType":
        if count == 0:
            return cls.OPEN_ENDED
        if count == 2:
            return cls.BINARY
        return cls.MULTIPLE_CHOICE
