"""
Clock-derived decision factors.

Four categorical readings are taken from a wall-clock datetime:

    time of day   morning 05–12 | afternoon 12–17 | evening 17–22 | night
    day of week   monday … sunday
    season        spring Mar–May | summer Jun–Aug | fall Sep–Nov | winter
    moon phase    days since the reference new moon mod 29.5:
                  < 2 new | < 8 waxing | < 16 full | waning

Each reading selects a row from a static lookup table of named factors in
[0, 1]. ``combined_factors`` is the per-name mean over every table that defines
the name; ``overall_score`` is the mean of the combined factors.

Decision bias
-------------
    bias = 0.3·(clarity − 0.5) + 0.2·(energy − 0.5)
         + 0.2·(optimism − 0.5) + 0.1·(riskTolerance − 0.5)
         + time-of-day bonus + weekday bonus

clamped to [-0.5, 0.5]; a factor missing from the combined map counts as 0.5.
"""

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time
from typing import Optional

from daily_decider.models.signals import DecisionWindow, OptimalWindow, TemporalFactors
from daily_decider.taxonomy.decision_taxonomy import DayOfWeek, MoonPhase, Season, TimeOfDay
from daily_decider.utils.time_utils import TimestampLike, date_range, resolve_timestamp

logger = logging.getLogger(__name__)

LUNAR_CYCLE_DAYS = 29.5
DEFAULT_REFERENCE_NEW_MOON = date(2024, 1, 11)
LOOKAHEAD_DAYS = 7

# ── Lookup tables ─────────────────────────────────────────────────────────────

DAILY_PATTERNS: dict[TimeOfDay, dict[str, float]] = {
    TimeOfDay.MORNING: {
        "clarity": 0.9, "energy": 0.8, "creativity": 0.6, "analysis": 0.9,
        "riskTolerance": 0.7, "optimism": 0.8,
    },
    TimeOfDay.AFTERNOON: {
        "clarity": 0.7, "energy": 0.6, "creativity": 0.8, "analysis": 0.7,
        "riskTolerance": 0.6, "optimism": 0.6,
    },
    TimeOfDay.EVENING: {
        "clarity": 0.5, "energy": 0.4, "creativity": 0.9, "analysis": 0.8,
        "riskTolerance": 0.4, "optimism": 0.5,
    },
    TimeOfDay.NIGHT: {
        "clarity": 0.3, "energy": 0.2, "creativity": 0.7, "analysis": 0.6,
        "riskTolerance": 0.3, "optimism": 0.4,
    },
}

WEEKDAY_PATTERNS: dict[DayOfWeek, dict[str, float]] = {
    DayOfWeek.MONDAY:    {"motivation": 0.6, "stress": 0.8, "planning": 0.9, "risk": 0.5},
    DayOfWeek.TUESDAY:   {"motivation": 0.8, "stress": 0.6, "planning": 0.8, "risk": 0.7},
    DayOfWeek.WEDNESDAY: {"motivation": 0.7, "stress": 0.7, "planning": 0.7, "risk": 0.6},
    DayOfWeek.THURSDAY:  {"motivation": 0.8, "stress": 0.7, "planning": 0.6, "risk": 0.7},
    DayOfWeek.FRIDAY:    {"motivation": 0.9, "stress": 0.5, "planning": 0.5, "risk": 0.8},
    DayOfWeek.SATURDAY:  {"motivation": 0.7, "stress": 0.3, "planning": 0.8, "risk": 0.6},
    DayOfWeek.SUNDAY:    {"motivation": 0.5, "stress": 0.4, "planning": 0.9, "risk": 0.4},
}

SEASONAL_PATTERNS: dict[Season, dict[str, float]] = {
    Season.SPRING: {"energy": 0.8,  "optimism": 0.9,  "growth": 0.95, "risk": 0.7},
    Season.SUMMER: {"energy": 0.95, "optimism": 0.85, "growth": 0.8,  "risk": 0.8},
    Season.FALL:   {"energy": 0.6,  "optimism": 0.7,  "growth": 0.6,  "risk": 0.4},
    Season.WINTER: {"energy": 0.4,  "optimism": 0.5,  "growth": 0.7,  "risk": 0.3},
}

LUNAR_PATTERNS: dict[MoonPhase, dict[str, float]] = {
    MoonPhase.NEW:    {"intuition": 0.9, "newBeginnings": 0.95, "risk": 0.8},
    MoonPhase.WAXING: {"growth": 0.9, "momentum": 0.85, "risk": 0.7},
    MoonPhase.FULL:   {"energy": 0.95, "intensity": 0.9, "risk": 0.6},
    MoonPhase.WANING: {"reflection": 0.9, "release": 0.85, "risk": 0.5},
}

# (factor name, weight) pairs for the decision-bias blend
_BIAS_WEIGHTS: tuple[tuple[str, float], ...] = (
    ("clarity",       0.3),
    ("energy",        0.2),
    ("optimism",      0.2),
    ("riskTolerance", 0.1),
)

TIME_OF_DAY_BONUS: dict[TimeOfDay, float] = {
    TimeOfDay.MORNING:    0.15,
    TimeOfDay.AFTERNOON:  0.05,
    TimeOfDay.EVENING:   -0.05,
    TimeOfDay.NIGHT:     -0.15,
}

WEEKDAY_BONUS: dict[DayOfWeek, float] = {
    DayOfWeek.MONDAY:    -0.10,
    DayOfWeek.TUESDAY:    0.05,
    DayOfWeek.WEDNESDAY:  0.00,
    DayOfWeek.THURSDAY:   0.05,
    DayOfWeek.FRIDAY:     0.10,
    DayOfWeek.SATURDAY:   0.05,
    DayOfWeek.SUNDAY:    -0.05,
}

SEASONAL_INFLUENCE: dict[Season, dict[str, str]] = {
    Season.SPRING: {
        "description": "Spring brings renewal energy and optimism for new ventures",
        "bias": "Favors starting new projects and taking calculated risks",
        "caution": "Avoid overcommitting due to seasonal enthusiasm",
    },
    Season.SUMMER: {
        "description": "Summer energy supports active decisions and social connections",
        "bias": "Encourages bold moves and collaboration",
        "caution": "High energy might lead to impulsive choices",
    },
    Season.FALL: {
        "description": "Autumn promotes reflection and careful preparation",
        "bias": "Favors conservative, well-planned decisions",
        "caution": "May lean toward excessive caution or pessimism",
    },
    Season.WINTER: {
        "description": "Winter energy supports deep thinking and strategic planning",
        "bias": "Encourages thorough analysis and patience",
        "caution": "Seasonal mood effects might delay necessary action",
    },
}

# datetime.weekday(): Monday == 0
_WEEKDAYS: tuple[DayOfWeek, ...] = tuple(DayOfWeek)


# ── Bucketing ─────────────────────────────────────────────────────────────────

def time_of_day_for(hour: int) -> TimeOfDay:
    if 5 <= hour < 12:
        return TimeOfDay.MORNING
    if 12 <= hour < 17:
        return TimeOfDay.AFTERNOON
    if 17 <= hour < 22:
        return TimeOfDay.EVENING
    return TimeOfDay.NIGHT


def season_for(month: int) -> Season:
    if 3 <= month <= 5:
        return Season.SPRING
    if 6 <= month <= 8:
        return Season.SUMMER
    if 9 <= month <= 11:
        return Season.FALL
    return Season.WINTER


def days_since_new_moon(day: date, reference: date = DEFAULT_REFERENCE_NEW_MOON) -> float:
    """Whole days since ``reference``, folded into one lunar cycle [0, 29.5)."""
    return math.floor((day - reference).days) % LUNAR_CYCLE_DAYS


def moon_phase_for(day: date, reference: date = DEFAULT_REFERENCE_NEW_MOON) -> MoonPhase:
    age = days_since_new_moon(day, reference)
    if age < 2:
        return MoonPhase.NEW
    if age < 8:
        return MoonPhase.WAXING
    if age < 16:
        return MoonPhase.FULL
    return MoonPhase.WANING


# ── Processor ─────────────────────────────────────────────────────────────────

class TemporalProcessor:
    """Derives ``TemporalFactors`` from a timestamp. Pure and idempotent.

    Args:
        time_zone:          IANA zone used for epoch-ms input (default UTC).
        reference_new_moon: Anchor date for the lunar proxy.
        window_hour:        Hour of day evaluated by ``calculate_optimal_window``.
    """

    def __init__(
        self,
        time_zone: Optional[str] = None,
        reference_new_moon: date = DEFAULT_REFERENCE_NEW_MOON,
        window_hour: int = 9,
    ) -> None:
        self.time_zone = time_zone
        self.reference_new_moon = reference_new_moon
        self.window_hour = window_hour

    def analyze(self, timestamp: TimestampLike = None) -> TemporalFactors:
        """Analyse one instant.

        Args:
            timestamp: ``datetime`` (used as-is), epoch milliseconds, or ``None``
                for now.

        Returns:
            ``TemporalFactors`` for that wall-clock moment.
        """
        moment = resolve_timestamp(timestamp, self.time_zone)

        time_of_day = time_of_day_for(moment.hour)
        day_of_week = _WEEKDAYS[moment.weekday()]
        season = season_for(moment.month)
        moon_phase = moon_phase_for(moment.date(), self.reference_new_moon)

        combined = combine_factors(
            DAILY_PATTERNS[time_of_day],
            WEEKDAY_PATTERNS[day_of_week],
            SEASONAL_PATTERNS[season],
            LUNAR_PATTERNS[moon_phase],
        )
        overall = sum(combined.values()) / len(combined) if combined else 0.5
        bias = calculate_decision_bias(combined, time_of_day, day_of_week)

        factors = TemporalFactors(
            timestamp=moment,
            time_of_day=time_of_day,
            day_of_week=day_of_week,
            season=season,
            moon_phase=moon_phase,
            combined_factors=combined,
            overall_score=overall,
            decision_bias=bias,
            recommendations=temporal_recommendations(
                combined, time_of_day, day_of_week, season
            ),
        )
        logger.debug(
            "Temporal analysis | %s %s %s %s | bias=%.3f overall=%.3f",
            time_of_day, day_of_week, season, moon_phase, bias, overall,
        )
        return factors

    def calculate_optimal_window(self, start: date | datetime | None = None) -> OptimalWindow:
        """Rank the next 7 calendar days (from ``start``) at the fixed window hour.

        A static lookahead report: each day is analysed at ``window_hour``,
        days are sorted by ``overall_score`` descending (ties keep calendar
        order), and the top day is returned with the next two as alternatives.
        """
        if start is None:
            start = resolve_timestamp(None, self.time_zone)
        tzinfo = start.tzinfo if isinstance(start, datetime) else None
        start_day = start.date() if isinstance(start, datetime) else start

        windows: list[DecisionWindow] = []
        for day in date_range(start_day, LOOKAHEAD_DAYS):
            moment = datetime.combine(day, time(hour=self.window_hour), tzinfo=tzinfo)
            analysis = self.analyze(moment)
            windows.append(
                DecisionWindow(
                    window_date=day,
                    score=analysis.overall_score,
                    time_of_day=analysis.time_of_day,
                    factors=analysis.combined_factors,
                )
            )

        windows.sort(key=lambda w: w.score, reverse=True)
        best = windows[0]
        return OptimalWindow(
            window_date=best.window_date,
            score=best.score,
            time_of_day=best.time_of_day,
            reasoning=(
                f"Optimal decision window: {best.time_of_day} on "
                f"{best.window_date.strftime('%A, %Y-%m-%d')}"
            ),
            factors=best.factors,
            alternative_windows=windows[1:3],
        )


# ── Pure helpers ──────────────────────────────────────────────────────────────

def combine_factors(*tables: dict[str, float]) -> dict[str, float]:
    """Per-name mean across every table that defines the name."""
    sums: dict[str, float] = {}
    counts: dict[str, int] = {}
    for table in tables:
        for name, value in table.items():
            sums[name] = sums.get(name, 0.0) + value
            counts[name] = counts.get(name, 0) + 1
    return {name: sums[name] / counts[name] for name in sums}


def calculate_decision_bias(
    combined: dict[str, float],
    time_of_day: TimeOfDay,
    day_of_week: DayOfWeek,
) -> float:
    """Blend centred factors with the fixed bonuses, clamped to [-0.5, 0.5]."""
    bias = sum(
        (combined.get(name, 0.5) - 0.5) * weight for name, weight in _BIAS_WEIGHTS
    )
    bias += TIME_OF_DAY_BONUS.get(time_of_day, 0.0)
    bias += WEEKDAY_BONUS.get(day_of_week, 0.0)
    return max(-0.5, min(0.5, bias))


def temporal_recommendations(
    combined: dict[str, float],
    time_of_day: TimeOfDay,
    day_of_week: DayOfWeek,
    season: Season,
) -> list[str]:
    """Timing advice triggered by clarity/energy levels and calendar position."""
    recommendations: list[str] = []

    clarity = combined.get("clarity")
    if clarity is not None and clarity > 0.8:
        recommendations.append(
            "Your mental clarity is high right now - great time for important decisions"
        )
    elif clarity is not None and clarity < 0.4:
        recommendations.append(
            "Consider waiting for better mental clarity if this decision isn't urgent"
        )

    energy = combined.get("energy")
    if energy is not None and energy > 0.8:
        recommendations.append("Your energy levels suggest you're ready to take action")
    elif energy is not None and energy < 0.4:
        recommendations.append(
            "Low energy might affect decision quality - consider rest first"
        )

    if time_of_day == TimeOfDay.MORNING:
        recommendations.append("Morning decisions tend to be more optimistic and action-oriented")
    elif time_of_day == TimeOfDay.EVENING:
        recommendations.append(
            "Evening reflection can provide valuable perspective on complex decisions"
        )

    if day_of_week == DayOfWeek.FRIDAY:
        recommendations.append("End-of-week timing may influence risk tolerance positively")
    elif day_of_week == DayOfWeek.MONDAY:
        recommendations.append("Start-of-week energy can be channeled into decisive action")

    if season == Season.SPRING:
        recommendations.append("Spring energy supports new beginnings and growth-oriented choices")
    elif season == Season.FALL:
        recommendations.append("Autumn timing favors careful consideration and preparation")

    return recommendations


def contextual_advice(factors: TemporalFactors) -> dict[str, object]:
    """Timing, approach and considerations for the analysed moment."""
    clarity = factors.factor("clarity")
    if clarity > 0.7:
        timing = "This is an excellent time for decision-making"
        approach = "Trust your analytical thinking and move forward confidently"
    elif clarity < 0.4:
        timing = "Consider delaying non-urgent decisions"
        approach = "Focus on gathering information rather than making final choices"
    else:
        timing = "Decent timing for decisions, with some considerations"
        approach = "Proceed thoughtfully, weighing pros and cons carefully"

    considerations: list[str] = []
    if factors.time_of_day == TimeOfDay.MORNING:
        considerations.append("Morning decisions tend to be more optimistic")
        considerations.append("Good time for important or challenging choices")
    elif factors.time_of_day == TimeOfDay.EVENING:
        considerations.append("Evening perspective can reveal overlooked concerns")
        considerations.append("Consider sleeping on major decisions")

    if factors.factor("stress", 0.0) > 0.7:
        considerations.append("High stress levels may cloud judgment")
        considerations.append("Take time to center yourself before deciding")

    return {"timing": timing, "approach": approach, "considerations": considerations}


def seasonal_influence(season: Season | str) -> dict[str, str]:
    """Description, bias and caution text for a season (spring if unknown)."""
    try:
        key = Season(season)
    except ValueError:
        key = Season.SPRING
    return dict(SEASONAL_INFLUENCE[key])

