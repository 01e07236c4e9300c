"""
Tests for daily_decider/analysis/temporal.py.

What we test
------------
Bucketing:
  - time_of_day_for() boundaries (05, 12, 17, 22).
  - season_for() per month.
  - moon_phase_for() relative to the reference new moon.

TemporalProcessor.analyze():
  - 09:00 on a Tuesday in April → morning / tuesday / spring.
  - combined_factors averages names shared across tables.
  - decision_bias follows the weighted formula plus bonuses.
  - All combined factors in [0, 1]; bias in [-0.5, 0.5].
  - Epoch-ms input is resolved in the configured time zone.
  - Idempotent: identical input → identical output.

calculate_optimal_window():
  - Returns the highest-scoring of 7 days with two runners-up.
  - Uses the configured window hour.
  - Reasoning names the time of day and the date.

contextual_advice() / seasonal_influence():
  - Morning clarity yields the "excellent time" timing line.
  - Unknown season falls back to spring.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from daily_decider.analysis.temporal import (
    DEFAULT_REFERENCE_NEW_MOON,
    TemporalProcessor,
    calculate_decision_bias,
    combine_factors,
    contextual_advice,
    moon_phase_for,
    season_for,
    seasonal_influence,
    time_of_day_for,
)
from daily_decider.taxonomy.decision_taxonomy import (
    DayOfWeek,
    MoonPhase,
    Season,
    TimeOfDay,
)


@pytest.fixture
def processor() -> TemporalProcessor:
    return TemporalProcessor()


# ── Bucketing ─────────────────────────────────────────────────────────────────

class TestBuckets:
    @pytest.mark.parametrize("hour,expected", [
        (4, TimeOfDay.NIGHT),
        (5, TimeOfDay.MORNING),
        (11, TimeOfDay.MORNING),
        (12, TimeOfDay.AFTERNOON),
        (16, TimeOfDay.AFTERNOON),
        (17, TimeOfDay.EVENING),
        (21, TimeOfDay.EVENING),
        (22, TimeOfDay.NIGHT),
        (0, TimeOfDay.NIGHT),
    ])
    def test_time_of_day(self, hour, expected):
        assert time_of_day_for(hour) == expected

    @pytest.mark.parametrize("month,expected", [
        (3, Season.SPRING), (5, Season.SPRING),
        (6, Season.SUMMER), (8, Season.SUMMER),
        (9, Season.FALL), (11, Season.FALL),
        (12, Season.WINTER), (1, Season.WINTER), (2, Season.WINTER),
    ])
    def test_season(self, month, expected):
        assert season_for(month) == expected

    @pytest.mark.parametrize("offset,expected", [
        (0, MoonPhase.NEW),
        (1, MoonPhase.NEW),
        (5, MoonPhase.WAXING),
        (10, MoonPhase.FULL),
        (20, MoonPhase.WANING),
    ])
    def test_moon_phase(self, offset, expected):
        day = DEFAULT_REFERENCE_NEW_MOON + timedelta(days=offset)
        assert moon_phase_for(day) == expected


# ── analyze ───────────────────────────────────────────────────────────────────

class TestAnalyze:
    def test_tuesday_april_morning(self, processor, tuesday_morning):
        f = processor.analyze(tuesday_morning)
        assert f.time_of_day == TimeOfDay.MORNING
        assert f.day_of_week == DayOfWeek.TUESDAY
        assert f.season == Season.SPRING

    def test_epoch_ms_input(self, processor, tuesday_morning_ms):
        f = processor.analyze(tuesday_morning_ms)
        assert f.time_of_day == TimeOfDay.MORNING
        assert f.day_of_week == DayOfWeek.TUESDAY

    def test_combined_factor_means(self, processor, tuesday_morning):
        f = processor.analyze(tuesday_morning)
        # 2025-04-08 is day 10.5 of the lunar cycle → full moon
        assert f.moon_phase == MoonPhase.FULL
        # energy: morning 0.8, spring 0.8, full 0.95
        assert f.factor("energy") == pytest.approx((0.8 + 0.8 + 0.95) / 3)
        # optimism: morning 0.8, spring 0.9
        assert f.factor("optimism") == pytest.approx(0.85)
        # risk: tuesday 0.7, spring 0.7, full 0.6
        assert f.factor("risk") == pytest.approx(2.0 / 3)
        assert f.overall_score == pytest.approx(
            sum(f.combined_factors.values()) / len(f.combined_factors)
        )

    def test_decision_bias_formula(self, processor, tuesday_morning):
        f = processor.analyze(tuesday_morning)
        expected = (
            0.3 * (0.9 - 0.5)
            + 0.2 * (0.85 - 0.5)
            + 0.2 * (0.85 - 0.5)
            + 0.1 * (0.7 - 0.5)
            + 0.15      # morning
            + 0.05      # tuesday
        )
        assert f.decision_bias == pytest.approx(expected)

    def test_ranges_hold_for_every_hour(self, processor):
        start = datetime(2025, 1, 6, 0, 0, tzinfo=timezone.utc)
        for h in range(0, 24 * 7, 5):
            f = processor.analyze(start + timedelta(hours=h))
            assert all(0.0 <= v <= 1.0 for v in f.combined_factors.values())
            assert -0.5 <= f.decision_bias <= 0.5
            assert 0.0 <= f.overall_score <= 1.0

    def test_morning_recommendation_present(self, processor, tuesday_morning):
        f = processor.analyze(tuesday_morning)
        assert "Morning decisions tend to be more optimistic and action-oriented" in f.recommendations
        assert any("mental clarity is high" in r for r in f.recommendations)

    def test_idempotent(self, processor, tuesday_morning):
        assert processor.analyze(tuesday_morning) == processor.analyze(tuesday_morning)

    def test_time_zone_applies_to_epoch_input(self, tuesday_morning_ms):
        zoneinfo = pytest.importorskip("zoneinfo")
        try:
            zoneinfo.ZoneInfo("Asia/Tokyo")
        except zoneinfo.ZoneInfoNotFoundError:
            pytest.skip("IANA time zone database not available")
        # 09:00 UTC == 18:00 in Tokyo
        f = TemporalProcessor(time_zone="Asia/Tokyo").analyze(tuesday_morning_ms)
        assert f.time_of_day == TimeOfDay.EVENING


class TestPureHelpers:
    def test_combine_factors_averages_shared_names(self):
        combined = combine_factors({"a": 0.2, "b": 1.0}, {"a": 0.6})
        assert combined == {"a": pytest.approx(0.4), "b": pytest.approx(1.0)}

    def test_bias_missing_factors_count_as_neutral(self):
        bias = calculate_decision_bias({}, TimeOfDay.AFTERNOON, DayOfWeek.WEDNESDAY)
        assert bias == pytest.approx(0.05)

    def test_bias_is_clamped(self):
        high = {"clarity": 1.0, "energy": 1.0, "optimism": 1.0, "riskTolerance": 1.0}
        bias = calculate_decision_bias(high, TimeOfDay.MORNING, DayOfWeek.FRIDAY)
        assert bias == pytest.approx(0.5)


# ── Optimal window ────────────────────────────────────────────────────────────

class TestOptimalWindow:
    def test_best_of_seven_days(self, processor):
        window = processor.calculate_optimal_window(date(2025, 4, 7))
        assert len(window.alternative_windows) == 2
        assert date(2025, 4, 7) <= window.window_date <= date(2025, 4, 13)
        for alt in window.alternative_windows:
            assert alt.score <= window.score
        scores = [a.score for a in window.alternative_windows]
        assert scores == sorted(scores, reverse=True)

    def test_best_matches_direct_analysis(self, processor):
        window = processor.calculate_optimal_window(date(2025, 4, 7))
        direct = processor.analyze(
            datetime.combine(window.window_date, datetime.min.time()).replace(hour=9)
        )
        assert window.score == pytest.approx(direct.overall_score)

    def test_uses_window_hour(self):
        window = TemporalProcessor(window_hour=19).calculate_optimal_window(date(2025, 4, 7))
        assert window.time_of_day == TimeOfDay.EVENING

    def test_reasoning_mentions_day(self, processor):
        window = processor.calculate_optimal_window(date(2025, 4, 7))
        assert window.reasoning.startswith("Optimal decision window: morning on ")
        assert window.window_date.isoformat() in window.reasoning

    def test_deterministic(self, processor):
        a = processor.calculate_optimal_window(date(2025, 4, 7))
        b = processor.calculate_optimal_window(date(2025, 4, 7))
        assert a == b


# ── Advice ────────────────────────────────────────────────────────────────────

class TestAdvice:
    def test_morning_advice(self, processor, tuesday_morning):
        advice = contextual_advice(processor.analyze(tuesday_morning))
        assert advice["timing"] == "This is an excellent time for decision-making"
        assert "Morning decisions tend to be more optimistic" in advice["considerations"]

    def test_night_advice_suggests_delay(self, processor):
        f = processor.analyze(datetime(2025, 4, 8, 23, 0, tzinfo=timezone.utc))
        assert f.time_of_day == TimeOfDay.NIGHT
        assert contextual_advice(f)["timing"] == "Consider delaying non-urgent decisions"

    def test_seasonal_influence(self):
        assert "Autumn" in seasonal_influence(Season.FALL)["description"]

    def test_unknown_season_falls_back_to_spring(self):
        assert seasonal_influence("monsoon") == seasonal_influence(Season.SPRING)
