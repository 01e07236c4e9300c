"""
Tests for daily_decider/engine/scorer.py.

What we test
------------
score_binary():
  - Score follows the weighted formula (randomization weight zeroed).
  - score > 0.5 picks options[1]; score <= 0.5 picks options[0].
  - Raw confidence = |score − 0.5| · 2, clamped to [0, 1].
  - Alternatives contain exactly the non-chosen option.

score_multiple_choice():
  - A dominant option_bias wins the arg-max.
  - Alternatives exclude the chosen value, duplicates of it included.
  - Confidence in [0, 1]; seeded rng reproduces the same outcome.

generate_open_ended():
  - Output is one of the four templates filled from its phrase pool.
  - Confidence is fixed at 0.75 with no alternatives.

refine_confidence():
  - Each bonus fires only above its threshold.
  - All three bonuses on a high raw confidence still cap at 1.0.
"""

from __future__ import annotations

import random

import pytest

from daily_decider.config import WeightsConfig
from daily_decider.engine.scorer import (
    OPEN_ENDED_CONFIDENCE,
    OPEN_ENDED_TEMPLATES,
    alternatives_to,
    generate_open_ended,
    refine_confidence,
    score_binary,
    score_multiple_choice,
)
from daily_decider.taxonomy.decision_taxonomy import DecisionType

NO_NOISE = WeightsConfig(randomization=0.0)


# ── Binary ────────────────────────────────────────────────────────────────────

class TestScoreBinary:
    def test_positive_signals_pick_second_option(self, make_factors):
        b = score_binary(["No", "Yes"], make_factors(polarity=1.0), NO_NOISE, random.Random(0))
        assert b.score == pytest.approx(0.7)
        assert b.choice == "Yes"
        assert b.alternatives == ["No"]
        assert b.confidence == pytest.approx(0.4)
        assert b.decision_type == DecisionType.BINARY

    def test_negative_signals_pick_first_option(self, make_factors):
        b = score_binary(["No", "Yes"], make_factors(polarity=-1.0), NO_NOISE, random.Random(0))
        assert b.score == pytest.approx(0.3)
        assert b.choice == "No"
        assert b.alternatives == ["Yes"]

    def test_exact_midpoint_picks_first_option(self, make_factors):
        b = score_binary(["No", "Yes"], make_factors(), NO_NOISE, random.Random(0))
        assert b.choice == "No"
        assert b.confidence == pytest.approx(0.0)

    def test_duplicate_of_choice_dropped(self):
        assert alternatives_to(["A", "A", "B"], "A") == ["B"]
        assert alternatives_to(["A", "B", "B"], "A") == ["B", "B"]

    def test_weighted_sum(self, make_factors):
        f = make_factors(polarity=0.5, decision_bias=0.2, strength=0.5, urgency=0.4)
        b = score_binary(["No", "Yes"], f, NO_NOISE, random.Random(0))
        expected = 0.5 + 0.5 * 0.20 + 0.2 * 0.25 + 0.5 * 0.30 + 0.4 * 0.15
        assert b.score == pytest.approx(expected)

    def test_score_clamped(self, make_factors):
        f = make_factors(polarity=1.0, decision_bias=0.5, strength=1.0, urgency=1.0)
        b = score_binary(["No", "Yes"], f, WeightsConfig(), random.Random(1))
        assert b.score == pytest.approx(1.0)
        assert b.confidence == pytest.approx(1.0)

    def test_decision_always_one_of_options(self, make_factors):
        rng = random.Random(7)
        for polarity in (-1.0, -0.3, 0.0, 0.3, 1.0):
            b = score_binary(["No", "Yes"], make_factors(polarity=polarity), WeightsConfig(), rng)
            assert b.choice in ("No", "Yes")
            assert 0.0 <= b.confidence <= 1.0

    def test_duplicate_options_leave_no_alternatives(self, make_factors):
        b = score_binary(["Yes", "Yes"], make_factors(polarity=1.0), NO_NOISE, random.Random(0))
        assert b.choice == "Yes"
        assert b.alternatives == []


# ── Multiple choice ───────────────────────────────────────────────────────────

class TestScoreMultipleChoice:
    def test_option_bias_dominates(self, make_factors):
        f = make_factors(option_bias=[0.0, 5.0, 0.0, 0.0])
        b = score_multiple_choice(["A", "B", "C", "D"], f, WeightsConfig(), random.Random(3))
        assert b.choice == "B"
        assert b.winner_index == 1
        assert b.alternatives == ["A", "C", "D"]

    def test_alternatives_exclude_choice(self, make_factors):
        b = score_multiple_choice(
            ["A", "B", "C", "D"], make_factors(), WeightsConfig(), random.Random(11)
        )
        assert b.choice in ("A", "B", "C", "D")
        assert len(b.alternatives) == 3
        assert b.choice not in b.alternatives
        assert len(b.scores) == 4
        assert 0.0 <= b.confidence <= 1.0

    def test_single_option(self, make_factors):
        b = score_multiple_choice(["Only"], make_factors(), WeightsConfig(), random.Random(0))
        assert b.choice == "Only"
        assert b.alternatives == []
        assert b.confidence == pytest.approx(0.0)

    def test_seeded_reproducible(self, make_factors):
        f = make_factors(polarity=0.4)
        a = score_multiple_choice(["A", "B", "C"], f, WeightsConfig(), random.Random(99))
        b = score_multiple_choice(["A", "B", "C"], f, WeightsConfig(), random.Random(99))
        assert a == b


# ── Open-ended ────────────────────────────────────────────────────────────────

class TestOpenEnded:
    def test_uses_a_template(self):
        b = generate_open_ended(random.Random(5))
        filled = {
            template.format(phrase=phrase)
            for template, pool in OPEN_ENDED_TEMPLATES
            for phrase in pool
        }
        assert b.choice in filled
        assert b.confidence == OPEN_ENDED_CONFIDENCE == 0.75
        assert b.alternatives == []
        assert b.decision_type == DecisionType.OPEN_ENDED

    def test_seed_controls_output(self):
        assert generate_open_ended(random.Random(1)) == generate_open_ended(random.Random(1))


# ── Refinement ────────────────────────────────────────────────────────────────

class TestRefineConfidence:
    def test_no_bonus_at_neutral(self, make_factors):
        assert refine_confidence(0.4, make_factors()) == pytest.approx(0.4)

    def test_accuracy_bonus(self, make_factors):
        assert refine_confidence(0.4, make_factors(accuracy=0.9)) == pytest.approx(0.5)

    def test_alignment_bonus(self, make_factors):
        assert refine_confidence(0.4, make_factors(alignment=0.8)) == pytest.approx(0.55)

    def test_clarity_bonus(self, make_factors):
        assert refine_confidence(0.4, make_factors(clarity=0.7)) == pytest.approx(0.5)

    def test_thresholds_are_strict(self, make_factors):
        f = make_factors(accuracy=0.8, alignment=0.7, clarity=0.6)
        assert refine_confidence(0.4, f) == pytest.approx(0.4)

    def test_never_exceeds_one(self, make_factors):
        f = make_factors(accuracy=1.0, alignment=1.0, clarity=1.0)
        assert refine_confidence(0.95, f) == pytest.approx(1.0)
