"""
ASCII terminal formatters for the CLI.

All formatters accept models and return plain multi-line strings suitable
for ``typer.echo()``. No third-party dependencies (no ``rich``).

Confidence bands
----------------
Each decision is tagged with a band so the reader can tell at a glance how
much weight to give it::

  [HIGH]  confidence >= 0.7
  [MED]   0.4 <= confidence < 0.7
  [LOW]   confidence < 0.4
  [FALLBACK] produced by the fallback path (no signal analysis)
"""

from __future__ import annotations

from datetime import datetime, timezone

from daily_decider.models.decision import DecisionRecord, DecisionResult
from daily_decider.models.signals import OptimalWindow

_RULE = "-" * 64


def confidence_band(result: DecisionResult) -> str:
    """Return the bracketed band tag for ``result``."""
    if result.is_fallback:
        return "[FALLBACK]"
    if result.confidence >= 0.7:
        return "[HIGH]"
    if result.confidence >= 0.4:
        return "[MED]"
    return "[LOW]"


# ── Decision ──────────────────────────────────────────────────────────────────


def format_decision(result: DecisionResult, show_factors: bool = True) -> str:
    """Format a ``DecisionResult`` as a short report.

    Args:
        result:       The result to render.
        show_factors: Include the signal summary block when factors exist.
    """
    lines = [
        _RULE,
        f"  Decision:   {result.decision}",
        f"  Confidence: {result.confidence:.0%} {confidence_band(result)}",
        f"  Reasoning:  {result.reasoning}",
    ]
    if result.alternatives:
        lines.append(f"  Alternatives: {', '.join(result.alternatives)}")

    if show_factors and result.factors is not None:
        f = result.factors
        lines.append("")
        lines.append("  Signals")
        lines.append(
            f"    time       {f.temporal.time_of_day.value:<10} "
            f"{f.temporal.day_of_week.value} / {f.temporal.season.value} / "
            f"{f.temporal.moon_phase.value}"
        )
        lines.append(f"    bias       {f.temporal.decision_bias:+.3f}")
        for i, advice in enumerate(f.temporal.recommendations):
            label = "timing" if i == 0 else ""
            lines.append(f"    {label:<10} {advice}")
        lines.append(
            f"    sentiment  {f.sentiment.polarity:+.2f} ({f.sentiment.category.value})"
        )
        lines.append(
            f"    pattern    strength={f.pattern.recommendation_strength:.2f} "
            f"matches={f.pattern.match_count}"
        )
        lines.append(
            f"    context    urgency={f.contextual.urgency_factor:.2f} "
            f"clarity={f.contextual.clarity:.2f}"
        )
        lines.append(f"    complexity {f.complexity.level.value}")
        lines.append(f"    alignment  {f.personal_alignment:.2f}")

    next_steps = list(result.follow_up_suggestions)
    if result.factors is not None and result.factors.contextual.guidance:
        next_steps.insert(0, f"Hint: {result.factors.contextual.guidance}")
    if next_steps:
        lines.append("")
        lines.append("  Next steps")
        for step in next_steps:
            lines.append(f"    - {step}")

    lines.append("")
    lines.append(
        f"  session={result.session_id or '-'} | algorithm={result.algorithm} | "
        f"{result.processing_duration_ms:.1f}ms"
    )
    lines.append(_RULE)
    return "\n".join(lines)


# ── Optimal window ────────────────────────────────────────────────────────────


def format_optimal_window(window: OptimalWindow) -> str:
    """Format the best window and its runners-up as an ASCII table."""
    lines = [
        window.reasoning,
        "",
        f"  {'Rank':<5} {'Date':<12} {'Day':<10} {'Time':<10} {'Score':>6}",
        f"  {'-' * 5} {'-' * 12} {'-' * 10} {'-' * 10} {'-' * 6}",
        _window_row(1, window.window_date, window.time_of_day.value, window.score),
    ]
    for rank, alt in enumerate(window.alternative_windows, start=2):
        lines.append(_window_row(rank, alt.window_date, alt.time_of_day.value, alt.score))
    return "\n".join(lines)


def _window_row(rank: int, day, time_of_day: str, score: float) -> str:
    return (
        f"  {rank:<5} {day.isoformat():<12} {day.strftime('%A'):<10} "
        f"{time_of_day:<10} {score:>6.3f}"
    )


# ── History ───────────────────────────────────────────────────────────────────


def format_history_table(records: list[DecisionRecord]) -> str:
    """Format recorded decisions, newest first."""
    if not records:
        return "  No decisions recorded."

    lines = [
        f"  {'When (UTC)':<17} {'Type':<16} {'Conf':>5}  Decision",
        f"  {'-' * 17} {'-' * 16} {'-' * 5}  {'-' * 30}",
    ]
    for rec in reversed(records):
        when = datetime.fromtimestamp(rec.timestamp / 1000, tz=timezone.utc)
        decision = rec.result.decision
        if len(decision) > 48:
            decision = decision[:45] + "..."
        lines.append(
            f"  {when.strftime('%Y-%m-%d %H:%M'):<17} "
            f"{rec.result.decision_type.value:<16} "
            f"{rec.result.confidence:>5.2f}  {decision}"
        )
    return "\n".join(lines)
