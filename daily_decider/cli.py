"""
Daily Decider — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, decision, window lookahead, history listing).
  5. Report result to stdout.

Install and run::

    pip install -e .
    daily-decider --help
    daily-decider init-db
    daily-decider validate-config
    daily-decider decide "Should I take the new job?" -o stay -o go
    daily-decider optimal-window --date 2025-04-07
    daily-decider history --limit 20
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="daily-decider",
    help="Daily Decider — multi-signal decision recommendations from the terminal.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from daily_decider.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from daily_decider.utils.logging import configure_logging
    configure_logging(config.logging)


def _open_store(config, db_path: Optional[str]):
    from daily_decider.db.connection import open_decision_store

    return open_decision_store(config, db_path)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite database and apply the schema.

    Safe to run multiple times: all DDL uses IF NOT EXISTS.
    """
    from daily_decider.db.schema import ALL_TABLE_NAMES

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with _open_store(config, target_path) as state:
        stored = state.history.count()

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo(f"  Stored decisions: {stored}")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    w = config.weights

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Engine version:   {config.engine.version}")
    typer.echo(
        f"  History cap:      {config.engine.history_cap} "
        f"(trim to {config.engine.history_trim_to})"
    )
    typer.echo(f"  Time zone:        {config.engine.time_zone}")
    typer.echo(f"  Seed:             {config.engine.seed}")
    typer.echo(
        f"  Weights:          temporal={w.temporal} pattern={w.pattern} "
        f"sentiment={w.sentiment} contextual={w.contextual} "
        f"randomization={w.randomization}"
    )
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("decide")
def decide(
    question: str = typer.Argument(..., help="The question to decide on."),
    options: Optional[list[str]] = typer.Option(
        None,
        "--option",
        "-o",
        help="A discrete option. Repeat for each; omit for open-ended guidance.",
    ),
    session_id: Optional[str] = typer.Option(
        None,
        "--session-id",
        help="Session to attribute the decision to (generated if omitted).",
    ),
    timestamp: Optional[int] = typer.Option(
        None,
        "--timestamp",
        help="Evaluate as of this epoch-millisecond instant instead of now.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON.",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Recommend a choice for QUESTION.

    \b
    Branch by option count:
      none   → open-ended guidance
      two    → binary weighted score
      other  → multiple-choice arg-max

    History and the session profile are read from and written to the
    SQLite database, so repeated questions learn from earlier answers.
    """
    from daily_decider.engine.decision_engine import DecisionEngine
    from daily_decider.reporting.formatters import format_decision

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    context: dict = {}
    if session_id:
        context["session_id"] = session_id
    if timestamp is not None:
        context["timestamp"] = timestamp

    with _open_store(config, db_path) as state:
        engine = DecisionEngine(config=config, state=state)
        result = engine.make_decision(question, options=list(options or []), context=context)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    typer.echo(format_decision(result))


@app.command("optimal-window")
def optimal_window(
    start_date: Optional[str] = typer.Option(
        None,
        "--date",
        help="First day of the 7-day lookahead (ISO date). Defaults to today.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Rank the next 7 days by static temporal score and print the best three."""
    from daily_decider.analysis.temporal import TemporalProcessor
    from daily_decider.reporting.formatters import format_optimal_window

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    start: Optional[date] = None
    if start_date:
        try:
            start = date.fromisoformat(start_date)
        except ValueError as exc:
            typer.echo(f"[ERROR] Invalid date format: {exc}", err=True)
            raise typer.Exit(code=1)

    processor = TemporalProcessor(
        time_zone=config.engine.time_zone,
        reference_new_moon=config.engine.reference_new_moon,
        window_hour=config.engine.optimal_window_hour,
    )
    typer.echo(format_optimal_window(processor.calculate_optimal_window(start)))


@app.command("history")
def history(
    limit: int = typer.Option(
        20,
        "--limit",
        help="Number of most recent decisions to show.",
    ),
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """List recently recorded decisions, newest first."""
    from daily_decider.reporting.formatters import format_history_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if limit < 1:
        typer.echo("[ERROR] --limit must be >= 1.", err=True)
        raise typer.Exit(code=1)

    with _open_store(config, db_path) as state:
        records = state.history.read_recent(limit)
        total = state.history.count()

    typer.echo(f"Decision history ({len(records)} of {total} stored)")
    typer.echo(format_history_table(records))


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
