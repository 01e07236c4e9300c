"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``DAILY_DECIDER_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine, the CLI and the SQLite layer all receive an ``AppConfig`` instance
(or one of its sections), never raw dicts or scattered env var lookups.
"""

from __future__ import annotations

import os
import tomllib
from datetime import date
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/daily_decider.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class EngineConfig(BaseModel):
    """Decision engine runtime parameters.

    ``history_cap`` is the hard ceiling on stored decision records; once an
    append pushes the history past it, the history is cut back to the most
    recent ``history_trim_to`` records.
    """

    model_config = ConfigDict(frozen=True)

    version: str = "2.1.0"
    history_cap: int = 1000
    history_trim_to: int = 500
    seed: Optional[int] = None
    time_zone: str = "UTC"
    optimal_window_hour: int = 9
    reference_new_moon: date = date(2024, 1, 11)

    @field_validator("optimal_window_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError(f"optimal_window_hour must be in [0, 23], got {v}.")
        return v

    @model_validator(mode="after")
    def validate_history_bounds(self) -> "EngineConfig":
        if self.history_trim_to < 1:
            raise ValueError("history_trim_to must be >= 1.")
        if self.history_trim_to >= self.history_cap:
            raise ValueError(
                f"history_trim_to ({self.history_trim_to}) must be < "
                f"history_cap ({self.history_cap})."
            )
        return self


class WeightsConfig(BaseModel):
    """Signal weights used by the binary and multi-choice scorers."""

    model_config = ConfigDict(frozen=True)

    temporal: float = 0.25
    pattern: float = 0.30
    sentiment: float = 0.20
    contextual: float = 0.15
    randomization: float = 0.10

    @field_validator("temporal", "pattern", "sentiment", "contextual", "randomization")
    @classmethod
    def validate_weight(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"weights must be in [0.0, 1.0], got {v}.")
        return v


class PatternConfig(BaseModel):
    """Similarity matching parameters for the pattern matcher."""

    model_config = ConfigDict(frozen=True)

    similarity_threshold: float = 0.5
    recency_half_life_days: float = 7.0
    saturation: float = 5.0      # summed match weight that maps to strength 1.0

    @field_validator("similarity_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"similarity_threshold must be in (0.0, 1.0], got {v}.")
        return v

    @field_validator("recency_half_life_days", "saturation")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"value must be positive, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/daily_decider.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    engine: EngineConfig = EngineConfig()
    weights: WeightsConfig = WeightsConfig()
    pattern: PatternConfig = PatternConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply DAILY_DECIDER_* env vars to the raw config dict.

    Supported overrides:
      DAILY_DECIDER_DB_PATH    → raw["database"]["db_path"]
      DAILY_DECIDER_LOG_LEVEL  → raw["logging"]["level"]
      DAILY_DECIDER_SEED       → raw["engine"]["seed"]
      DAILY_DECIDER_TIME_ZONE  → raw["engine"]["time_zone"]
      DAILY_DECIDER_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("DAILY_DECIDER_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("DAILY_DECIDER_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if seed := os.environ.get("DAILY_DECIDER_SEED"):
        raw.setdefault("engine", {})["seed"] = int(seed)

    if time_zone := os.environ.get("DAILY_DECIDER_TIME_ZONE"):
        raw.setdefault("engine", {})["time_zone"] = time_zone

    if debug := os.environ.get("DAILY_DECIDER_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        engine=EngineConfig(**raw.get("engine", {})),
        weights=WeightsConfig(**raw.get("weights", {})),
        pattern=PatternConfig(**raw.get("pattern", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
