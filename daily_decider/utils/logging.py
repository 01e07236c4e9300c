"""
Logging setup for the Daily Decider.

Call ``configure_logging(config)`` once at CLI entry (before any engine work).
Library modules only ever use ``logging.getLogger(__name__)``.

While the engine handles a request it binds the request's session id and
engine version with ``decision_log_context``. Every record emitted inside that
block, from any module (analysers, repositories, the engine itself), carries
``session_id`` and ``engine_version`` attributes; outside a decision both are
``"-"``.

Text format::

    2025-04-08T09:00:00Z [INFO] daily_decider.engine.decision_engine (dd_..@2.1.0): Decision made | ...

JSON format (``json_format = true`` under ``[logging]``), one object per line::

    {"ts": "...", "level": "INFO", "logger": "...", "session_id": "dd_...",
     "engine_version": "2.1.0", "msg": "..."}
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

if TYPE_CHECKING:
    from daily_decider.config import LoggingConfig

LOG_FORMAT = (
    "%(asctime)s [%(levelname)s] %(name)s "
    "(%(session_id)s@%(engine_version)s): %(message)s"
)
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

UNBOUND = "-"

_session_id: ContextVar[str] = ContextVar("daily_decider_session_id", default=UNBOUND)
_engine_version: ContextVar[str] = ContextVar("daily_decider_engine_version", default=UNBOUND)


@contextmanager
def decision_log_context(session_id: str, engine_version: str) -> Iterator[None]:
    """Tag log records emitted inside the block with one decision's identity."""
    session_token = _session_id.set(session_id)
    version_token = _engine_version.set(engine_version)
    try:
        yield
    finally:
        _engine_version.reset(version_token)
        _session_id.reset(session_token)


class DecisionContextFilter(logging.Filter):
    """Copy the bound session id and engine version onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()
        record.engine_version = _engine_version.get()
        return True


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                LOG_DATE_FORMAT
            ),
            "level": record.levelname,
            "logger": record.name,
            "session_id": getattr(record, "session_id", UNBOUND),
            "engine_version": getattr(record, "engine_version", UNBOUND),
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _make_handler(handler: logging.Handler, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(DecisionContextFilter())
    return handler


def configure_logging(config: "LoggingConfig") -> None:
    """Configure the root logger from the ``[logging]`` config section.

    Installs a stdout handler, plus a file handler when ``config.log_file`` is
    set. Both tag records with the current decision context.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    formatter: logging.Formatter
    if config.json_format:
        formatter = _JsonFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    handlers = [_make_handler(logging.StreamHandler(sys.stdout), level, formatter)]

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            _make_handler(logging.FileHandler(log_path, encoding="utf-8"), level, formatter)
        )

    logging.basicConfig(level=level, handlers=handlers, force=True)
