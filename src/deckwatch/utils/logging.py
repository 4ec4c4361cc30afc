from __future__ import annotations

import os
from typing import Literal, get_args

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

LOGLEVEL_ENV_VAR = "LOGLEVEL"
DEFAULT_LEVEL: LogLevel = "WARNING"

# threadName tells monitor-thread lines apart from CLI lines
DEFAULT_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"


def resolve_level(level: str | None = None) -> str:
    """Explicit level, then ``LOGLEVEL``, then WARNING; unknown names fall back."""
    resolved = (level or os.environ.get(LOGLEVEL_ENV_VAR) or DEFAULT_LEVEL).upper()
    if resolved not in get_args(LogLevel):
        return DEFAULT_LEVEL
    return resolved


def setup_logging(level: str | None = None) -> None:
    # coloredlogs writes to the current sys.stderr, away from stdout tables
    coloredlogs.install(
        level=resolve_level(level),
        fmt=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    )
