"""Centralized logging helpers.

Library modules only obtain loggers and emit records; ``configure_logging`` is
called once by the CLI entry point.
"""
from __future__ import annotations

import logging
import os
import re
import time
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from mvnresolve.constants import Constants

_SECRET_PATTERN = re.compile(r"(?i)(token|password|passwd|secret|apikey|api_key)=([^&\s]+)")


def configure_logging(level: Optional[str] = None, logfile: Optional[str] = None) -> None:
    """Configure the root logger from the environment or explicit arguments.

    Args:
        level: Level name; defaults to ``MVNRESOLVE_LOG_LEVEL`` or INFO.
        logfile: Optional file to log into instead of stderr.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)
    handlers = [logging.FileHandler(logfile, encoding="utf-8")] if logfile else None
    logging.basicConfig(level=level_value, format=Constants.LOG_FORMAT, handlers=handlers, force=True)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records of ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**kwargs: Any) -> Dict[str, Any]:
    """Build an ``extra`` payload for structured log records, dropping None values."""
    return {k: v for k, v in kwargs.items() if v is not None}


def redact(text: str) -> str:
    """Mask credential-looking query parameters in free text."""
    return _SECRET_PATTERN.sub(lambda m: f"{m.group(1)}=***", text)


def safe_url(url: str) -> str:
    """Strip user info and redact secrets from a URL before logging it."""
    try:
        parts = urlsplit(url)
    except ValueError:
        return redact(url)
    netloc = parts.hostname or ""
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return redact(urlunsplit((parts.scheme, netloc, parts.path, parts.query, "")))


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> float:
        """Elapsed milliseconds; still running timers report time so far."""
        end = self._end if self._end is not None else time.perf_counter()
        return round((end - self._start) * 1000.0, 2)
