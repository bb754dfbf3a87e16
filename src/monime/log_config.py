"""Logging helpers with credential scrubbing.

:class:`ScrubFilter` redacts bearer tokens, access tokens and webhook
secrets from log records before any handler formats them.
:func:`configure_logging` installs the filter on the ``monime`` logger
hierarchy and, optionally, a rotating file handler.
"""

from __future__ import annotations

import logging
import os
import re
from logging.handlers import RotatingFileHandler
from typing import Optional

_REDACTED = "***REDACTED***"

# Patterns that match sensitive values in log messages.
_SCRUB_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(Bearer\s+)([^\s\"',}]+)", re.IGNORECASE), rf"\1{_REDACTED}"),
    (
        re.compile(r'((?:access_?token|accessToken)["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE),
        rf"\1{_REDACTED}",
    ),
    (re.compile(r'(secret["\x27]?\s*[:=]\s*["\x27]?)([^"\x27\s,}{\]]+)', re.IGNORECASE), rf"\1{_REDACTED}"),
]


def scrub(text: str) -> str:
    """Apply every scrub pattern to *text*."""
    for pattern, replacement in _SCRUB_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class ScrubFilter(logging.Filter):
    """Logging filter that redacts credentials from messages and arguments."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg and isinstance(record.msg, str):
            record.msg = scrub(record.msg)
        if isinstance(record.args, dict):
            record.args = {
                k: scrub(v) if isinstance(v, str) else v for k, v in record.args.items()
            }
        elif isinstance(record.args, tuple):
            record.args = tuple(
                scrub(a) if isinstance(a, str) else scrub(str(a)) if isinstance(a, Exception) else a
                for a in record.args
            )
        return True


def configure_logging(
    level: Optional[str] = None,
    *,
    log_file: Optional[str] = None,
    max_bytes: int = 10_000_000,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the ``monime`` logger with credential scrubbing.

    :param level: Log level name.  Reads ``MONIME_LOG_LEVEL``, then falls
        back to ``"INFO"``.
    :param log_file: Optional path for a rotating log file.
    :param max_bytes: Maximum log file size before rotation (default 10 MB).
    :param backup_count: Number of rotated files to keep (default 5).
    :returns: The configured ``monime`` logger.
    """
    level = level or os.environ.get("MONIME_LOG_LEVEL", "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger("monime")
    logger.setLevel(log_level)

    scrub_filter = ScrubFilter()

    if log_file:
        has_file_handler = any(
            isinstance(h, RotatingFileHandler)
            and getattr(h, "baseFilename", None) == os.path.abspath(log_file)
            for h in logger.handlers
        )
        if not has_file_handler:
            directory = os.path.dirname(os.path.abspath(log_file))
            os.makedirs(directory, exist_ok=True)
            handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            handler.setLevel(log_level)
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s %(name)s %(levelname)s %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            logger.addHandler(handler)

    # Logger-level filters miss records propagated from child loggers.
    for handler in [*logger.handlers, *logging.getLogger().handlers]:
        if not any(isinstance(f, ScrubFilter) for f in handler.filters):
            handler.addFilter(scrub_filter)

    return logger
