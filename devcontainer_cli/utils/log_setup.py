"""Process-wide logging configuration for the command line."""

import json
import logging
import sys
from datetime import datetime, timezone

from rich.console import Console
from rich.logging import RichHandler

LOG_FORMATS = ("auto", "text", "json")
TEXT_FORMAT = "%(levelname)s %(name)s: %(message)s"

# Attributes present on every LogRecord; anything else came from ``extra``.
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def level_for(verbosity: int) -> int:
    return logging.DEBUG if verbosity > 0 else logging.INFO


def configure_logging(verbosity: int = 0, log_format: str = "auto") -> logging.Handler:
    """Install a single handler on the root logger.

    Args:
        verbosity: Number of ``-v`` flags given
        log_format: ``auto`` (rich on a terminal, plain text otherwise),
            ``text`` or ``json``

    Returns:
        The installed handler
    """
    if log_format not in LOG_FORMATS:
        raise ValueError(f"Unknown log format '{log_format}', expected one of {LOG_FORMATS}")

    if log_format == "json":
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    elif log_format == "text" or sys.stderr.isatty():
        handler = RichHandler(console=Console(stderr=True), show_path=False)
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level_for(verbosity))
    return handler
