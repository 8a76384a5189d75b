"""
Logging setup for the expose CLI.

Plain text by default, JSON lines when EXPOSE_LOG_FORMAT=json. Handlers write
to stderr (and optionally a file) so stdout only ever carries command results.
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any

DEFAULT_LEVEL = "WARNING"

_RESERVED_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
}


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs one JSON object per record with timestamp, level, logger, message,
    source location, exception text, and any extra fields passed to the logger.
    """

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z"

        log_entry: dict[str, Any] = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.pathname:
            log_entry["file"] = f"{record.filename}:{record.lineno}"

        if record.funcName and record.funcName != "<module>":
            log_entry["function"] = record.funcName

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_FIELDS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def is_json_logging_enabled() -> bool:
    """True if EXPOSE_LOG_FORMAT=json"""
    return os.getenv("EXPOSE_LOG_FORMAT", "text").lower() == "json"


def setup_logging(level: str | None = None, log_file: str | None = None, force: bool = True) -> None:
    """
    Setup logging based on environment variables.

    Environment variables:
    - EXPOSE_LOG_FORMAT: "json" or "text" (default: text)
    - EXPOSE_LOG_LEVEL: Log level (default: WARNING)
    - EXPOSE_LOG_FILE: Optional log file path

    Args:
        level: Override log level (uses EXPOSE_LOG_LEVEL if None)
        log_file: Override log file (uses EXPOSE_LOG_FILE if None)
        force: Force reconfiguration of root logger
    """
    if level is None:
        level = os.getenv("EXPOSE_LOG_LEVEL", DEFAULT_LEVEL)

    if log_file is None:
        log_file = os.getenv("EXPOSE_LOG_FILE")

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            print(f"Warning: Could not open log file {log_file}: {e}", file=sys.stderr)

    if is_json_logging_enabled():
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=force)
