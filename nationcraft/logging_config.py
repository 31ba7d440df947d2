"""
Logging setup for the bot and the operator scripts.

Console output goes through rich; production and file output is one JSON
object per line. Every record carries the id of the gateway event being
handled (or "-" outside one), so the lines of one slash command, voice
update or loop tick can be grepped together.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from rich.logging import RichHandler


_event_id: ContextVar[Optional[str]] = ContextVar("event_id", default=None)

# LogRecord attributes that are not `extra=` fields
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "event_id",
}

QUIET_LOGGERS = {
    "discord": logging.WARNING,
    "discord.gateway": logging.ERROR,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "anthropic": logging.WARNING,
    "aiosqlite": logging.WARNING,
}


def current_event_id() -> Optional[str]:
    return _event_id.get()


class LogContext:
    """
    Tags every log line inside the block with one event id.

    discord.py dispatches each event in its own task, so concurrent
    handlers never see each other's id.
    """

    def __init__(self, event_id: Optional[str] = None):
        self.event_id = event_id or uuid.uuid4().hex[:8]
        self._token = None

    def __enter__(self) -> "LogContext":
        self._token = _event_id.set(self.event_id)
        return self

    def __exit__(self, *exc_info) -> None:
        _event_id.reset(self._token)


class EventIdFilter(logging.Filter):
    """Stamps `record.event_id` for the formatters"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.event_id = _event_id.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per record, `extra=` fields included"""

    def format(self, record: logging.LogRecord) -> str:
        data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event_id": getattr(record, "event_id", None) or _event_id.get(),
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                data[key] = value

        return json.dumps(data, default=str)


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Replace the root handlers. Call once at startup, before the bot logs in.

    Args:
        level: Root log level name
        json_format: JSON lines on stdout instead of rich output
        log_file: Also append JSON lines to this file
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if json_format:
        console = logging.StreamHandler()
        console.setFormatter(JsonFormatter())
    else:
        console = RichHandler(rich_tracebacks=True, show_path=False, log_time_format="%H:%M:%S")
        console.setFormatter(logging.Formatter("[%(event_id)s] %(name)s: %(message)s"))
    handlers = [console]

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            root.warning(f"Could not open log file {log_file}: {e}")
        else:
            file_handler.setFormatter(JsonFormatter())
            handlers.append(file_handler)

    for handler in handlers:
        handler.addFilter(EventIdFilter())
        root.addHandler(handler)

    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
