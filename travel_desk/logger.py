"""
Structured JSON Logging.

One JSON object per line.  ``sale_id`` and ``line_item_id`` passed via
``extra`` are promoted to top-level keys so a submission can be traced
across the API client, the repositories and the audit trail.  Console
output goes to stderr, keeping stdout free for command output.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

_TRACE_KEYS: tuple[str, ...] = ("sale_id", "line_item_id")

_RESERVED: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }
        extra = {k: str(v) for k, v in vars(record).items() if k not in _RESERVED}
        for key in _TRACE_KEYS:
            if key in extra:
                entry[key] = extra.pop(key)
        if extra:
            entry["extra"] = extra
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _file_handler(log_file: str, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        filename=str(path), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Rotation settings default to ``AppConfig``.  Handlers are attached once
    per logger name.
    """

    def __init__(
        self,
        name: str = "travel_desk",
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
    ) -> None:
        from travel_desk.config import get_config  # config imports nothing from here

        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(level)
        if self._logger.handlers:
            return

        cfg = get_config()
        formatter = JSONFormatter()
        console = logging.StreamHandler(stream or sys.stderr)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        target = log_file or cfg.LOG_FILE
        try:
            handler = _file_handler(target, cfg.LOG_MAX_BYTES, cfg.LOG_BACKUP_COUNT)
        except OSError as exc:
            self._logger.warning("Log file '%s' unavailable, console only: %s", target, exc)
            return
        handler.setFormatter(formatter)
        self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)


def get_logger(name: str = "travel_desk") -> StructuredLogger:
    return StructuredLogger(name=name)
