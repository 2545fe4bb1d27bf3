"""
Logging setup for the table detection service and CLI.

Every component logs under the "dla" logger hierarchy (dla.table_detection,
dla.extractors, dla.http, ...), so configuring "dla" once covers the engines
as well as the API. Records carry the request id of the HTTP call they were
emitted for, when there is one.
"""
import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from api.core import config

ROOT_LOGGER_NAME = "dla"

# Context variable for request correlation
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def _component(record: logging.LogRecord) -> str:
    """Logger name without the "dla." prefix ("table_detection", "extractors.camelot", ...)."""
    prefix = ROOT_LOGGER_NAME + "."
    return record.name[len(prefix):] if record.name.startswith(prefix) else record.name


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    fields = {
        "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
        "level": record.levelname,
        "component": _component(record),
        "message": record.getMessage(),
    }
    request_id = get_request_id()
    if request_id:
        fields["request_id"] = request_id
    if hasattr(record, "extra_data"):
        fields["data"] = record.extra_data
    return fields


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = _record_fields(record)
        if record.levelno >= logging.WARNING:
            entry["location"] = f"{record.module}:{record.lineno}"
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines, used by the CLI and with LOG_FORMAT=text."""

    def format(self, record: logging.LogRecord) -> str:
        fields = _record_fields(record)
        req_str = f"[{fields['request_id']}] " if "request_id" in fields else ""
        msg = f"{fields['timestamp'][:19]} | {fields['level']:8} | {req_str}{fields['component']} | {fields['message']}"
        if "data" in fields:
            msg += f" | {fields['data']}"
        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"
        return msg


def _file_handler(path: str) -> RotatingFileHandler:
    log_file = Path(path)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(
        str(log_file),
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )


def setup_logging(name: str = ROOT_LOGGER_NAME, level: Optional[str] = None,
                  log_to_file: Optional[bool] = None, fmt: Optional[str] = None) -> logging.Logger:
    """
    Attach a console handler, and optionally a size-rotated file handler, to `name`.

    `level`, `log_to_file` and `fmt` ("json" or "text") override LOG_LEVEL,
    LOG_FILE_ENABLED and LOG_FORMAT. File logging is skipped with a warning
    when LOG_FILE_PATH cannot be written.
    """
    logger = logging.getLogger(name)

    if logger.handlers:
        return logger

    level_value = getattr(logging, (level or config.LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(level_value)

    formatter = JSONFormatter() if (fmt or config.LOG_FORMAT) == "json" else TextFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.LOG_FILE_ENABLED if log_to_file is None else log_to_file:
        try:
            file_handler = _file_handler(config.LOG_FILE_PATH)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"File logging disabled: {e}. Using console only.")

    logger.propagate = False
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get or create a logger instance."""
    return logging.getLogger(name)


def generate_request_id() -> str:
    """Generate unique request correlation ID."""
    return str(uuid.uuid4())[:8]


def set_request_id(request_id: str) -> None:
    request_id_ctx.set(request_id)


def get_request_id() -> Optional[str]:
    return request_id_ctx.get()


_default_logger: Optional[logging.Logger] = None


def init_logger() -> logging.Logger:
    """Initialize and return the default application logger."""
    global _default_logger
    if _default_logger is None:
        _default_logger = setup_logging(ROOT_LOGGER_NAME)
    return _default_logger
