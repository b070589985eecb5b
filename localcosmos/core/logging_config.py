"""
Logging for LocalCosmos.

Records are stamped with the correlation id of the operation they belong
to (one CLI query run, or one db.Container action) and may carry a
structured ``context`` mapping attached by log_with_context. Both
formatters render those fields. Account keys are masked before output.
"""

import json
import logging
import logging.handlers
import re
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

REDACTED = "***REDACTED***"

_correlation_id: ContextVar[Optional[str]] = ContextVar("localcosmos_correlation_id", default=None)

_SECRET_PATTERNS = [
    (re.compile(r"(AccountKey=)[^;]+", re.IGNORECASE), rf"\1{REDACTED}"),
    (re.compile(r"(masterKey[\"']?\s*[:=]\s*[\"']?)[^\s\"',;]+", re.IGNORECASE), rf"\1{REDACTED}"),
    (re.compile(r"(Authorization:\s+)\S+", re.IGNORECASE), rf"\1{REDACTED}"),
]

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(GB|MB|KB|B)?\s*$", re.IGNORECASE)
_SIZE_UNITS = {"GB": 1024 ** 3, "MB": 1024 ** 2, "KB": 1024, "B": 1}


def current_correlation_id() -> Optional[str]:
    """Correlation id bound to the running operation, if any."""
    return _correlation_id.get()


@contextmanager
def correlation_scope(corr_id: Optional[str] = None) -> Iterator[str]:
    """Bind a correlation id for the duration of the block.

    Without an explicit id the enclosing id is kept, so the DB actions of
    one CLI run share the run's id; outside any scope a new id is made.

    Yields:
        The bound correlation id
    """
    value = corr_id or _correlation_id.get() or uuid.uuid4().hex[:12]
    token = _correlation_id.set(value)
    try:
        yield value
    finally:
        _correlation_id.reset(token)


def redact(text: str) -> str:
    """Mask account keys and authorization tokens in text."""
    for pattern, replacement in _SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class CorrelationFilter(logging.Filter):
    """Stamp records with the active correlation id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = _correlation_id.get()
        return True


class SensitiveDataFilter(logging.Filter):
    """Mask secrets in the message and in string context values."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)
        context = getattr(record, "context", None)
        if context:
            record.context = {
                key: redact(value) if isinstance(value, str) else value
                for key, value in context.items()
            }
        return True


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        corr_id = getattr(record, "correlation_id", None)
        if corr_id:
            log_data["correlation_id"] = corr_id
        context = getattr(record, "context", None)
        if context:
            log_data["context"] = context
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Single-line text; correlation id and context follow a '|'."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = []
        corr_id = getattr(record, "correlation_id", None)
        if corr_id:
            fields.append(f"corr={corr_id}")
        context = getattr(record, "context", None) or {}
        fields.extend(f"{key}={value}" for key, value in context.items())
        if not fields:
            return text
        # Exception text stays on the following lines
        head, sep, tail = text.partition("\n")
        return f"{head} | {' '.join(fields)}{sep}{tail}"


_FORMATTERS = {"json": JSONFormatter, "text": TextFormatter}


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None,
    rotation_size: str = "10MB",
    rotation_count: int = 5,
    module_levels: Optional[Dict[str, str]] = None,
    stream: Any = None
) -> None:
    """
    Configure root logging for LocalCosmos.

    Args:
        level: Default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "json" or "text"
        log_file: Optional file that receives the same records, rotated by size
        rotation_size: Rotation threshold (e.g., "10MB")
        rotation_count: Number of rotated files to keep
        module_levels: Per-logger levels, e.g. {"localcosmos.emulator.store": "DEBUG"}
        stream: Console stream (defaults to stdout)

    Raises:
        ValueError: If the format or rotation size is invalid
    """
    if format_type not in _FORMATTERS:
        raise ValueError(f"Unknown log format: {format_type}")

    handlers: List[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=_parse_size(rotation_size),
            backupCount=rotation_count,
            encoding="utf-8"
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(_FORMATTERS[format_type]())
        handler.addFilter(CorrelationFilter())
        handler.addFilter(SensitiveDataFilter())
        root_logger.addHandler(handler)

    for module_name, module_level in (module_levels or {}).items():
        logging.getLogger(module_name).setLevel(getattr(logging, module_level.upper()))

    root_logger.debug(
        f"Logging configured: level={level}, format={format_type}, file={log_file or '-'}"
    )


def _parse_size(size: str) -> int:
    """Parse "512", "10KB", "1.5MB" or "1GB" into bytes."""
    match = _SIZE_RE.match(size)
    if not match:
        raise ValueError(f"Invalid size: {size}")
    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[(unit or "B").upper()])


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """
    Log a message with a structured context mapping.

    The active correlation id is attached to the record as well, so
    handlers without CorrelationFilter still see it.

    Args:
        logger: Logger instance
        level: Log level
        message: Log message
        **context: Fields rendered under "context"
    """
    extra: Dict[str, Any] = {"correlation_id": _correlation_id.get()}
    if context:
        extra["context"] = context
    logger.log(level, message, extra=extra)
