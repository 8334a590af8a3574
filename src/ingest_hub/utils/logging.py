"""Structured logging for ingest_hub, built on structlog.

Every event is rendered as one JSON object carrying an ISO-8601 timestamp,
the level and the logger name. Keys that look like credentials are redacted
before rendering, and context bound through ``structlog.contextvars`` (the
CLI binds ``session_id``) is merged into every event.

Configuration:
- LOG_LEVEL: Minimum level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO
- LOG_TO_FILE: Also write to a daily-rotating file (1, true, yes). Default: off
- LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from ingest_hub.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("ingest.load.started", table="employees", execution_id="a1b2")
"""

import logging
import os
import re
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, MutableMapping, Optional

import structlog
from pydantic import ValidationError
from structlog.types import EventDict, Processor

from ingest_hub.config import get_settings

SENSITIVE_PATTERNS = [
    re.compile(r".*password.*", re.IGNORECASE),
    re.compile(r".*token.*", re.IGNORECASE),
    re.compile(r".*api_key.*", re.IGNORECASE),
    re.compile(r".*secret.*", re.IGNORECASE),
    re.compile(r"^DATABASE_URL$", re.IGNORECASE),
]

REDACTED_VALUE = "[REDACTED]"

# Handlers added by configure_logging, removed again on reconfiguration
_installed_handlers: List[logging.Handler] = []


def _is_sensitive(key: str) -> bool:
    return any(pattern.match(key) for pattern in SENSITIVE_PATTERNS)


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of ``data`` with credential-like values replaced.

    Keys containing password, token, api_key or secret (any case), and the
    exact key DATABASE_URL, are redacted. Nested dicts are walked.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "admin"})
        {'password': '[REDACTED]', 'user': 'admin'}
    """
    return {
        key: REDACTED_VALUE
        if _is_sensitive(key)
        else sanitize_for_logging(value)
        if isinstance(value, dict)
        else value
        for key, value in data.items()
    }


def sanitization_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> MutableMapping[str, Any]:
    return sanitize_for_logging(dict(event_dict))


def _resolve_level(level: Optional[str]) -> int:
    if level is None:
        try:
            level = get_settings().LOG_LEVEL
        except ValidationError:
            # a broken .env must not prevent logging from coming up
            level = os.getenv("LOG_LEVEL", "INFO")
    return getattr(logging, level.upper(), logging.INFO)


def _should_log_to_file() -> bool:
    return os.getenv("LOG_TO_FILE", "").lower() in ("1", "true", "yes")


def _log_file_path() -> Path:
    """Daily log file: <LOG_FILE_DIR>/ingest_hub-YYYYMMDD.log."""
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"ingest_hub-{datetime.now().strftime('%Y%m%d')}.log"


def configure_logging(level: Optional[str] = None) -> None:
    """(Re)configure stdlib handlers and the structlog processor chain.

    Called once at import with the LOG_LEVEL setting; the CLI calls it again
    when ``--log-level`` is given. Handlers installed by an earlier call are
    replaced, handlers owned by anyone else are left alone.

    Args:
        level: Level name overriding LOG_LEVEL
    """
    resolved = _resolve_level(level)
    root = logging.getLogger()

    for handler in _installed_handlers:
        root.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if _should_log_to_file():
        handlers.append(
            TimedRotatingFileHandler(
                filename=str(_log_file_path()),
                when="midnight",
                interval=1,
                backupCount=30,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        _installed_handlers.append(handler)
    root.setLevel(resolved)

    processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        sanitization_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(default=str),
    ]
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


def get_logger(name: str) -> Any:
    """Return a structlog BoundLogger named ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Create a logger with context fields already bound.

    Example:
        >>> logger = bind_context(table="employees", execution_id="a1b2c3")
        >>> logger.info("ingest.row.failed", row_index=4)
    """
    return structlog.get_logger().bind(**kwargs)
