"""Structured logging for cluster-dao, built on structlog.

Every event is rendered as one JSON object carrying an ISO-8601 timestamp,
the level and the logger name. Before rendering, credentials are redacted
wherever they sit in the event: top-level keys, nested mappings, and
mappings inside lists or tuples (such as the ``SET ?`` record among a
statement's bind values).

Environment:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL. Default: INFO
- LOG_TO_FILE: 1, true or yes to also write a daily rotated file
- LOG_FILE_DIR: Directory for log files. Default: logs/

Usage:
    >>> from cluster_dao.utils.logging import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("database.query.executed", role="slave*", row_count=3)
"""

import logging
import os
import re
from collections.abc import Mapping
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List

import structlog
from structlog.types import EventDict, Processor

from cluster_dao.config import get_settings

# Key names whose values never reach a log line: credentials, plus node
# URIs/DSNs which embed the password.
SENSITIVE_KEY = re.compile(
    r"password|passwd|pwd|token|secret|^(.*_)?(uri|url|dsn)$", re.IGNORECASE
)

REDACTED_VALUE = "[REDACTED]"


def is_sensitive_key(key: Any) -> bool:
    return bool(SENSITIVE_KEY.search(str(key)))


def redact(value: Any) -> Any:
    """Return ``value`` with every sensitive mapping entry replaced, at any depth.

    Example:
        >>> redact(["users", {"name": "kim", "password": "x"}])
        ['users', {'name': 'kim', 'password': '[REDACTED]'}]
    """
    if isinstance(value, Mapping):
        return {
            key: REDACTED_VALUE if is_sensitive_key(key) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return type(value)(redact(item) for item in value)
    return value


def sanitize_for_logging(data: Dict[str, Any]) -> Dict[str, Any]:
    """Redact sensitive values from an event dictionary.

    Example:
        >>> sanitize_for_logging({"password": "secret123", "user": "app"})
        {'password': '[REDACTED]', 'user': 'app'}
    """
    return redact(data)


def redaction_processor(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Structlog processor applying ``sanitize_for_logging`` to each event."""
    return sanitize_for_logging(dict(event_dict))


def _get_log_level() -> int:
    try:
        level_name = get_settings().LOG_LEVEL.upper()
    except Exception:
        # Invalid DAO_* settings still leave logging usable
        level_name = os.getenv("LOG_LEVEL", "INFO").upper()

    return getattr(logging, level_name, logging.INFO)


def _should_log_to_file() -> bool:
    return os.getenv("LOG_TO_FILE", "").lower() in ("1", "true", "yes")


def _get_log_file_path() -> Path:
    """Return ``<LOG_FILE_DIR>/cluster-dao-YYYYMMDD.log``, creating the directory."""
    log_dir = Path(os.getenv("LOG_FILE_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"cluster-dao-{datetime.now():%Y%m%d}.log"


def _build_handlers(level: int) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if _should_log_to_file():
        handlers.append(
            TimedRotatingFileHandler(
                filename=str(_get_log_file_path()),
                when="midnight",
                backupCount=30,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
    return handlers


def _configure_structlog() -> None:
    level = _get_log_level()
    logging.basicConfig(format="%(message)s", level=level, handlers=[])
    for handler in _build_handlers(level):
        logging.root.addHandler(handler)

    processors: List[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        redaction_processor,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


_configure_structlog()


def get_logger(name: str) -> Any:
    """Return a structlog logger named ``name``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> Any:
    """Return a logger carrying ``kwargs`` on every event.

    Example:
        >>> logger = bind_context(role="master", node="master")
        >>> logger.info("database.connection.acquired")
    """
    return structlog.get_logger().bind(**kwargs)
