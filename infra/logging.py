"""
Centralized Logging
-------------------
Namespaced logging with a per-detection correlation id.

Design:
- Every detection call gets a unique detection_id
- detection_id is stamped onto every record emitted during that call
- Console output goes through rich, file output is JSON lines
- Severity discipline: DEBUG=scan trace, WARNING=ignored input, ERROR=aborted call

Usage:
    from infra.logging import get_logger, DetectionContext

    logger = get_logger("commands.engine")

    with DetectionContext() as detection_id:
        logger.debug("Scanning sentence")
"""

import contextvars
import json
import logging
import uuid
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

ROOT_LOGGER_NAME = "cmd_detect"

_detection_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "detection_id", default=None
)


def generate_detection_id() -> str:
    """Generate a unique detection ID."""
    return f"det_{uuid.uuid4().hex[:12]}"


def get_detection_id() -> Optional[str]:
    """Get the current detection ID from context."""
    return _detection_id_var.get()


class DetectionContext:
    """
    Context manager scoping one detection call.

    Usage:
        with DetectionContext() as detection_id:
            # All logs within this block carry detection_id
            logger.info("Detecting...")
    """

    def __init__(self, detection_id: Optional[str] = None):
        self._detection_id = detection_id or generate_detection_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _detection_id_var.set(self._detection_id)
        return self._detection_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _detection_id_var.reset(self._token)


class DetectionIdFilter(logging.Filter):
    """Logging filter that adds detection_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "detection_id", None) is None:
            record.detection_id = get_detection_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "detection_id": getattr(record, "detection_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in ["details", "sentence", "codes"]:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Prefix console messages with the detection id when there is one."""

    def format(self, record: logging.LogRecord) -> str:
        detection_id = getattr(record, "detection_id", "-")
        message = record.getMessage()
        if detection_id != "-":
            return f"[{detection_id}] {record.name}: {message}"
        return f"{record.name}: {message}"


_logging_initialized = False


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    force: bool = False,
) -> None:
    """
    Configure the cmd_detect logging tree.

    Args:
        level: Console logging level (default INFO)
        log_dir: Directory for the JSON log file; no file logging when None
        console: Enable rich console output
        force: Reconfigure even if already configured
    """
    global _logging_initialized

    if _logging_initialized and not force:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG if log_dir else level)
    root_logger.handlers.clear()

    id_filter = DetectionIdFilter()

    if console:
        console_handler = RichHandler(show_path=False, rich_tracebacks=True)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter())
        console_handler.addFilter(id_filter)
        root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            str(log_path / "cmd_detect.log"),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(id_filter)
        root_logger.addHandler(file_handler)

    _logging_initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger in the cmd_detect namespace.

    Args:
        name: Logger name (prefixed with 'cmd_detect.' if not already)
    """
    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
