"""
Error Handling Module
---------------------
Typed detection faults and the structured error record returned at the
detection boundary.

Nothing here retries. A failed sentence is cheap to re-submit.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, Optional
import logging
import traceback


# Every error string handed back by the string shim starts with this.
MOD_RET_ERR_PREFIX = "3234_ERR_"
ERR_CMD_DETECT = MOD_RET_ERR_PREFIX + "CMD_DETECT - "

REQUIREMENTS_NOT_MET = "Requirements not met - "


class CommandDetectionError(Exception):
    """Base class for all command detection faults."""


class FaultyCatalogUsage(CommandDetectionError):
    """
    A command id outside 1..highest_id was requested for detection.

    This is a programming error on the caller's side, not a data problem,
    so it aborts the whole detection call.
    """

    def __init__(self, message: str, command_id: Optional[int] = None):
        super().__init__(message)
        self.command_id = command_id

    def __str__(self) -> str:
        return REQUIREMENTS_NOT_MET + super().__str__()


class CatalogError(CommandDetectionError):
    """The command catalog file is missing or malformed."""


class ErrorCategory(Enum):
    """Categories of detection errors."""
    USAGE_FAULT = auto()           # Invalid command id requested
    CATALOG_ERROR = auto()         # Catalog could not be loaded
    COLLABORATOR_FAILURE = auto()  # Normalizer/oracle or anything else failed


@dataclass
class DetectionError:
    """
    Structured error produced by a failed detection call.

    The string form is what the compatibility shim returns to callers.
    """
    category: ErrorCategory
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    stack_trace: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        exception: Exception,
        details: Optional[Dict] = None
    ) -> "DetectionError":
        """Create an error record from an exception, classifying it."""
        return cls(
            category=classify_exception(exception),
            message=str(exception),
            details=details,
            stack_trace=traceback.format_exc(),
        )

    def to_wire(self) -> str:
        """Render using the error-prefix convention."""
        return ERR_CMD_DETECT + self.message

    def __repr__(self) -> str:
        return f"DetectionError({self.category.name}: {self.message})"


def classify_exception(exception: Exception) -> ErrorCategory:
    """Map an exception onto an error category."""
    if isinstance(exception, FaultyCatalogUsage):
        return ErrorCategory.USAGE_FAULT
    if isinstance(exception, CatalogError):
        return ErrorCategory.CATALOG_ERROR
    return ErrorCategory.COLLABORATOR_FAILURE


_LEVELS = {
    ErrorCategory.USAGE_FAULT: logging.ERROR,
    ErrorCategory.CATALOG_ERROR: logging.CRITICAL,
    ErrorCategory.COLLABORATOR_FAILURE: logging.ERROR,
}


def log_detection_error(logger: logging.Logger, error: DetectionError) -> None:
    """Log an error with the level its category calls for."""
    level = _LEVELS.get(error.category, logging.ERROR)

    logger.log(
        level,
        f"{error.category.name}: {error.message}",
        extra={"details": error.details}
    )

    if error.stack_trace and error.category == ErrorCategory.COLLABORATOR_FAILURE:
        logger.debug(f"Stack trace:\n{error.stack_trace}")
