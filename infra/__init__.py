# Infrastructure module - Logging

from .logging import (
    get_logger, configure_logging, DetectionContext,
    get_detection_id, generate_detection_id
)

__all__ = [
    "get_logger",
    "configure_logging",
    "DetectionContext",
    "get_detection_id",
    "generate_detection_id",
]
