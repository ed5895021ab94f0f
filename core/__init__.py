# Core module - Error taxonomy and the detection boundary
# core.detector is the ONLY public entry point; import it directly
# (it depends on the commands package, which depends on core.errors)

from .errors import (
    CommandDetectionError, FaultyCatalogUsage, CatalogError,
    DetectionError, ErrorCategory, ERR_CMD_DETECT,
)

__all__ = [
    "CommandDetectionError", "FaultyCatalogUsage", "CatalogError",
    "DetectionError", "ErrorCategory", "ERR_CMD_DETECT",
]
