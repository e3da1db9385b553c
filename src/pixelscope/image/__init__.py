"""Image decoding and session helpers around the analysis engine."""

from .loader import (
    ACCEPTED_FORMATS,
    MAX_FILE_SIZE,
    ValidationResult,
    load_pixel_buffer,
    pixel_buffer_from_image,
    validate_image_file,
)
from .session import AnalysisSession, SessionState, SessionStatus

__all__ = [
    "ACCEPTED_FORMATS",
    "MAX_FILE_SIZE",
    "AnalysisSession",
    "SessionState",
    "SessionStatus",
    "ValidationResult",
    "load_pixel_buffer",
    "pixel_buffer_from_image",
    "validate_image_file",
]
