"""
Core Module - Cross-cutting concerns and shared infrastructure

Organization:
    - logging.py: Structured logging configuration and utilities
    - exceptions.py: Exception hierarchy
    - validation.py: Input validation and limits

Usage:
    from slidesync.core import get_logger, validate_script
"""

# Logging
from .logging import (
    setup_logging,
    get_logger,
    set_run_id,
    set_stage,
    clear_context,
    LogTimer,
)

# Exceptions
from .exceptions import (
    SlideSyncError,
    PipelineError,
    InfrastructureError,
    InputValidationError,
    EmptyScriptError,
    ScriptTooLargeError,
    SlideCountError,
    SectionCountError,
    ImageValidationError,
    UnparseableResponseError,
    ModelInvocationError,
)

# Validation
from .validation import (
    validate_script,
    validate_slide_count,
    validate_section_count,
    validate_image_data_url,
)

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "set_run_id",
    "set_stage",
    "clear_context",
    "LogTimer",
    # Exceptions
    "SlideSyncError",
    "PipelineError",
    "InfrastructureError",
    "InputValidationError",
    "EmptyScriptError",
    "ScriptTooLargeError",
    "SlideCountError",
    "SectionCountError",
    "ImageValidationError",
    "UnparseableResponseError",
    "ModelInvocationError",
    # Validation
    "validate_script",
    "validate_slide_count",
    "validate_section_count",
    "validate_image_data_url",
]
