"""
Core Exceptions
Standardized base exceptions for the alignment engine.
"""

from typing import Optional


class SlideSyncError(Exception):
    """Base exception for all application errors."""
    pass


class PipelineError(SlideSyncError):
    """Base exception for processing pipeline errors."""
    pass


class InfrastructureError(SlideSyncError):
    """Base exception for infrastructure errors (LLM transport, providers)."""
    pass


class InputValidationError(SlideSyncError):
    """Caller input rejected before the pipeline is entered."""
    pass


class EmptyScriptError(InputValidationError):
    pass


class ScriptTooLargeError(InputValidationError):
    pass


class SlideCountError(InputValidationError):
    pass


class SectionCountError(InputValidationError):
    pass


class ImageValidationError(InputValidationError):
    """Image data URL is malformed or too large for vision analysis."""
    pass


class UnparseableResponseError(PipelineError):
    """No parsing strategy could recover content from a model response.

    Carries a truncated preview of the raw text for diagnostics.
    """

    PREVIEW_LENGTH = 200

    def __init__(self, message: str, raw_text: str = ""):
        self.preview = (raw_text or "")[: self.PREVIEW_LENGTH]
        suffix = f" Raw content: {self.preview}..." if self.preview else ""
        super().__init__(f"{message}{suffix}")


class ModelInvocationError(InfrastructureError):
    """Error raised by an LLM provider for a single request."""

    def __init__(self, message: str, status_code: Optional[int] = None, provider: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.provider = provider
