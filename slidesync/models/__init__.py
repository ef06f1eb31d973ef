"""
Pydantic models for pipeline entities and request/response schemas
"""

from .alignment import (
    CamelModel,
    ScriptSection,
    SlideAnalysis,
    SlideSummary,
    ScriptMatch,
    CoachingGuide,
    ContentGuide,
    ScriptInsights,
    AlignmentRequest,
    AlignmentResponse,
)

__all__ = [
    "CamelModel",
    "ScriptSection",
    "SlideAnalysis",
    "SlideSummary",
    "ScriptMatch",
    "CoachingGuide",
    "ContentGuide",
    "ScriptInsights",
    "AlignmentRequest",
    "AlignmentResponse",
]
