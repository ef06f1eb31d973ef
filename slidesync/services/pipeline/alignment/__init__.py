"""
AI alignment stages and the pipeline that runs them
"""

from .analyzer import SlideAnalyzer, default_slide_analysis, analyses_or_defaults
from .summarizer import SlideSummarizer, complete_tags, local_summary
from .aligner import (
    AlignmentOutcome,
    ScriptAligner,
    fallback_matches,
    fit_to_count,
    normalize_matches,
    parse_matching_response,
    placeholder_match,
)
from .coaching import CoachingGenerator, fallback_coaching
from .orchestrator import (
    AlignmentPipeline,
    PipelineContext,
    apply_matches_to_slides,
    flag_low_confidence,
    resolve_slide_count,
)

__all__ = [
    "SlideAnalyzer",
    "default_slide_analysis",
    "analyses_or_defaults",
    "SlideSummarizer",
    "local_summary",
    "complete_tags",
    "AlignmentOutcome",
    "ScriptAligner",
    "fallback_matches",
    "fit_to_count",
    "normalize_matches",
    "parse_matching_response",
    "placeholder_match",
    "CoachingGenerator",
    "fallback_coaching",
    "AlignmentPipeline",
    "PipelineContext",
    "apply_matches_to_slides",
    "flag_low_confidence",
    "resolve_slide_count",
]
