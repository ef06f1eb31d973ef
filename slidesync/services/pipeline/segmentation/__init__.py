"""
Non-AI script segmentation, section rebalancing and script insights
"""

from .segmenter import (
    SegmentationConfig,
    SegmentationKind,
    SegmentationResult,
    SegmentationStrategy,
    segment_script,
    split_paragraphs,
    split_by_markers,
    split_by_headers,
    group_paragraphs,
    split_by_dividers,
)
from .rebalancer import (
    RebalanceResult,
    TerminationReason,
    rebalance_sections,
    split_near_midpoint,
)
from .insights import (
    ScriptInsights,
    process_script,
    count_words,
    estimate_speaking_time,
    extract_key_concepts,
    extract_key_messages,
    generate_content_guide,
    generate_all_content_guides,
    build_sections,
    find_key_alignments,
)

__all__ = [
    "SegmentationConfig",
    "SegmentationKind",
    "SegmentationResult",
    "SegmentationStrategy",
    "segment_script",
    "split_paragraphs",
    "split_by_markers",
    "split_by_headers",
    "group_paragraphs",
    "split_by_dividers",
    "RebalanceResult",
    "TerminationReason",
    "rebalance_sections",
    "split_near_midpoint",
    "ScriptInsights",
    "process_script",
    "count_words",
    "estimate_speaking_time",
    "extract_key_concepts",
    "extract_key_messages",
    "generate_content_guide",
    "generate_all_content_guides",
    "build_sections",
    "find_key_alignments",
]
