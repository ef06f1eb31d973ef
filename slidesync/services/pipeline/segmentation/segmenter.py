"""
Heuristic script segmentation.

Splits a raw script into ordered per-slide sections without any model call.
Strategies are tried in priority order and the first one that yields content
wins:

1. Explicit "Slide N" markers
2. Known section headers
3. Paragraph grouping into N buckets (only when the slide count is known)
4. Fallback: "---" divider lines, then blank-line paragraphs
"""

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from slidesync.config.constants import (
    DEFAULT_SECTION_HEADERS,
    DIVIDER_PATTERN,
    MIN_HEADER_SECTION_LENGTH,
    MIN_PARAGRAPH_LENGTH,
    SLIDE_MARKER_PATTERN,
)
from slidesync.core.logging import get_logger

logger = get_logger(__name__, component="text_segmenter")

PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")


class SegmentationKind(str, Enum):
    """How trustworthy a segmentation is"""
    SEGMENTED = "segmented"  # Structural cues or a known slide count drove the split
    FALLBACK = "fallback"    # Only dividers or bare paragraphs were available
    FAILED = "failed"        # No content at all


class SegmentationStrategy(str, Enum):
    SLIDE_MARKERS = "slide_markers"
    SECTION_HEADERS = "section_headers"
    PARAGRAPH_GROUPS = "paragraph_groups"
    DIVIDERS = "dividers"
    PARAGRAPHS = "paragraphs"
    NONE = "none"


@dataclass
class SegmentationConfig:
    """Tunable vocabulary for segmentation"""
    marker_pattern: str = SLIDE_MARKER_PATTERN
    section_headers: List[str] = field(default_factory=lambda: list(DEFAULT_SECTION_HEADERS))
    min_paragraph_length: int = MIN_PARAGRAPH_LENGTH
    min_header_section_length: int = MIN_HEADER_SECTION_LENGTH


@dataclass
class SegmentationResult:
    kind: SegmentationKind
    strategy: SegmentationStrategy
    sections: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.kind is not SegmentationKind.FAILED

    def __len__(self) -> int:
        return len(self.sections)


def split_paragraphs(text: str, min_length: int = MIN_PARAGRAPH_LENGTH) -> List[str]:
    """Blank-line separated paragraphs longer than `min_length` characters"""
    paragraphs = (p.strip() for p in PARAGRAPH_SPLIT.split(text))
    return [p for p in paragraphs if len(p) > min_length]


def split_by_markers(text: str, pattern: str) -> List[str]:
    """Split at each marker, discarding anything before the first one"""
    regex = re.compile(pattern, re.IGNORECASE)
    if not regex.search(text):
        return []
    pieces = regex.split(text)[1:]
    return [piece.strip() for piece in pieces if piece.strip()]


def split_by_headers(text: str, headers: List[str], min_length: int = MIN_HEADER_SECTION_LENGTH) -> List[str]:
    """Sections running from each located header to the next one"""
    lowered = text.lower()
    positions = sorted(
        index
        for index in (lowered.find(header.lower()) for header in headers if header)
        if index > -1
    )

    sections = []
    for i, start in enumerate(positions):
        end = positions[i + 1] if i + 1 < len(positions) else len(text)
        section = text[start:end].strip()
        if len(section) > min_length:
            sections.append(section)
    return sections


def group_paragraphs(text: str, slide_count: int, min_length: int = MIN_PARAGRAPH_LENGTH) -> List[str]:
    """Group paragraphs into `slide_count` buckets of ceil(paragraphs / N).

    Buckets left empty because there are fewer paragraphs than slides are
    dropped; the rebalancer splits sections to make up the difference.
    """
    paragraphs = split_paragraphs(text, min_length)
    if not paragraphs or len(paragraphs) == slide_count:
        return paragraphs

    per_slide = math.ceil(len(paragraphs) / slide_count)
    buckets = [
        "\n\n".join(paragraphs[i * per_slide:(i + 1) * per_slide])
        for i in range(slide_count)
    ]
    return [bucket for bucket in buckets if bucket]


def split_by_dividers(text: str) -> List[str]:
    pieces = re.split(DIVIDER_PATTERN, text, flags=re.MULTILINE)
    return [piece.strip() for piece in pieces if piece.strip()]


def segment_script(
    script: str,
    slide_count: Optional[int] = None,
    config: Optional[SegmentationConfig] = None,
) -> SegmentationResult:
    """Split a raw script into ordered per-slide sections.

    Args:
        script: Raw script text
        slide_count: Target number of slides, if known
        config: Marker/header vocabulary (defaults to SegmentationConfig())

    Returns:
        SegmentationResult. An empty script yields kind FAILED rather than
        an exception: callers treat it as "no script available".
    """
    config = config or SegmentationConfig()

    if not script or not script.strip():
        return SegmentationResult(SegmentationKind.FAILED, SegmentationStrategy.NONE)

    sections = split_by_markers(script, config.marker_pattern)
    if sections:
        return _segmented(SegmentationStrategy.SLIDE_MARKERS, sections)

    sections = split_by_headers(script, config.section_headers, config.min_header_section_length)
    if sections:
        return _segmented(SegmentationStrategy.SECTION_HEADERS, sections)

    if slide_count:
        sections = group_paragraphs(script, slide_count, config.min_paragraph_length)
        if sections:
            return _segmented(SegmentationStrategy.PARAGRAPH_GROUPS, sections)

    sections = split_by_dividers(script)
    if len(sections) > 1:
        return _fallback(SegmentationStrategy.DIVIDERS, sections)

    sections = split_paragraphs(script, config.min_paragraph_length)
    if sections:
        return _fallback(SegmentationStrategy.PARAGRAPHS, sections)

    logger.warning("Script produced no sections", extra={"script_length": len(script)})
    return SegmentationResult(SegmentationKind.FAILED, SegmentationStrategy.NONE)


def _segmented(strategy: SegmentationStrategy, sections: List[str]) -> SegmentationResult:
    logger.info(f"Segmented script using {strategy.value}", extra={"sections": len(sections)})
    return SegmentationResult(SegmentationKind.SEGMENTED, strategy, sections)


def _fallback(strategy: SegmentationStrategy, sections: List[str]) -> SegmentationResult:
    logger.info(f"Segmented script using fallback {strategy.value}", extra={"sections": len(sections)})
    return SegmentationResult(SegmentationKind.FALLBACK, strategy, sections)
