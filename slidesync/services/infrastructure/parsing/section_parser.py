"""
Free-text section extraction for model responses that are not JSON.

Used as the last stages of response recovery when a model was asked for a
list of script sections but answered in prose, as a numbered list, or with
quoted passages.
"""

import re
from dataclasses import dataclass
from typing import Any, List

from slidesync.config.constants import MIN_AVERAGE_SECTION_LENGTH, SECTION_COUNT_TOLERANCE

NUMBERED_LINE = re.compile(r"^\s*\d+[.)]\s+(.+)")
NUMBERED_PREFIX = re.compile(r"^\s*\d+[.)]")
CAPS_HEADER = re.compile(r"^[A-Z][A-Z\s]+:")
BOLD_HEADER = re.compile(r"^\*\*[^*]+\*\*:?$")
QUOTED_RUN = re.compile(r'"([^"]{20,})"')
SENTENCE_PUNCTUATION = re.compile(r"[.!?]")
PARAGRAPH_BREAK = re.compile(r"\n\n+|\n---+\n|\n\*\*\*")

MIN_NUMBERED_LENGTH = 20
MIN_QUOTED_WORDS = 5
MIN_PARAGRAPH_CHARS = 50
MIN_PARAGRAPH_WORDS = 10


def _is_heading_boundary(line: str) -> bool:
    return (
        "Note:" in line
        or "```" in line
        or CAPS_HEADER.match(line) is not None
        or BOLD_HEADER.match(line) is not None
    )


def extract_numbered_sections(content: str) -> List[str]:
    """Sections from a numbered list ("1. text" / "2) text").

    Continuation lines are appended to the current item until a heading-like
    line or a markdown fence ends the list. Fragments of 20 characters or
    fewer are dropped.
    """
    sections: List[str] = []
    current = ""
    in_list = False

    for line in content.split("\n"):
        numbered = NUMBERED_LINE.match(line)
        if numbered:
            if current.strip():
                sections.append(current.strip())
            current = numbered.group(1)
            in_list = True
        elif in_list and line.strip():
            if _is_heading_boundary(line):
                in_list = False
                if current.strip():
                    sections.append(current.strip())
                current = ""
            elif not NUMBERED_PREFIX.match(line):
                current += " " + line.strip()

    if current.strip():
        sections.append(current.strip())

    return [section for section in sections if len(section) > MIN_NUMBERED_LENGTH]


def extract_quoted_sections(content: str) -> List[str]:
    """Quoted runs that read like script sentences"""
    sections = []
    for match in QUOTED_RUN.finditer(content):
        text = match.group(1)
        if len(text.split(" ")) > MIN_QUOTED_WORDS and SENTENCE_PUNCTUATION.search(text):
            sections.append(text)
    return sections


def extract_paragraph_sections(content: str) -> List[str]:
    sections = []
    for paragraph in PARAGRAPH_BREAK.split(content):
        cleaned = paragraph.strip()
        if (
            len(cleaned) > MIN_PARAGRAPH_CHARS
            and not cleaned.startswith("Note:")
            and not cleaned.startswith("SLIDE")
            and "```" not in cleaned
            and len(cleaned.split(" ")) > MIN_PARAGRAPH_WORDS
        ):
            sections.append(cleaned)
    return sections


@dataclass
class SectionValidation:
    """Outcome of checking extracted sections against a slide count"""
    valid: bool
    message: str


def validate_sections(sections: Any, expected_count: int) -> SectionValidation:
    """Check that extracted sections plausibly fit `expected_count` slides.

    Problems are reported, never corrected.
    """
    if not isinstance(sections, (list, tuple)):
        return SectionValidation(False, "Extracted content is not an array")

    if not sections:
        return SectionValidation(False, "No sections extracted")

    if abs(len(sections) - expected_count) > SECTION_COUNT_TOLERANCE:
        return SectionValidation(
            False, f"Expected ~{expected_count} sections, got {len(sections)}"
        )

    filled = [str(section) for section in sections if str(section).strip()]
    average = sum(len(section) for section in filled) / len(filled) if filled else 0
    if average < MIN_AVERAGE_SECTION_LENGTH:
        return SectionValidation(False, "Sections are too short to be meaningful")

    return SectionValidation(True, "Sections validated successfully")
