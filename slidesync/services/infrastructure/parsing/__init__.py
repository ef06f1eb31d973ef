"""
Parsing utilities for model responses
"""

from .json_parser import (
    ResponseShape,
    parse_model_response,
    strip_markdown_fences,
    slice_outer_json,
    extract_largest_balanced_json,
    repair_json_syntax,
    fix_json_escapes,
)
from .section_parser import (
    SectionValidation,
    validate_sections,
    extract_numbered_sections,
    extract_quoted_sections,
    extract_paragraph_sections,
)

__all__ = [
    "ResponseShape",
    "parse_model_response",
    "strip_markdown_fences",
    "slice_outer_json",
    "extract_largest_balanced_json",
    "repair_json_syntax",
    "fix_json_escapes",
    "SectionValidation",
    "validate_sections",
    "extract_numbered_sections",
    "extract_quoted_sections",
    "extract_paragraph_sections",
]
