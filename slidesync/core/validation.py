"""
Input validation helpers.

Rejects caller input before any pipeline stage or model call runs. Every
failure raises an InputValidationError subclass so callers can treat the
whole family as "bad request".

Functions:
    validate_script: Non-empty script within the size limit
    validate_slide_count: Slide count within [MIN_SLIDE_COUNT, MAX_SLIDES]
    validate_section_count: Section count within MAX_SECTIONS
    validate_image_data_url: Data URL prefix and decoded size check
"""

from slidesync.config.constants import (
    IMAGE_DATA_URL_PREFIX,
    MAX_IMAGE_BYTES,
    MAX_SCRIPT_SIZE,
    MAX_SECTIONS,
    MAX_SLIDES,
    MIN_SLIDE_COUNT,
)
from slidesync.core.exceptions import (
    EmptyScriptError,
    ImageValidationError,
    ScriptTooLargeError,
    SectionCountError,
    SlideCountError,
)


def validate_script(script: str) -> str:
    """
    Validate a speaking script.

    Args:
        script: Raw script text supplied by the caller

    Returns:
        The script unchanged

    Raises:
        EmptyScriptError: Script is missing or whitespace only
        ScriptTooLargeError: Script exceeds MAX_SCRIPT_SIZE characters
    """
    if script is None or not str(script).strip():
        raise EmptyScriptError("Script is empty")
    if len(script) > MAX_SCRIPT_SIZE:
        raise ScriptTooLargeError(
            f"Script too large: {len(script)} characters (max {MAX_SCRIPT_SIZE})"
        )
    return script


def validate_slide_count(slide_count: int) -> int:
    if slide_count < MIN_SLIDE_COUNT:
        raise SlideCountError(f"At least {MIN_SLIDE_COUNT} slide is required, got {slide_count}")
    if slide_count > MAX_SLIDES:
        raise SlideCountError(f"Too many slides: {slide_count} (max {MAX_SLIDES})")
    return slide_count


def validate_section_count(section_count: int) -> int:
    if section_count > MAX_SECTIONS:
        raise SectionCountError(f"Too many sections: {section_count} (max {MAX_SECTIONS})")
    return section_count


def estimate_decoded_size(data_url: str) -> int:
    """Approximate decoded byte size of a base64 data URL payload."""
    payload = data_url.split(",", 1)[1] if "," in data_url else data_url
    return len(payload) * 3 // 4


def validate_image_data_url(data_url: str) -> str:
    """
    Validate a slide image before it is sent for vision analysis.

    Args:
        data_url: Image encoded as a data URL (data:image/png;base64,...)

    Returns:
        The data URL unchanged

    Raises:
        ImageValidationError: Not an image data URL, or larger than MAX_IMAGE_BYTES
            once decoded
    """
    if not data_url or not data_url.startswith(IMAGE_DATA_URL_PREFIX):
        raise ImageValidationError("Invalid image format: expected a data:image/ URL")

    size = estimate_decoded_size(data_url)
    if size > MAX_IMAGE_BYTES:
        raise ImageValidationError(
            f"Image too large: {size} bytes (max {MAX_IMAGE_BYTES})"
        )
    return data_url
