"""
JSON recovery for model output.

Model responses are supposed to be a single JSON object or array, but in
practice they arrive wrapped in markdown fences, prefixed with prose,
annotated with // comments, or carrying trailing commas. This module
recovers the payload in a fixed order of increasingly lenient strategies:

1. Strict parse of the outermost object/array slice
2. Syntax repair (comments, trailing commas, placeholder tokens, escapes)
3. Numbered-list extraction          (array shapes only)
4. Quoted-string extraction          (array shapes only)
5. Paragraph extraction              (array shapes only)

If nothing yields content an UnparseableResponseError is raised with a
preview of the raw text.
"""

import json
import re
from enum import Enum
from typing import Any, List, Optional

from slidesync.core.exceptions import UnparseableResponseError
from slidesync.core.logging import get_logger
from .section_parser import (
    extract_numbered_sections,
    extract_quoted_sections,
    extract_paragraph_sections,
)

logger = get_logger(__name__, component="response_parser")


class ResponseShape(str, Enum):
    """Top-level JSON shape a stage expects"""
    OBJECT = "object"
    ARRAY = "array"

    @property
    def delimiters(self) -> tuple:
        return ("{", "}") if self is ResponseShape.OBJECT else ("[", "]")

    @property
    def python_type(self) -> type:
        return dict if self is ResponseShape.OBJECT else list


_FENCE_PATTERN = re.compile(r"```[a-zA-Z]*[ \t]*")
_LITERAL_TOKENS = {"true", "false", "null"}
# Valid escapes are consumed whole so an escaped backslash is never split
_ESCAPE_PATTERN = re.compile(r'\\(["\\/bfnrt]|u[0-9a-fA-F]{4})|\\')


def strip_markdown_fences(text: str) -> str:
    """Remove ``` / ```json fence markers while keeping their content."""
    return _FENCE_PATTERN.sub("", text).strip()


def slice_outer_json(text: str, shape: ResponseShape) -> Optional[str]:
    """Substring from the first opening delimiter to the last closing one."""
    opener, closer = shape.delimiters
    start = text.find(opener)
    end = text.rfind(closer)
    if start == -1 or end == -1 or end <= start:
        return None
    return text[start:end + 1]


def extract_largest_balanced_json(text: str, shape: ResponseShape) -> Optional[str]:
    """Extract the largest balanced JSON object/array of the given shape.

    Scans for balanced braces/brackets while respecting string literals and
    escapes, so prose containing stray brackets after the payload does not
    break extraction.
    """
    if not text:
        return None

    opener, _ = shape.delimiters
    in_string = False
    escape = False
    stack: List[str] = []
    start_idx: Optional[int] = None
    best: Optional[str] = None

    for i, ch in enumerate(text):
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch in "{[":
            if not stack:
                start_idx = i
            stack.append(ch)
        elif ch in "}]" and stack:
            if (stack[-1] == "{") == (ch == "}"):
                stack.pop()
                if not stack and start_idx is not None:
                    candidate = text[start_idx:i + 1]
                    if candidate[0] == opener and (best is None or len(candidate) > len(best)):
                        best = candidate
                    start_idx = None
            else:
                # Mismatched closing; reset state.
                stack.clear()
                start_idx = None

    return best


def _placeholder_end(text: str, start: int) -> Optional[int]:
    """Index of the ']' closing a bracketed placeholder token at `start`, if any.

    A placeholder is a bracketed run of plain words such as `[no content]`
    that a model emitted where a string belongs.
    """
    end = text.find("]", start + 1)
    if end == -1:
        return None
    inner = text[start + 1:end].strip()
    if not inner or not inner[0].isalpha():
        return None
    if any(ch in inner for ch in '"[{}:'):
        return None
    if all(token.strip().lower() in _LITERAL_TOKENS for token in inner.split(",")):
        return None
    return end


def repair_json_syntax(text: str, replace_placeholders: bool = True) -> str:
    """Fix the common ways models break JSON syntax.

    Outside string literals this removes `//` and `/* */` comments, drops
    trailing commas before `]` or `}` and, optionally, replaces bracketed
    placeholder tokens with empty strings.
    """
    out: List[str] = []
    i = 0
    n = len(text)
    in_string = False
    escape = False

    while i < n:
        ch = text[i]

        if in_string:
            out.append(ch)
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
        elif text.startswith("/*", i):
            close = text.find("*/", i + 2)
            i = n if close == -1 else close + 2
        elif ch == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j < n and text[j] in "]}":
                i += 1
            else:
                out.append(ch)
                i += 1
        elif ch == "[" and replace_placeholders and out and _placeholder_end(text, i) is not None:
            # Only inside an array: the previous significant char opens or continues it
            previous = "".join(out).rstrip()[-1:]
            if previous in ("[", ","):
                out.append('""')
                i = _placeholder_end(text, i) + 1
            else:
                out.append(ch)
                i += 1
        else:
            out.append(ch)
            i += 1

    return "".join(out)


def fix_json_escapes(text: str) -> str:
    """Escape lone backslashes while preserving valid JSON escapes."""
    return _ESCAPE_PATTERN.sub(
        lambda match: match.group(0) if match.group(1) else "\\\\",
        text,
    )


def _loads_as(candidate: Optional[str], shape: ResponseShape) -> Optional[Any]:
    if not candidate:
        return None
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, shape.python_type) else None


def parse_model_response(raw: str, expect: ResponseShape = ResponseShape.OBJECT) -> Any:
    """Parse model output into a dict (OBJECT) or list (ARRAY).

    Args:
        raw: Raw text returned by the model
        expect: Expected top-level shape

    Returns:
        Parsed dict or list

    Raises:
        UnparseableResponseError: If no strategy recovered any content
    """
    if not raw or not isinstance(raw, str) or not raw.strip():
        raise UnparseableResponseError("Invalid content: expected non-empty string", raw or "")

    cleaned = strip_markdown_fences(raw)

    # Strategy 1: strict parse of the outer slice, then of the largest balanced block
    outer = slice_outer_json(cleaned, expect)
    parsed = _loads_as(outer, expect)
    if parsed is not None:
        return parsed

    balanced = extract_largest_balanced_json(cleaned, expect)
    parsed = _loads_as(balanced, expect)
    if parsed is not None:
        return parsed

    # Strategy 2: syntax repair
    for candidate in (outer, balanced):
        if not candidate:
            continue
        repaired = repair_json_syntax(candidate, replace_placeholders=expect is ResponseShape.ARRAY)
        parsed = _loads_as(repaired, expect)
        if parsed is None:
            parsed = _loads_as(fix_json_escapes(repaired), expect)
        if parsed is not None:
            logger.debug("Recovered JSON after syntax repair", extra={"shape": expect.value})
            return parsed

    if expect is ResponseShape.ARRAY:
        # Strategies 3-5: free-text section extraction
        for extractor in (
            extract_numbered_sections,
            extract_quoted_sections,
            extract_paragraph_sections,
        ):
            sections = extractor(raw)
            if sections:
                logger.info(
                    "Recovered sections from free text",
                    extra={"strategy": extractor.__name__, "sections": len(sections)},
                )
                return sections

    raise UnparseableResponseError(
        "Could not extract content from model response. Response format may have changed.",
        raw,
    )
