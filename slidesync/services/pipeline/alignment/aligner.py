"""
Script Aligner - global script-to-slide matching

One model call sees every slide summary plus the full script and assigns a
topic-bounded script section to each slide. The output is normalised to
exactly one match per slide. When the call fails, `fallback_matches`
produces the heuristic segmentation mapped onto slide order.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from slidesync.config.constants import FALLBACK_CONFIDENCE, FALLBACK_REASONING
from slidesync.core import UnparseableResponseError, get_logger
from slidesync.models import ScriptMatch, SlideAnalysis, SlideSummary
from slidesync.services.infrastructure.llm import ModelInvoker, ResponseShape
from slidesync.services.infrastructure.parsing import parse_model_response, strip_markdown_fences
from slidesync.services.pipeline.segmentation import (
    SegmentationConfig,
    find_key_alignments,
    rebalance_sections,
    segment_script,
)

logger = get_logger(__name__, component="script_aligner")

STAGE = "script_matching"
STRING_MATCH_CONFIDENCE = 95
STRING_MATCH_REASONING = "model content matching with topic alignment"
MISSING_MATCH_REASONING = "no script content assigned"


@dataclass
class AlignmentOutcome:
    """Result of one alignment attempt; `matches` has one entry per slide when ok"""
    ok: bool
    matches: List[ScriptMatch] = field(default_factory=list)
    error: Optional[str] = None
    used_strings: bool = False
    model: Optional[str] = None


def placeholder_match(slide_number: int, confidence: int = 0, reasoning: str = MISSING_MATCH_REASONING) -> ScriptMatch:
    return ScriptMatch(
        slide_number=slide_number,
        script_section="",
        confidence=confidence,
        reasoning=reasoning,
    )


def _slide_number_of(item: Dict[str, Any]) -> Optional[int]:
    value = item.get("slideNumber", item.get("slide_number"))
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_matching_response(raw: str) -> List[Any]:
    """
    Extract the list of match items from a matching reply.

    The requested layout is an object with a `matches` array. A bare array
    (of match objects or plain section strings) is accepted when the reply
    opens with one, and prose without any JSON goes through the free-text
    section strategies.

    Raises:
        UnparseableResponseError: Object reply without a `matches` list, or
            nothing recoverable at all
    """
    cleaned = strip_markdown_fences(raw or "")
    first_object = cleaned.find("{")
    first_array = cleaned.find("[")

    if first_object != -1 and (first_array == -1 or first_object < first_array):
        parsed = parse_model_response(raw, ResponseShape.OBJECT)
        items = parsed.get("matches")
        if not isinstance(items, list):
            raise UnparseableResponseError("Matching reply has no 'matches' array", raw)
        return items

    return parse_model_response(raw, ResponseShape.ARRAY)


def _collect_matches(items: Sequence[Any], slide_count: int) -> Dict[int, ScriptMatch]:
    """Valid matches keyed by slide number; the first item for a slide wins"""
    by_slide: Dict[int, ScriptMatch] = {}

    for position, item in enumerate(items, start=1):
        if isinstance(item, str):
            number = position
            match = ScriptMatch(
                slide_number=number,
                script_section=item.strip(),
                confidence=STRING_MATCH_CONFIDENCE,
                reasoning=STRING_MATCH_REASONING,
            )
        elif isinstance(item, dict):
            number = _slide_number_of(item)
            if number is None or not 1 <= number <= slide_count:
                number = position
            try:
                fields = {k: v for k, v in item.items() if k != "slide_number"}
                match = ScriptMatch.model_validate({**fields, "slideNumber": number})
            except ValidationError as e:
                logger.warning(f"Dropping malformed match for slide {number}", extra={"error": str(e)})
                continue
        else:
            continue

        if 1 <= number <= slide_count and number not in by_slide:
            by_slide[number] = match

    return by_slide


def normalize_matches(
    items: Sequence[Any],
    slide_count: int,
    sources: Optional[Sequence[Union[SlideAnalysis, SlideSummary]]] = None,
) -> List[ScriptMatch]:
    """
    Reduce raw model items to exactly one ScriptMatch per slide.

    Dict items are placed by their slide number (position when it is missing
    or out of range); the first item for a slide wins. Plain strings map 1:1
    in order. Slides nobody claimed get an empty placeholder with confidence 0.
    Empty key alignments are filled from the slide's own vocabulary.
    """
    by_slide = _collect_matches(items, slide_count)

    matches = []
    for number in range(1, slide_count + 1):
        match = by_slide.get(number) or placeholder_match(number)
        if not match.key_alignment and sources and number <= len(sources):
            alignments = find_key_alignments(match.script_section, sources[number - 1])
            if alignments:
                match = match.model_copy(update={"key_alignment": alignments})
        matches.append(match)
    return matches


def fit_to_count(sections: Sequence[str], slide_count: int) -> List[str]:
    """Merge overflow into the last slot and pad with empty strings"""
    fitted = list(sections)
    if len(fitted) > slide_count:
        overflow = "\n\n".join(fitted[slide_count - 1:])
        fitted = fitted[:slide_count - 1] + [overflow]
    fitted.extend("" for _ in range(slide_count - len(fitted)))
    return fitted


def fallback_matches(
    script: str,
    slide_count: int,
    config: Optional[SegmentationConfig] = None,
) -> List[ScriptMatch]:
    """
    Heuristic segmentation mapped 1:1 onto slide order.

    Always returns exactly `slide_count` matches with the fallback confidence
    and reasoning, padding with empty sections when the script runs out.
    """
    if slide_count < 1:
        return []

    segmentation = segment_script(script, slide_count, config)
    sections = segmentation.sections
    if sections and len(sections) != slide_count:
        rebalanced = rebalance_sections(sections, slide_count)
        sections = rebalanced.sections

    return [
        ScriptMatch(
            slide_number=number,
            script_section=text,
            confidence=FALLBACK_CONFIDENCE,
            reasoning=FALLBACK_REASONING,
        )
        for number, text in enumerate(fit_to_count(sections, slide_count), start=1)
    ]


class ScriptAligner:
    """Matches the whole script to every slide in one model call"""

    def __init__(self, invoker: ModelInvoker):
        self.invoker = invoker

    async def align(
        self,
        summaries: Sequence[SlideSummary],
        script: str,
        analyses: Optional[Sequence[SlideAnalysis]] = None,
    ) -> AlignmentOutcome:
        """
        Ask the matching stage to assign script sections to slides.

        Args:
            summaries: One summary per slide, in order
            script: Full script text
            analyses: Optional analyses used to fill missing key alignments

        Returns:
            AlignmentOutcome; `ok=False` carries the invoker's error and no matches
        """
        slide_count = len(summaries)
        if slide_count == 0:
            return AlignmentOutcome(ok=False, error="No slides to align")

        result = await self.invoker.invoke_parsed(
            STAGE,
            {
                "slide_count": slide_count,
                "script": script,
                "summaries_json": json.dumps(
                    [s.model_dump(by_alias=True) for s in summaries], indent=2
                ),
            },
            parser=parse_matching_response,
        )
        if not result.ok:
            logger.warning("Script matching failed", extra={"error": result.error})
            return AlignmentOutcome(ok=False, error=result.error, model=result.model)

        items = result.parsed if isinstance(result.parsed, list) else []
        if not items:
            return AlignmentOutcome(ok=False, error="Model returned no matches", model=result.model)

        usable = [m for m in _collect_matches(items, slide_count).values() if m.script_section.strip()]
        if not usable:
            logger.warning(
                "Matching reply assigned no script content",
                extra={"model": result.model, "raw_matches": len(items)},
            )
            return AlignmentOutcome(ok=False, error="Model returned no usable matches", model=result.model)

        used_strings = all(isinstance(item, str) for item in items)
        matches = normalize_matches(items, slide_count, analyses or summaries)

        logger.info(
            f"Aligned script to {slide_count} slides",
            extra={"model": result.model, "raw_matches": len(items), "used_strings": used_strings},
        )
        return AlignmentOutcome(ok=True, matches=matches, used_strings=used_strings, model=result.model)
