"""
Coaching Generator - per-slide delivery coaching

One model call per matched slide, run concurrently under a semaphore. A
failed call yields a generic guide built from the slide's main topic.
"""

import asyncio
import json
from typing import List, Optional, Sequence

from pydantic import ValidationError

from slidesync.config.constants import MAX_CONCURRENT_REQUESTS
from slidesync.core import get_logger
from slidesync.models import CoachingGuide, ScriptMatch, SlideAnalysis
from slidesync.services.infrastructure.llm import ModelInvoker, ResponseShape

logger = get_logger(__name__, component="coaching_generator")

STAGE = "coaching"


def fallback_coaching(analysis: Optional[SlideAnalysis]) -> CoachingGuide:
    """Generic guide that needs no model call"""
    topic = (analysis.main_topic.strip() if analysis else "") or "this slide"
    return CoachingGuide(
        opening_strategy=f"Start with confidence and a clear introduction to {topic}",
        key_emphasis_points=[f"Focus on the main message of {topic}", "Use clear examples"],
        body_language_tips=["Maintain eye contact", "Use purposeful gestures"],
        voice_modulation=["Vary your pace", "Emphasize key points"],
        audience_engagement=["Ask rhetorical questions", "Use pause for impact"],
        transition_to_next="Smoothly connect to next topic",
        timing_recommendation="Spend appropriate time on each point",
        potential_questions=["Be prepared for clarification questions"],
        common_mistakes=["Avoid rushing through content"],
        energy_level="medium",
    )


class CoachingGenerator:
    """Generates CoachingGuide objects through the coaching stage"""

    def __init__(self, invoker: ModelInvoker, max_concurrent: int = MAX_CONCURRENT_REQUESTS):
        self.invoker = invoker
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)

    async def generate(
        self,
        analysis: Optional[SlideAnalysis],
        script_section: str,
        slide_number: int,
        total_slides: int,
    ) -> CoachingGuide:
        payload = {
            "slide_number": slide_number,
            "total_slides": total_slides,
            "analysis_json": json.dumps(analysis.model_dump(by_alias=True)) if analysis else "{}",
            "script_section": script_section or "(no script assigned to this slide)",
        }
        result = await self.invoker.invoke_parsed(STAGE, payload, ResponseShape.OBJECT)
        if not result.ok:
            logger.warning(
                f"Coaching failed for slide {slide_number}, using generic guide",
                extra={"slide_number": slide_number, "error": result.error},
            )
            return fallback_coaching(analysis)

        try:
            return CoachingGuide.model_validate(result.parsed)
        except ValidationError as e:
            logger.warning(
                f"Coaching for slide {slide_number} did not match schema",
                extra={"slide_number": slide_number, "error": str(e)},
            )
            return fallback_coaching(analysis)

    async def generate_all(
        self,
        analyses: Sequence[Optional[SlideAnalysis]],
        matches: Sequence[ScriptMatch],
    ) -> List[CoachingGuide]:
        """
        Coaching for every match, at most `max_concurrent` calls in flight.

        Results are index-aligned with `matches`.
        """
        total = len(matches)

        async def run(match: ScriptMatch) -> CoachingGuide:
            index = match.slide_number - 1
            analysis = analyses[index] if 0 <= index < len(analyses) else None
            async with self.semaphore:
                return await self.generate(analysis, match.script_section, match.slide_number, total)

        return list(await asyncio.gather(*(run(match) for match in matches)))
