"""
Slide Analyzer - vision analysis of slide images

Validates each image data URL before any model sees it, then asks the
vision stage for structured slide metadata. A slide whose analysis fails
gets a neutral placeholder analysis so the rest of the pipeline can run.
"""

import asyncio
from typing import List, Optional, Sequence

from pydantic import ValidationError

from slidesync.config.constants import MAX_CONCURRENT_REQUESTS
from slidesync.core import get_logger, validate_image_data_url
from slidesync.models import SlideAnalysis
from slidesync.services.infrastructure.llm import ModelInvoker, ResponseShape

logger = get_logger(__name__, component="slide_analyzer")

STAGE = "vision_analysis"


def default_slide_analysis(slide_number: int) -> SlideAnalysis:
    """Placeholder analysis for a slide the vision stage could not read"""
    return SlideAnalysis(
        all_text=f"Slide {slide_number}",
        main_topic="Presentation slide",
        key_points=["Content analysis pending"],
        visual_elements=[],
        suggested_talking_points=["Present this slide clearly"],
    )


class SlideAnalyzer:
    """Runs vision analysis for slide images through the model invoker"""

    def __init__(self, invoker: ModelInvoker, max_concurrent: int = MAX_CONCURRENT_REQUESTS):
        self.invoker = invoker
        self.semaphore = asyncio.Semaphore(max_concurrent)

    async def analyze(self, image_data_url: str, slide_number: int) -> SlideAnalysis:
        """
        Analyze one slide image.

        Raises:
            ImageValidationError: If the data URL is not an image or too large.
                Raised before any model call.
        """
        validate_image_data_url(image_data_url)

        result = await self.invoker.invoke_parsed(
            STAGE,
            {"slide_number": slide_number, "images": [image_data_url]},
            ResponseShape.OBJECT,
        )
        if not result.ok:
            logger.warning(
                f"Vision analysis failed for slide {slide_number}, using placeholder",
                extra={"slide_number": slide_number, "error": result.error},
            )
            return default_slide_analysis(slide_number)

        try:
            return SlideAnalysis.model_validate(result.parsed)
        except ValidationError as e:
            logger.warning(
                f"Vision analysis for slide {slide_number} did not match schema",
                extra={"slide_number": slide_number, "error": str(e)},
            )
            return default_slide_analysis(slide_number)

    async def analyze_all(self, image_data_urls: Sequence[str]) -> List[SlideAnalysis]:
        """Analyze every slide, validating all images up front"""
        for url in image_data_urls:
            validate_image_data_url(url)

        async def run(index: int, url: str) -> SlideAnalysis:
            async with self.semaphore:
                return await self.analyze(url, index + 1)

        return list(await asyncio.gather(*(run(i, url) for i, url in enumerate(image_data_urls))))


def analyses_or_defaults(analyses: Optional[Sequence[SlideAnalysis]], slide_count: int) -> List[SlideAnalysis]:
    """Pad a partial analysis list with placeholders up to `slide_count`"""
    padded = list(analyses or [])[:slide_count]
    padded.extend(default_slide_analysis(n) for n in range(len(padded) + 1, slide_count + 1))
    return padded
