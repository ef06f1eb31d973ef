"""
Slide Summarizer - compact per-slide summaries for script matching

Summaries are requested in small batches with a pause between batches to
stay under provider rate limits. A slide whose summary fails falls back to
a deterministic local summary built from its analysis.
"""

import asyncio
import json
import re
from typing import Iterable, List, Sequence

from pydantic import ValidationError

from slidesync.config import SUMMARY_BATCH_DELAY, SUMMARY_BATCH_SIZE
from slidesync.config.constants import LOCAL_SUMMARY_KEY_POINTS, MAX_SUMMARY_TAGS, MIN_SUMMARY_TAGS
from slidesync.core import get_logger
from slidesync.models import SlideAnalysis, SlideSummary
from slidesync.services.infrastructure.llm import ModelInvoker, ResponseShape

logger = get_logger(__name__, component="slide_summarizer")

STAGE = "slide_summary"
NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]")


def _tokens(texts: Iterable[str]) -> List[str]:
    tokens = []
    for token in " ".join(t for t in texts if t).lower().split():
        token = NON_ALPHANUMERIC.sub("", token)
        if token:
            tokens.append(token)
    return tokens


def complete_tags(tags: Sequence[str], analysis: SlideAnalysis, slide_number: int) -> List[str]:
    """
    Bring a tag list to between MIN_SUMMARY_TAGS and MAX_SUMMARY_TAGS entries.

    Existing tags keep their order. Short lists are padded with words from the
    analysis, topic and key points first, then its tone and complexity, and
    finally generic slide labels.
    """
    completed: List[str] = []

    def add(tag: str) -> None:
        tag = tag.strip()
        if tag and tag.lower() not in (t.lower() for t in completed):
            completed.append(tag)

    for tag in tags:
        add(tag)
        if len(completed) == MAX_SUMMARY_TAGS:
            return completed

    padding = [
        *_tokens([analysis.main_topic, *analysis.key_points]),
        *_tokens([analysis.all_text, *analysis.visual_elements, *analysis.suggested_talking_points]),
        analysis.emotional_tone,
        analysis.complexity,
        "slide",
        f"slide{slide_number}",
        "presentation",
    ]
    for tag in padding:
        if len(completed) >= MIN_SUMMARY_TAGS:
            break
        add(tag)

    return completed


def local_summary(analysis: SlideAnalysis, slide_number: int) -> SlideSummary:
    """Summary from main topic plus the first key points, no model involved"""
    fields = [analysis.main_topic, *analysis.key_points[:LOCAL_SUMMARY_KEY_POINTS]]
    fields = [f.strip() for f in fields if f and f.strip()]

    return SlideSummary(
        slide_number=slide_number,
        summary=". ".join(fields) or f"Slide {slide_number}",
        tags=complete_tags(_tokens(fields), analysis, slide_number),
    )


class SlideSummarizer:
    """Produces one SlideSummary per analysed slide"""

    def __init__(
        self,
        invoker: ModelInvoker,
        batch_size: int = SUMMARY_BATCH_SIZE,
        batch_delay: float = SUMMARY_BATCH_DELAY,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.invoker = invoker
        self.batch_size = batch_size
        self.batch_delay = batch_delay

    async def summarize(self, analysis: SlideAnalysis, slide_number: int) -> SlideSummary:
        result = await self.invoker.invoke_parsed(
            STAGE,
            {
                "slide_number": slide_number,
                "analysis_json": json.dumps(analysis.model_dump(by_alias=True)),
            },
            ResponseShape.OBJECT,
        )
        if not result.ok:
            logger.warning(
                f"Summary failed for slide {slide_number}, using local summary",
                extra={"slide_number": slide_number, "error": result.error},
            )
            return local_summary(analysis, slide_number)

        try:
            summary = SlideSummary.model_validate(result.parsed)
        except ValidationError as e:
            logger.warning(
                f"Summary for slide {slide_number} did not match schema, using local summary",
                extra={"slide_number": slide_number, "error": str(e)},
            )
            return local_summary(analysis, slide_number)

        if not summary.summary.strip():
            return local_summary(analysis, slide_number)

        # The model may echo a different number; position is authoritative
        return summary.model_copy(update={
            "slide_number": slide_number,
            "tags": complete_tags(summary.tags, analysis, slide_number),
        })

    async def summarize_all(self, analyses: Sequence[SlideAnalysis]) -> List[SlideSummary]:
        """
        Summarize every slide in order.

        Args:
            analyses: Slide analyses in slide order

        Returns:
            Summaries numbered exactly 1..len(analyses)
        """
        summaries: List[SlideSummary] = []
        total = len(analyses)

        for start in range(0, total, self.batch_size):
            batch = analyses[start:start + self.batch_size]
            results = await asyncio.gather(*(
                self.summarize(analysis, start + offset + 1)
                for offset, analysis in enumerate(batch)
            ))
            summaries.extend(results)

            logger.info(
                f"Summarized slides {start + 1}-{start + len(batch)} of {total}",
                extra={"batch_start": start + 1, "batch_size": len(batch)},
            )
            if start + self.batch_size < total and self.batch_delay > 0:
                await asyncio.sleep(self.batch_delay)

        return summaries
