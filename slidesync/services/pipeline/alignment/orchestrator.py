"""
Alignment Pipeline - end-to-end script-to-slide alignment

Two paths share one entry point:

- Fast path (no model invoker): heuristic segmentation plus rebalancing,
  mapped onto slides with the fallback confidence.
- AI path: vision analysis (only for image input) -> summaries -> global
  matching -> per-slide coaching. A failed matching stage drops back to the
  fast-path output, so every run ends with per-slide content.

Only input validation errors escape `execute`.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from slidesync.config import LOW_CONFIDENCE_THRESHOLD
from slidesync.core import (
    LogTimer,
    clear_context,
    get_logger,
    set_run_id,
    set_stage,
    validate_image_data_url,
    validate_script,
    validate_section_count,
    validate_slide_count,
)
from slidesync.models import (
    AlignmentRequest,
    AlignmentResponse,
    CoachingGuide,
    ContentGuide,
    ScriptInsights,
    ScriptMatch,
    ScriptSection,
    SlideAnalysis,
    SlideSummary,
)
from slidesync.services.infrastructure.llm import ModelInvoker
from slidesync.services.infrastructure.parsing import validate_sections
from slidesync.services.pipeline.segmentation import (
    SegmentationConfig,
    build_sections,
    generate_all_content_guides,
    process_script,
)
from slidesync.services.use_cases import UseCase
from .aligner import ScriptAligner, fallback_matches
from .analyzer import SlideAnalyzer, analyses_or_defaults
from .coaching import CoachingGenerator
from .summarizer import SlideSummarizer

logger = get_logger(__name__, component="alignment_pipeline")


@dataclass
class PipelineContext:
    """State carried through one pipeline run"""
    run_id: str
    script: str
    slide_count: int
    analyses: List[SlideAnalysis] = field(default_factory=list)
    summaries: List[SlideSummary] = field(default_factory=list)
    matches: List[ScriptMatch] = field(default_factory=list)
    coaching: List[CoachingGuide] = field(default_factory=list)
    sections: List[ScriptSection] = field(default_factory=list)
    content_guides: List[ContentGuide] = field(default_factory=list)
    insights: List[ScriptInsights] = field(default_factory=list)
    used_fallback: bool = False
    warnings: List[str] = field(default_factory=list)
    stage_errors: Dict[str, str] = field(default_factory=dict)

    def record_failure(self, stage: str, error: Optional[str]) -> None:
        message = error or "unknown error"
        self.stage_errors[stage] = message
        self.warnings.append(f"{stage} failed: {message}")


def flag_low_confidence(
    matches: Sequence[ScriptMatch],
    threshold: int = LOW_CONFIDENCE_THRESHOLD,
) -> List[int]:
    """Slide numbers whose match confidence is below `threshold`"""
    return [m.slide_number for m in matches if m.confidence < threshold]


def apply_matches_to_slides(
    matches: Sequence[ScriptMatch],
    slide_ids: Sequence[str],
) -> Dict[str, ScriptMatch]:
    """Assign matches to caller slide ids in slide order.

    Matches beyond the number of ids are skipped; ids beyond the number of
    matches are left unassigned.
    """
    ordered = sorted(matches, key=lambda m: m.slide_number)
    return {slide_id: match for slide_id, match in zip(slide_ids, ordered)}


def resolve_slide_count(request: AlignmentRequest) -> int:
    """Explicit count first, then whatever slide input was supplied"""
    count = (
        request.slide_count
        or len(request.analyses)
        or len(request.slide_images)
        or len(request.slide_ids)
    )
    return validate_slide_count(count or 0)


class AlignmentPipeline(UseCase[AlignmentRequest, AlignmentResponse]):
    """
    Aligns a script to slides and augments each slide with guidance.

    Pass a ModelInvoker to enable the AI path; without one the pipeline runs
    the heuristic path only. Stage components can be injected individually
    (for example a custom vision analyzer) and default to implementations
    built on the invoker.
    """

    def __init__(
        self,
        invoker: Optional[ModelInvoker] = None,
        analyzer: Optional[Any] = None,
        summarizer: Optional[SlideSummarizer] = None,
        aligner: Optional[ScriptAligner] = None,
        coach: Optional[CoachingGenerator] = None,
        segmentation_config: Optional[SegmentationConfig] = None,
        review_threshold: int = LOW_CONFIDENCE_THRESHOLD,
    ):
        self.invoker = invoker
        self.analyzer = analyzer or (SlideAnalyzer(invoker) if invoker else None)
        self.summarizer = summarizer or (SlideSummarizer(invoker) if invoker else None)
        self.aligner = aligner or (ScriptAligner(invoker) if invoker else None)
        self.coach = coach or (CoachingGenerator(invoker) if invoker else None)
        self.segmentation_config = segmentation_config
        self.review_threshold = review_threshold

    @property
    def ai_enabled(self) -> bool:
        return self.summarizer is not None and self.aligner is not None

    async def execute(self, request: AlignmentRequest) -> AlignmentResponse:
        """
        Run the alignment pipeline.

        Raises:
            InputValidationError: Empty or oversized script, bad slide count,
                or an invalid slide image. Raised before any stage runs.
        """
        validate_script(request.script)
        slide_count = resolve_slide_count(request)
        for url in request.slide_images:
            validate_image_data_url(url)

        context = PipelineContext(
            run_id=uuid.uuid4().hex[:12],
            script=request.script,
            slide_count=slide_count,
        )
        set_run_id(context.run_id)

        try:
            with LogTimer(logger, f"alignment pipeline ({slide_count} slides)"):
                if self.ai_enabled:
                    await self._run_ai_path(context, request)
                else:
                    self._run_fast_path(context)
                self._finalize(context)

            return AlignmentResponse(
                run_id=context.run_id,
                matches=context.matches,
                sections=context.sections,
                summaries=context.summaries,
                coaching=context.coaching,
                content_guides=context.content_guides,
                insights=context.insights,
                flagged_for_review=flag_low_confidence(context.matches, self.review_threshold),
                slide_assignments=apply_matches_to_slides(context.matches, request.slide_ids),
                used_fallback=context.used_fallback,
                warnings=context.warnings,
            )
        finally:
            clear_context()

    def _run_fast_path(self, context: PipelineContext) -> None:
        set_stage("segmentation")
        with LogTimer(logger, "heuristic segmentation"):
            context.matches = fallback_matches(
                context.script, context.slide_count, self.segmentation_config
            )
        context.used_fallback = True

    async def _run_ai_path(self, context: PipelineContext, request: AlignmentRequest) -> None:
        if request.slide_images and not request.analyses and self.analyzer is not None:
            set_stage("vision_analysis")
            with LogTimer(logger, "vision analysis"):
                context.analyses = list(await self.analyzer.analyze_all(request.slide_images))
        else:
            context.analyses = list(request.analyses)

        if len(context.analyses) != context.slide_count:
            context.warnings.append(
                f"Got {len(context.analyses)} slide analyses for {context.slide_count} slides"
            )
        context.analyses = analyses_or_defaults(context.analyses, context.slide_count)

        set_stage("slide_summary")
        with LogTimer(logger, "slide summaries"):
            context.summaries = await self.summarizer.summarize_all(context.analyses)

        set_stage("script_matching")
        with LogTimer(logger, "script matching"):
            outcome = await self.aligner.align(context.summaries, context.script, context.analyses)

        if outcome.ok:
            context.matches = outcome.matches
        else:
            logger.warning(
                "Script matching failed, using heuristic segmentation",
                extra={"error": outcome.error},
            )
            context.record_failure("script_matching", outcome.error)
            context.matches = fallback_matches(
                context.script, context.slide_count, self.segmentation_config
            )
            context.used_fallback = True

        if request.include_coaching and self.coach is not None:
            set_stage("coaching")
            with LogTimer(logger, "coaching"):
                context.coaching = await self.coach.generate_all(context.analyses, context.matches)

    def _finalize(self, context: PipelineContext) -> None:
        set_stage(None)
        texts = [m.script_section for m in context.matches]
        validate_section_count(len(texts))

        context.sections = build_sections(texts)
        context.content_guides = generate_all_content_guides(texts)
        context.insights = [process_script(text) for text in texts]

        validation = validate_sections(texts, context.slide_count)
        if not validation.valid:
            context.warnings.append(validation.message)

        empty = [s.index for s in context.sections if s.is_placeholder]
        if empty:
            context.warnings.append(f"No script content for slides {empty}")

        logger.info(
            "Alignment complete",
            extra={
                "slides": context.slide_count,
                "used_fallback": context.used_fallback,
                "empty_slides": len(empty),
            },
        )
