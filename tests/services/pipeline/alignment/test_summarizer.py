"""
Tests for slidesync.services.pipeline.alignment.summarizer
"""

import json
import re
from unittest.mock import AsyncMock, patch

import pytest

from slidesync.config.models import StageModels
from slidesync.models import SlideAnalysis
from slidesync.services.infrastructure.llm import ModelInvoker
from slidesync.services.pipeline.alignment.summarizer import (
    SlideSummarizer,
    complete_tags,
    local_summary,
)


def analysis(topic, points=()):
    return SlideAnalysis(main_topic=topic, key_points=list(points))


def summary_reply(request):
    """Echo a summary for whichever slide the prompt asks about"""
    number = int(re.search(r"Summarize slide (\d+)", request.messages[-1].content).group(1))
    return json.dumps({"slideNumber": 99, "summary": f"Summary {number}", "tags": ["t1", "t2"]})


class TestLocalSummary:
    """Deterministic summary without a model."""

    def test_topic_and_first_three_points(self):
        result = local_summary(
            analysis("Revenue Growth", ["Q1 up 10%", "Q2 flat", "Q3 record", "Q4 unknown"]),
            4,
        )
        assert result.slide_number == 4
        assert result.summary == "Revenue Growth. Q1 up 10%. Q2 flat. Q3 record"
        assert result.tags == ["revenue", "growth", "q1", "up", "10"]

    def test_tags_deduplicated(self):
        result = local_summary(analysis("Team team TEAM", ["team!"]), 1)
        assert result.tags == ["team", "professional", "moderate"]

    def test_empty_analysis(self):
        result = local_summary(SlideAnalysis(), 2)
        assert result.summary == "Slide 2"
        assert result.tags == ["professional", "moderate", "slide"]

    def test_single_word_topic_padded_to_three_tags(self):
        result = local_summary(SlideAnalysis(main_topic="Intro"), 1)
        assert result.tags == ["intro", "professional", "moderate"]

    def test_padding_prefers_slide_text(self):
        result = local_summary(
            SlideAnalysis(main_topic="Intro", all_text="Welcome aboard", emotional_tone="casual"),
            1,
        )
        assert result.tags == ["intro", "welcome", "aboard"]


class TestCompleteTags:
    """Tag lists always end up with three to five entries."""

    def test_long_list_capped(self):
        tags = complete_tags(["a", "b", "c", "d", "e", "f"], SlideAnalysis(), 1)
        assert tags == ["a", "b", "c", "d", "e"]

    def test_duplicates_and_blanks_dropped_before_padding(self):
        tags = complete_tags(["Cloud", "cloud", " "], SlideAnalysis(main_topic="Cloud costs"), 3)
        assert tags == ["Cloud", "costs", "professional"]

    def test_generic_labels_when_analysis_is_bare(self):
        bare = SlideAnalysis(emotional_tone="", complexity="")
        assert complete_tags([], bare, 7) == ["slide", "slide7", "presentation"]


class TestSlideSummarizer:
    """Batched summarization."""

    @pytest.mark.asyncio
    async def test_numbers_follow_position_and_batches_pause(self, scripted_provider):
        provider = scripted_provider(default=summary_reply)
        summarizer = SlideSummarizer(
            ModelInvoker(provider=provider, stage_models=StageModels()),
            batch_size=3,
            batch_delay=0.5,
        )
        analyses = [analysis(f"Topic {i}") for i in range(1, 8)]

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            summaries = await summarizer.summarize_all(analyses)

        assert [s.slide_number for s in summaries] == list(range(1, 8))
        assert [s.summary for s in summaries] == [f"Summary {i}" for i in range(1, 8)]
        assert summaries[0].tags == ["t1", "t2", "topic"]
        assert provider.calls == 7
        # 7 slides -> batches of 3, 3, 1 -> two pauses
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_failed_slide_uses_local_summary(self, scripted_provider):
        def reply(request):
            if "Summarize slide 2" in request.messages[-1].content:
                return "Sorry, I can't help with that."
            return summary_reply(request)

        provider = scripted_provider(default=reply)
        summarizer = SlideSummarizer(
            ModelInvoker(provider=provider, stage_models=StageModels()),
            batch_delay=0,
        )
        analyses = [analysis("Intro"), analysis("Pricing Model", ["Flat fee"]), analysis("Wrap")]

        summaries = await summarizer.summarize_all(analyses)

        assert summaries[0].summary == "Summary 1"
        assert summaries[1].summary == "Pricing Model. Flat fee"
        assert summaries[1].tags == ["pricing", "model", "flat", "fee"]
        assert summaries[2].summary == "Summary 3"

    @pytest.mark.asyncio
    async def test_empty_input(self, scripted_provider):
        provider = scripted_provider()
        summarizer = SlideSummarizer(ModelInvoker(provider=provider, stage_models=StageModels()))
        assert await summarizer.summarize_all([]) == []
        assert provider.calls == 0

    def test_invalid_batch_size(self, scripted_provider):
        with pytest.raises(ValueError):
            SlideSummarizer(ModelInvoker(provider=scripted_provider()), batch_size=0)
