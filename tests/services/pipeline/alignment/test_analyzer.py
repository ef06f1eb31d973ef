"""
Tests for slidesync.services.pipeline.alignment.analyzer
"""

import base64
import json

import pytest

from slidesync.config.models import StageModels
from slidesync.core.exceptions import ImageValidationError
from slidesync.services.infrastructure.llm import ModelInvoker
from slidesync.services.pipeline.alignment.analyzer import (
    SlideAnalyzer,
    analyses_or_defaults,
    default_slide_analysis,
)

IMAGE = "data:image/png;base64," + base64.b64encode(b"png-bytes").decode()


def make_analyzer(provider):
    return SlideAnalyzer(ModelInvoker(provider=provider, stage_models=StageModels()))


class TestSlideAnalyzer:
    """Vision analysis through the invoker."""

    @pytest.mark.asyncio
    async def test_analyze_parses_camel_case(self, scripted_provider):
        provider = scripted_provider(default=json.dumps({
            "allText": "Q3 Results",
            "mainTopic": "Quarterly results",
            "keyPoints": ["Revenue up"],
            "recommendedDuration": "90",
        }))

        analysis = await make_analyzer(provider).analyze(IMAGE, 1)

        assert analysis.main_topic == "Quarterly results"
        assert analysis.recommended_duration == 90
        assert provider.requests[0].messages[-1].images == [IMAGE]

    @pytest.mark.asyncio
    async def test_invalid_image_rejected_before_model_call(self, scripted_provider):
        provider = scripted_provider(default="{}")

        with pytest.raises(ImageValidationError):
            await make_analyzer(provider).analyze("https://example.com/slide.png", 1)
        assert provider.calls == 0

    @pytest.mark.asyncio
    async def test_oversized_image_rejected(self, scripted_provider):
        provider = scripted_provider(default="{}")
        huge = "data:image/png;base64," + "A" * 7_000_000

        with pytest.raises(ImageValidationError):
            await make_analyzer(provider).analyze_all([IMAGE, huge])
        assert provider.calls == 0

    @pytest.mark.asyncio
    async def test_failure_yields_placeholder(self, scripted_provider):
        provider = scripted_provider(default="no json")

        analysis = await make_analyzer(provider).analyze(IMAGE, 4)

        assert analysis == default_slide_analysis(4)
        assert analysis.all_text == "Slide 4"

    @pytest.mark.asyncio
    async def test_analyze_all_in_order(self, scripted_provider):
        def reply(request):
            number = request.messages[-1].content.split("Slide number: ")[1].split(".")[0]
            return json.dumps({"mainTopic": f"Topic {number}"})

        provider = scripted_provider(default=reply)
        analyses = await make_analyzer(provider).analyze_all([IMAGE, IMAGE, IMAGE])

        assert [a.main_topic for a in analyses] == ["Topic 1", "Topic 2", "Topic 3"]


def test_analyses_or_defaults_pads_and_trims():
    padded = analyses_or_defaults([default_slide_analysis(1)], 3)
    assert [a.all_text for a in padded] == ["Slide 1", "Slide 2", "Slide 3"]
    assert len(analyses_or_defaults(padded, 2)) == 2
