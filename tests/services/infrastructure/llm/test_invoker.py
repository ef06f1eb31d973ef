"""
Tests for slidesync.services.infrastructure.llm.invoker

Retry, fallback and parse handling of ModelInvoker against a scripted
provider. asyncio.sleep is patched wherever backoff would otherwise wait.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from slidesync.config.models import ModelConfig, StageModels
from slidesync.core.exceptions import ModelInvocationError, UnparseableResponseError
from slidesync.services.infrastructure.llm import (
    ErrorKind,
    LLMProvider,
    ModelInvoker,
    ProviderType,
    ResponseShape,
    RetryPolicy,
)

PAYLOAD = {"slide_number": 1, "total_slides": 2, "analysis_json": "{}", "script_section": "Hello"}


@pytest.fixture
def stage_models():
    return StageModels(coaching=ModelConfig(primary="primary-model", fallback="fallback-model"))


def make_invoker(provider, stage_models, **kwargs):
    return ModelInvoker(provider=provider, stage_models=stage_models, **kwargs)


class HangingProvider(LLMProvider):
    provider_type = ProviderType.OPENAI

    def __init__(self):
        self.calls = 0

    def is_available(self) -> bool:
        return True

    async def complete(self, request):
        self.calls += 1
        await asyncio.Event().wait()


class TestModelFallback:
    """Primary/fallback model selection."""

    @pytest.mark.asyncio
    async def test_primary_throws_fallback_succeeds(self, scripted_provider, stage_models):
        provider = scripted_provider(by_model={
            "primary-model": [RuntimeError("primary down")],
            "fallback-model": ['{"openingStrategy": "Smile"}'],
        })
        invoker = make_invoker(provider, stage_models)

        result = await invoker.invoke_parsed("coaching", PAYLOAD)

        assert result.ok
        assert result.parsed == {"openingStrategy": "Smile"}
        assert result.model == "fallback-model"
        assert result.used_fallback_model
        assert provider.calls == 2

    @pytest.mark.asyncio
    async def test_primary_success_skips_fallback(self, scripted_provider, stage_models):
        provider = scripted_provider(default='{"a": 1}')
        result = await make_invoker(provider, stage_models).invoke("coaching", PAYLOAD)

        assert result.ok
        assert result.text == '{"a": 1}'
        assert result.parsed is None
        assert provider.models_called == ["primary-model"]

    @pytest.mark.asyncio
    async def test_fatal_error_moves_to_fallback_without_retry(self, scripted_provider, stage_models):
        provider = scripted_provider(by_model={
            "primary-model": [ModelInvocationError("bad key", status_code=401)],
            "fallback-model": ['{"a": 1}'],
        })
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await make_invoker(provider, stage_models).invoke("coaching", PAYLOAD)

        assert result.ok
        assert provider.models_called == ["primary-model", "fallback-model"]
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_config_without_fallback(self, scripted_provider):
        models = StageModels(coaching=ModelConfig(primary="only-model"))
        provider = scripted_provider(default=RuntimeError("down"))

        result = await make_invoker(provider, models).invoke("coaching", PAYLOAD)

        assert not result.ok
        assert provider.calls == 1
        assert result.models_tried == ["only-model"]


class TestRetries:
    """Retry behaviour for transient errors."""

    @pytest.mark.asyncio
    async def test_rate_limit_retried_with_backoff(self, scripted_provider, stage_models):
        provider = scripted_provider(by_model={"primary-model": [
            ModelInvocationError("slow down", status_code=429),
            ModelInvocationError("slow down", status_code=429),
            '{"a": 1}',
        ]})
        invoker = make_invoker(provider, stage_models, policy=RetryPolicy(base_delay=1.0, backoff_factor=2.0))

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await invoker.invoke_parsed("coaching", PAYLOAD)

        assert result.ok
        assert result.attempts == 3
        assert result.model == "primary-model"
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_returns_failed_result(self, scripted_provider, stage_models):
        provider = scripted_provider(default=ModelInvocationError("unavailable", status_code=503))

        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await make_invoker(provider, stage_models).invoke("coaching", PAYLOAD)

        assert not result.ok
        assert result.error_kind is ErrorKind.SERVER_UNAVAILABLE
        assert result.attempts == 6
        assert provider.models_called == ["primary-model"] * 3 + ["fallback-model"] * 3
        assert sleep.await_count == 4
        assert "unavailable" in result.error

    @pytest.mark.asyncio
    async def test_injected_classifier(self, scripted_provider, stage_models):
        provider = scripted_provider(by_model={
            "primary-model": [RuntimeError("flaky"), '{"a": 1}'],
        })
        invoker = make_invoker(provider, stage_models, classifier=lambda e: ErrorKind.NETWORK)

        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await invoker.invoke("coaching", PAYLOAD)

        assert result.ok
        assert provider.models_called == ["primary-model", "primary-model"]

    @pytest.mark.asyncio
    async def test_timeout_per_call(self, stage_models):
        provider = HangingProvider()
        invoker = make_invoker(provider, stage_models, timeout=0.01, policy=RetryPolicy(max_attempts=1))

        result = await invoker.invoke("coaching", PAYLOAD)

        assert not result.ok
        assert result.error_kind is ErrorKind.TIMEOUT
        assert provider.calls == 2
        assert result.error == "TimeoutError"


class TestParsing:
    """Responses must survive the parser in invoke_parsed."""

    @pytest.mark.asyncio
    async def test_malformed_primary_falls_back(self, scripted_provider, stage_models):
        provider = scripted_provider(by_model={
            "primary-model": ["I cannot produce JSON today."],
            "fallback-model": ['```json\n{"energyLevel": "high"}\n```'],
        })
        with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
            result = await make_invoker(provider, stage_models).invoke_parsed("coaching", PAYLOAD)

        assert result.ok
        assert result.parsed == {"energyLevel": "high"}
        assert provider.calls == 2
        sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_malformed_everywhere(self, scripted_provider, stage_models):
        provider = scripted_provider(default="still not json")
        result = await make_invoker(provider, stage_models).invoke_parsed("coaching", PAYLOAD)

        assert not result.ok
        assert result.error_kind is ErrorKind.MALFORMED_OUTPUT
        assert result.error.startswith("Malformed model output")

    @pytest.mark.asyncio
    async def test_array_shape(self, scripted_provider):
        models = StageModels(script_matching=ModelConfig(primary="matcher"))
        provider = scripted_provider(default='["first section text", "second section text"]')
        invoker = make_invoker(provider, models)

        result = await invoker.invoke_parsed(
            "script_matching",
            {"slide_count": 2, "script": "text", "summaries_json": "[]"},
            ResponseShape.ARRAY,
        )

        assert result.parsed == ["first section text", "second section text"]

    @pytest.mark.asyncio
    async def test_custom_parser(self, scripted_provider, stage_models):
        def energy_only(raw):
            if "energy" not in raw:
                raise UnparseableResponseError("no energy field", raw)
            return raw.upper()

        provider = scripted_provider(by_model={
            "primary-model": ["{}"],
            "fallback-model": ["energy: high"],
        })
        with patch("asyncio.sleep", new_callable=AsyncMock):
            result = await make_invoker(provider, stage_models).invoke_parsed(
                "coaching", PAYLOAD, parser=energy_only
            )

        assert result.ok
        assert result.parsed == "ENERGY: HIGH"
        assert result.models_tried == ["primary-model", "fallback-model"]


class TestRequests:
    """Request construction and provider resolution."""

    @pytest.mark.asyncio
    async def test_request_uses_stage_config(self, scripted_provider):
        models = StageModels(coaching=ModelConfig(primary="coach", temperature=0.3, max_tokens=1200))
        provider = scripted_provider(default="{}")

        await make_invoker(provider, models).invoke("coaching", PAYLOAD)

        request = provider.requests[0]
        assert request.model == "coach"
        assert request.temperature == 0.3
        assert request.max_tokens == 1200
        assert request.wants_json
        assert request.messages[0].role == "system"
        assert "Hello" in request.messages[-1].content

    @pytest.mark.asyncio
    async def test_images_attached_to_user_message(self, scripted_provider):
        models = StageModels(vision_analysis=ModelConfig(primary="vision"))
        provider = scripted_provider(default="{}")

        await make_invoker(provider, models).invoke(
            "vision_analysis", {"slide_number": 1, "images": ["data:image/png;base64,AAAA"]}
        )

        assert provider.requests[0].messages[-1].images == ["data:image/png;base64,AAAA"]

    @pytest.mark.asyncio
    async def test_missing_provider_is_failed_result(self, stage_models):
        invoker = ModelInvoker(stage_models=stage_models)
        with patch(
            "slidesync.services.infrastructure.llm.invoker.get_llm_provider",
            side_effect=ValueError("no provider configured"),
        ):
            result = await invoker.invoke("coaching", PAYLOAD)

        assert not result.ok
        assert result.error_kind is ErrorKind.PROVIDER_UNAVAILABLE
        assert result.attempts == 0

    @pytest.mark.asyncio
    async def test_failed_resolution_is_remembered(self, stage_models):
        invoker = ModelInvoker(stage_models=stage_models)
        with patch(
            "slidesync.services.infrastructure.llm.invoker.get_llm_provider",
            side_effect=ValueError("no provider configured"),
        ) as factory:
            first = await invoker.invoke("coaching", PAYLOAD)
            second = await invoker.invoke("coaching", PAYLOAD)

        assert factory.call_count == 1
        assert first.error_kind is ErrorKind.PROVIDER_UNAVAILABLE
        assert second.error_kind is ErrorKind.PROVIDER_UNAVAILABLE
        assert second.error == "no provider configured"

    @pytest.mark.asyncio
    async def test_provider_resolved_once_for_concurrent_calls(self, scripted_provider, stage_models):
        provider = scripted_provider(default="{}")
        invoker = ModelInvoker(stage_models=stage_models)
        with patch(
            "slidesync.services.infrastructure.llm.invoker.get_llm_provider",
            return_value=provider,
        ) as factory:
            results = await asyncio.gather(*(invoker.invoke("coaching", PAYLOAD) for _ in range(3)))

        assert factory.call_count == 1
        assert all(r.ok for r in results)
        assert provider.calls == 3

    def test_unknown_stage(self, stage_models):
        with pytest.raises(ValueError, match="Unknown pipeline stage"):
            ModelInvoker(provider=None, stage_models=stage_models).stage_config("translation")
