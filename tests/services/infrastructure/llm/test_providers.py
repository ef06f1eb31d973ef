"""
Tests for the LLM providers and the provider factory

HTTP traffic is replaced with mocked httpx clients; the Gemini client is
replaced on the provider instance.
"""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from google.genai import errors as genai_errors

from slidesync.core.exceptions import ModelInvocationError
from slidesync.services.infrastructure.llm import (
    ChatMessage,
    ModelRequest,
    ProviderType,
    clear_provider_cache,
    get_default_provider_type,
    get_llm_provider,
)
from slidesync.services.infrastructure.llm.gemini_provider import GeminiProvider, _image_part
from slidesync.services.infrastructure.llm.ollama_provider import OllamaProvider
from slidesync.services.infrastructure.llm.openai_provider import OpenAIProvider

PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(b"fake-png").decode()


def make_request(**kwargs):
    messages = kwargs.pop("messages", [
        ChatMessage(role="system", content="Return JSON only."),
        ChatMessage(role="user", content="Describe slide 1", images=[PNG_DATA_URL]),
    ])
    return ModelRequest(model=kwargs.pop("model", "test-model"), messages=messages, **kwargs)


def mock_async_client(status_code=200, json_body=None, text=None):
    """Patchable stand-in for httpx.AsyncClient returning one canned response"""
    request = httpx.Request("POST", "https://llm.test/")
    if json_body is not None:
        response = httpx.Response(status_code, json=json_body, request=request)
    else:
        response = httpx.Response(status_code, text=text or "", request=request)

    client = AsyncMock()
    client.post.return_value = response
    client_cls = MagicMock()
    client_cls.return_value.__aenter__.return_value = client
    return client_cls, client


class TestOpenAIProvider:
    """OpenAI-compatible chat completions."""

    @pytest.mark.asyncio
    async def test_complete_builds_payload(self):
        client_cls, client = mock_async_client(json_body={
            "model": "gpt-4o-mini",
            "choices": [{"message": {"content": ' {"mainTopic": "Roadmap"} '}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5},
        })
        provider = OpenAIProvider(api_key="sk-test", base_url="https://llm.test/v1/")

        with patch("slidesync.services.infrastructure.llm.openai_provider.httpx.AsyncClient", client_cls):
            response = await provider.complete(make_request(max_tokens=300))

        url = client.post.await_args.args[0]
        payload = client.post.await_args.kwargs["json"]
        headers = client.post.await_args.kwargs["headers"]

        assert url == "https://llm.test/v1/chat/completions"
        assert headers["Authorization"] == "Bearer sk-test"
        assert payload["response_format"] == {"type": "json_object"}
        assert payload["max_tokens"] == 300
        assert payload["messages"][0] == {"role": "system", "content": "Return JSON only."}
        user_parts = payload["messages"][1]["content"]
        assert user_parts[0] == {"type": "text", "text": "Describe slide 1"}
        assert user_parts[1]["image_url"]["url"] == PNG_DATA_URL

        assert response.text == '{"mainTopic": "Roadmap"}'
        assert response.usage.total_tokens == 15

    @pytest.mark.asyncio
    async def test_http_error_carries_status(self):
        client_cls, _ = mock_async_client(status_code=429, text="rate limited")
        provider = OpenAIProvider(api_key="sk-test")

        with patch("slidesync.services.infrastructure.llm.openai_provider.httpx.AsyncClient", client_cls):
            with pytest.raises(ModelInvocationError) as excinfo:
                await provider.complete(make_request())

        assert excinfo.value.status_code == 429
        assert excinfo.value.provider == "openai"

    @pytest.mark.asyncio
    async def test_missing_key(self):
        provider = OpenAIProvider()
        assert not provider.is_available()
        with pytest.raises(ModelInvocationError) as excinfo:
            await provider.complete(make_request())
        assert excinfo.value.status_code == 401


class TestOllamaProvider:
    """Local Ollama chat endpoint."""

    @pytest.mark.asyncio
    async def test_complete_sends_bare_base64_images(self):
        client_cls, client = mock_async_client(json_body={
            "message": {"content": '{"summary": "ok"}'},
            "prompt_eval_count": 7,
            "eval_count": 3,
        })
        provider = OllamaProvider(base_url="http://ollama.test:11434/")

        with patch("slidesync.services.infrastructure.llm.ollama_provider.httpx.AsyncClient", client_cls):
            response = await provider.complete(make_request(max_tokens=50))

        payload = client.post.await_args.kwargs["json"]
        assert client.post.await_args.args[0] == "http://ollama.test:11434/api/chat"
        assert payload["format"] == "json"
        assert payload["stream"] is False
        assert payload["options"] == {"temperature": 0.2, "num_predict": 50}
        assert payload["messages"][1]["images"] == [PNG_DATA_URL.partition(",")[2]]
        assert response.text == '{"summary": "ok"}'
        assert response.usage.total_tokens == 10

    @pytest.mark.asyncio
    async def test_server_error(self):
        client_cls, _ = mock_async_client(status_code=503, text="loading model")
        provider = OllamaProvider(base_url="http://ollama.test")

        with patch("slidesync.services.infrastructure.llm.ollama_provider.httpx.AsyncClient", client_cls):
            with pytest.raises(ModelInvocationError) as excinfo:
                await provider.complete(make_request())
        assert excinfo.value.status_code == 503

    def test_unreachable_server_is_unavailable(self):
        client = MagicMock()
        client.get.side_effect = httpx.ConnectError("refused")
        client_cls = MagicMock()
        client_cls.return_value.__enter__.return_value = client

        with patch("slidesync.services.infrastructure.llm.ollama_provider.httpx.Client", client_cls):
            assert not OllamaProvider(base_url="http://ollama.test").is_available()


class TestGeminiProvider:
    """Gemini via google-genai."""

    def test_image_part_decodes_data_url(self):
        part = _image_part(PNG_DATA_URL)
        assert part.inline_data.mime_type == "image/png"
        assert part.inline_data.data == b"fake-png"

    @pytest.mark.asyncio
    async def test_complete(self):
        provider = GeminiProvider(api_key="test-key")
        provider.client = MagicMock()
        provider.client.models.generate_content.return_value = MagicMock(
            text=' {"tags": ["roadmap"]} ', usage_metadata=None
        )

        response = await provider.complete(make_request(max_tokens=100))

        kwargs = provider.client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert len(kwargs["contents"]) == 1
        assert kwargs["config"].response_mime_type == "application/json"
        assert kwargs["config"].max_output_tokens == 100
        assert "Return JSON only." in str(kwargs["config"].system_instruction)
        assert response.text == '{"tags": ["roadmap"]}'
        assert response.provider is ProviderType.GEMINI

    @pytest.mark.asyncio
    async def test_api_error_mapped(self):
        provider = GeminiProvider(api_key="test-key")
        provider.client = MagicMock()
        provider.client.models.generate_content.side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )

        with pytest.raises(ModelInvocationError) as excinfo:
            await provider.complete(make_request())
        assert excinfo.value.status_code == 429

    def test_unavailable_without_key(self):
        assert not GeminiProvider().is_available()


class TestProviderFactory:
    """Provider selection and caching."""

    def test_default_type_from_env(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "gemini")
        assert get_default_provider_type() is ProviderType.GEMINI

    def test_default_type_from_credentials(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert get_default_provider_type() is ProviderType.OPENAI

    def test_unavailable_provider_raises(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            get_llm_provider(ProviderType.OPENAI)

    def test_instances_cached(self):
        first = get_llm_provider(ProviderType.OPENAI, api_key="sk-test")
        second = get_llm_provider(ProviderType.OPENAI)
        assert first is second

        clear_provider_cache()
        with pytest.raises(ValueError):
            get_llm_provider(ProviderType.OPENAI)
