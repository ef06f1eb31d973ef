"""
OpenAI-compatible LLM Provider

Implementation of LLMProvider for any endpoint that speaks the OpenAI chat
completions protocol (OpenAI itself, Azure-style gateways, vLLM, LiteLLM).
"""

import os
from typing import Any, Dict, List, Optional

import httpx

from slidesync.core.exceptions import ModelInvocationError
from slidesync.core.logging import get_logger
from .base import (
    ChatMessage,
    LLMProvider,
    LLMResponse,
    ModelRequest,
    ProviderType,
    UsageStats,
)

logger = get_logger(__name__, component="openai_provider")


class OpenAIProvider(LLMProvider):
    """Chat completions over httpx with JSON-object output"""

    provider_type = ProviderType.OPENAI

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
    ):
        """Initialize OpenAI provider

        Args:
            api_key: API key. Defaults to OPENAI_API_KEY env var
            base_url: API root. Defaults to OPENAI_BASE_URL env or the public endpoint
            timeout: HTTP timeout in seconds
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.base_url = (base_url or os.getenv("OPENAI_BASE_URL") or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout

    def is_available(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def _build_message(message: ChatMessage) -> Dict[str, Any]:
        if not message.images:
            return {"role": message.role, "content": message.content}

        parts: List[Dict[str, Any]] = [{"type": "text", "text": message.content}]
        for image_url in message.images:
            parts.append({
                "type": "image_url",
                "image_url": {"url": image_url, "detail": "high"},
            })
        return {"role": message.role, "content": parts}

    def _build_payload(self, request: ModelRequest) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": request.model,
            "messages": [self._build_message(m) for m in request.messages],
            "temperature": request.temperature,
        }
        if request.max_tokens:
            payload["max_tokens"] = request.max_tokens
        if request.wants_json:
            payload["response_format"] = {"type": "json_object"}
        payload.update(request.extra_options)
        return payload

    def _parse_response(self, data: Dict[str, Any], model: str) -> LLMResponse:
        choices = data.get("choices") or []
        text = ""
        if choices:
            text = (choices[0].get("message") or {}).get("content") or ""

        usage = None
        if "usage" in data and data["usage"]:
            usage = UsageStats(
                input_tokens=data["usage"].get("prompt_tokens", 0),
                output_tokens=data["usage"].get("completion_tokens", 0),
            )

        return LLMResponse(
            text=text.strip(),
            model=data.get("model", model),
            provider=self.provider_type,
            usage=usage,
            raw_response=data,
        )

    async def complete(self, request: ModelRequest) -> LLMResponse:
        if not self.is_available():
            raise ModelInvocationError(
                "OpenAI provider is not available. Set OPENAI_API_KEY.",
                status_code=401,
                provider=self.name,
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                f"{self.base_url}/chat/completions",
                json=self._build_payload(request),
                headers=headers,
            )

        if response.status_code >= 400:
            logger.warning(
                "Chat completion rejected",
                extra={"model": request.model, "status_code": response.status_code},
            )
            raise ModelInvocationError(
                f"OpenAI request failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                provider=self.name,
            )

        return self._parse_response(response.json(), request.model)
