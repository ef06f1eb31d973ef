"""
Ollama LLM Provider

Implementation of LLMProvider for local models via Ollama's chat endpoint.
Vision requests need a multimodal model such as llava.
"""

import os
from typing import Any, Dict, Optional

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

logger = get_logger(__name__, component="ollama_provider")


class OllamaProvider(LLMProvider):
    """Ollama LLM Provider for local models"""

    provider_type = ProviderType.OLLAMA

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 300.0,
    ):
        """Initialize Ollama provider

        Args:
            base_url: Ollama server URL. Defaults to OLLAMA_HOST env or http://localhost:11434
            timeout: Request timeout in seconds (default 5 minutes for large models)
        """
        self.base_url = base_url or os.getenv("OLLAMA_HOST", "http://localhost:11434")
        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout

    def is_available(self) -> bool:
        """Check if Ollama server is available"""
        try:
            with httpx.Client(timeout=5.0) as client:
                response = client.get(f"{self.base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False

    @staticmethod
    def _build_message(message: ChatMessage) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"role": message.role, "content": message.content}
        if message.images:
            # Ollama takes bare base64 payloads, not data URLs
            payload["images"] = [url.partition(",")[2] or url for url in message.images]
        return payload

    def _build_options(self, request: ModelRequest) -> Dict[str, Any]:
        """Build Ollama-specific options"""
        options: Dict[str, Any] = {"temperature": request.temperature}
        if request.max_tokens:
            options["num_predict"] = request.max_tokens
        options.update(request.extra_options)
        return options

    def _parse_response(self, data: Dict[str, Any], model: str) -> LLMResponse:
        """Parse Ollama API response"""
        text = (data.get("message") or {}).get("content", "")

        usage = None
        if "prompt_eval_count" in data or "eval_count" in data:
            usage = UsageStats(
                input_tokens=data.get("prompt_eval_count", 0),
                output_tokens=data.get("eval_count", 0),
            )

        return LLMResponse(
            text=text.strip(),
            model=model,
            provider=self.provider_type,
            usage=usage,
            raw_response=data,
        )

    async def complete(self, request: ModelRequest) -> LLMResponse:
        payload: Dict[str, Any] = {
            "model": request.model,
            "messages": [self._build_message(m) for m in request.messages],
            "stream": False,
            "options": self._build_options(request),
        }
        if request.wants_json:
            payload["format"] = "json"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(f"{self.base_url}/api/chat", json=payload)

        if response.status_code >= 400:
            logger.warning(
                "Ollama request rejected",
                extra={"model": request.model, "status_code": response.status_code},
            )
            raise ModelInvocationError(
                f"Ollama request failed with status {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
                provider=self.name,
            )

        return self._parse_response(response.json(), request.model)
