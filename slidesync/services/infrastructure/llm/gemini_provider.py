"""
Gemini LLM Provider

Implementation of LLMProvider for Google's Gemini AI models.
"""

import asyncio
import base64
import os
from typing import Any, List, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from slidesync.core.exceptions import ModelInvocationError
from .base import (
    ChatMessage,
    LLMProvider,
    LLMResponse,
    ModelRequest,
    ProviderType,
    UsageStats,
)


def _image_part(data_url: str) -> Any:
    """Convert a base64 data URL into an inline Gemini part"""
    header, _, payload = data_url.partition(",")
    mime_type = header[len("data:"):].split(";")[0] or "image/png"
    return types.Part.from_bytes(data=base64.b64decode(payload), mime_type=mime_type)


class GeminiProvider(LLMProvider):
    """Google Gemini LLM Provider"""

    provider_type = ProviderType.GEMINI

    def __init__(self, api_key: Optional[str] = None):
        """Initialize Gemini provider

        Args:
            api_key: Gemini API key. If not provided, uses GEMINI_API_KEY env var
        """
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        self.client = genai.Client(api_key=self.api_key) if self.api_key else None

    def is_available(self) -> bool:
        return self.client is not None

    def _build_contents(self, messages: List[ChatMessage]) -> List[Any]:
        contents = []
        for message in messages:
            if message.role == "system":
                continue
            parts = [types.Part.from_text(text=message.content)]
            parts.extend(_image_part(url) for url in message.images)
            role = "model" if message.role == "assistant" else "user"
            contents.append(types.Content(role=role, parts=parts))
        return contents

    def _build_generation_config(self, request: ModelRequest) -> Any:
        kwargs = {"temperature": request.temperature}
        if request.max_tokens:
            kwargs["max_output_tokens"] = request.max_tokens
        if request.wants_json:
            kwargs["response_mime_type"] = "application/json"
        if request.system_instruction:
            kwargs["system_instruction"] = request.system_instruction
        kwargs.update(request.extra_options)
        return types.GenerateContentConfig(**kwargs)

    def _extract_usage(self, response: Any) -> Optional[UsageStats]:
        """Extract usage stats from Gemini response"""
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return None
        return UsageStats(
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
        )

    async def complete(self, request: ModelRequest) -> LLMResponse:
        if not self.is_available():
            raise ModelInvocationError(
                "Gemini provider is not available. Check API key.",
                status_code=401,
                provider=self.name,
            )

        try:
            response = await asyncio.to_thread(
                self.client.models.generate_content,
                model=request.model,
                contents=self._build_contents(request.messages),
                config=self._build_generation_config(request),
            )
        except genai_errors.APIError as e:
            raise ModelInvocationError(
                f"Gemini request failed: {e}",
                status_code=getattr(e, "code", None),
                provider=self.name,
            ) from e

        return LLMResponse(
            text=response.text.strip() if response.text else "",
            model=request.model,
            provider=self.provider_type,
            usage=self._extract_usage(response),
            raw_response=response,
        )
