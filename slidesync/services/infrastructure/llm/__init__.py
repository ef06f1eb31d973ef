"""
LLM Provider Abstraction Layer

Provides a unified interface for chat-completion backends:
- OpenAI-compatible endpoints (httpx)
- Google Gemini (google-genai)
- Ollama (local models, httpx)

Usage:
    from slidesync.services.infrastructure.llm import ModelInvoker, ResponseShape

    invoker = ModelInvoker()
    result = await invoker.invoke_parsed("coaching", payload, ResponseShape.OBJECT)
    if result.ok:
        guide = result.parsed

Configuration:
    Set LLM_PROVIDER environment variable:
    - "openai" (requires OPENAI_API_KEY)
    - "gemini" (requires GEMINI_API_KEY)
    - "ollama" (requires Ollama running locally)
"""

from slidesync.services.infrastructure.parsing import ResponseShape

from .base import (
    ChatMessage,
    LLMProvider,
    LLMResponse,
    ModelRequest,
    ProviderType,
    UsageStats,
)
from .factory import (
    get_llm_provider,
    get_default_provider_type,
    clear_provider_cache,
)
from .retry import (
    ErrorClassifier,
    ErrorKind,
    RetryPolicy,
    classify_error,
    classify_status_code,
)
from .invoker import InvocationResult, ModelInvoker

__all__ = [
    "ChatMessage",
    "LLMProvider",
    "LLMResponse",
    "ModelRequest",
    "ProviderType",
    "UsageStats",
    "get_llm_provider",
    "get_default_provider_type",
    "clear_provider_cache",
    "ErrorClassifier",
    "ErrorKind",
    "RetryPolicy",
    "classify_error",
    "classify_status_code",
    "InvocationResult",
    "ModelInvoker",
    "ResponseShape",
]
