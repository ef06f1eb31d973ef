"""
Base classes for LLM providers

Defines the request/response types and the abstract interface that all LLM
providers must implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ProviderType(str, Enum):
    """Supported LLM providers"""
    OPENAI = "openai"
    GEMINI = "gemini"
    OLLAMA = "ollama"


@dataclass
class ChatMessage:
    """One chat message; `images` holds data URLs for vision requests"""
    role: str
    content: str
    images: List[str] = field(default_factory=list)


@dataclass
class ModelRequest:
    """Provider-neutral model request"""
    model: str
    messages: List[ChatMessage]
    temperature: float = 0.2
    max_tokens: Optional[int] = None
    response_format: Optional[str] = "json_object"

    # Provider-specific options
    extra_options: Dict[str, Any] = field(default_factory=dict)

    @property
    def wants_json(self) -> bool:
        return self.response_format == "json_object"

    @property
    def system_instruction(self) -> Optional[str]:
        parts = [m.content for m in self.messages if m.role == "system"]
        return "\n\n".join(parts) if parts else None


@dataclass
class UsageStats:
    """Token usage statistics"""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0:
            self.total_tokens = self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    """Unified response from any LLM provider"""
    text: str
    model: str
    provider: ProviderType
    usage: Optional[UsageStats] = None
    raw_response: Any = None  # Original response object from the provider


class LLMProvider(ABC):
    """Abstract base class for LLM providers

    All LLM providers must implement this interface to ensure
    consistent behavior across different backends.
    """

    provider_type: ProviderType

    @abstractmethod
    async def complete(self, request: ModelRequest) -> LLMResponse:
        """Run one chat completion

        Args:
            request: Provider-neutral request

        Returns:
            LLMResponse with the generated text and metadata

        Raises:
            ModelInvocationError: For HTTP-level failures (status code attached)
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is available and properly configured"""
        pass

    @property
    def name(self) -> str:
        """Get the provider name"""
        return self.provider_type.value
