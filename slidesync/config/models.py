"""
Model Configuration for Pipeline Stages

This module defines the AI models used by each stage of the alignment
pipeline. Each stage has a primary model and a fallback model that the
invoker switches to once the primary has failed.

=== PROVIDER CONFIGURATION ===

Set LLM_PROVIDER environment variable to switch providers:
    - "openai" : OpenAI-compatible chat completions (requires OPENAI_API_KEY)
    - "gemini" : Google Gemini API (requires GEMINI_API_KEY)
    - "ollama" : Local Ollama models (default)

For Ollama, set OLLAMA_HOST if not using default (http://localhost:11434).
For OpenAI-compatible gateways, set OPENAI_BASE_URL.

=== STAGES ===

    1. vision_analysis  - Structured metadata from one slide image
    2. slide_summary    - Compact summary + tags per slide
    3. script_matching  - Global script-to-slide alignment
    4. coaching         - Per-slide delivery coaching
"""

import os
from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass, field, fields


class LLMProviderType(str, Enum):
    """Supported LLM providers"""
    OPENAI = "openai"
    GEMINI = "gemini"
    OLLAMA = "ollama"


def get_active_provider() -> LLMProviderType:
    """Get the active LLM provider from environment

    Priority:
    1. Explicit LLM_PROVIDER env var
    2. If OPENAI_API_KEY is set, use OpenAI
    3. If GEMINI_API_KEY is set, use Gemini
    4. Default to Ollama (local)

    Returns:
        LLMProviderType based on configuration
    """
    provider_env = os.getenv("LLM_PROVIDER", "").lower()

    for provider in LLMProviderType:
        if provider_env == provider.value:
            return provider

    # Auto-detect from available credentials
    if os.getenv("OPENAI_API_KEY"):
        return LLMProviderType.OPENAI
    if os.getenv("GEMINI_API_KEY"):
        return LLMProviderType.GEMINI

    return LLMProviderType.OLLAMA


@dataclass
class ModelConfig:
    """Configuration for the models backing one pipeline stage"""
    primary: str
    fallback: Optional[str] = None
    temperature: float = 0.2
    max_tokens: int = 2048
    description: str = ""

    @property
    def models(self) -> List[str]:
        """Primary first, then the fallback if one is configured and distinct"""
        if self.fallback and self.fallback != self.primary:
            return [self.primary, self.fallback]
        return [self.primary]


@dataclass
class StageModels:
    """
    Model configuration for each stage of the alignment pipeline.

    Defaults target OpenAI-compatible endpoints; GEMINI_STAGE_MODELS and
    OLLAMA_STAGE_MODELS swap in equivalents for the other providers.
    """

    # Stage 1: Vision analysis of a single slide image
    vision_analysis: ModelConfig = field(default_factory=lambda: ModelConfig(
        primary="gpt-4o-mini",
        fallback="gpt-4o",
        temperature=0.2,
        max_tokens=2048,
        description="Structured slide analysis from an image"
    ))

    # Stage 2: Compact per-slide summaries used as matching input
    slide_summary: ModelConfig = field(default_factory=lambda: ModelConfig(
        primary="gpt-4.1-mini",
        fallback="gpt-4o-mini",
        temperature=0.2,
        max_tokens=300,
        description="Short summary and tags per slide"
    ))

    # Stage 3: Global script-to-slide alignment
    script_matching: ModelConfig = field(default_factory=lambda: ModelConfig(
        primary="gpt-4.1-mini",
        fallback="gpt-4o-mini",
        temperature=0.1,
        max_tokens=4000,
        description="Topic-boundary script alignment"
    ))

    # Stage 4: Delivery coaching per matched slide
    coaching: ModelConfig = field(default_factory=lambda: ModelConfig(
        primary="gpt-4.1-mini",
        fallback="gpt-4o-mini",
        temperature=0.3,
        max_tokens=1200,
        description="Presentation coaching per slide"
    ))


# Default stage configuration
DEFAULT_STAGE_MODELS = StageModels()


GEMINI_STAGE_MODELS = StageModels(
    vision_analysis=ModelConfig(
        primary="gemini-2.5-flash",
        fallback="gemini-flash-lite-latest",
        temperature=0.2,
        max_tokens=2048,
        description="Gemini slide analysis"
    ),
    slide_summary=ModelConfig(
        primary="gemini-flash-lite-latest",
        fallback="gemini-2.5-flash",
        temperature=0.2,
        max_tokens=300,
        description="Gemini slide summaries"
    ),
    script_matching=ModelConfig(
        primary="gemini-2.5-flash",
        fallback="gemini-2.5-pro",
        temperature=0.1,
        max_tokens=4000,
        description="Gemini script alignment"
    ),
    coaching=ModelConfig(
        primary="gemini-flash-lite-latest",
        fallback="gemini-2.5-flash",
        temperature=0.3,
        max_tokens=1200,
        description="Gemini coaching"
    ),
)


DEFAULT_OLLAMA_GENERAL = "gemma3:12b"
DEFAULT_OLLAMA_VISION = "llava:13b"

OLLAMA_STAGE_MODELS = StageModels(
    vision_analysis=ModelConfig(
        primary=DEFAULT_OLLAMA_VISION,
        fallback=DEFAULT_OLLAMA_GENERAL,
        temperature=0.2,
        max_tokens=2048,
        description="Local slide analysis"
    ),
    slide_summary=ModelConfig(
        primary=DEFAULT_OLLAMA_GENERAL,
        fallback="gemma3:4b",
        temperature=0.2,
        max_tokens=300,
        description="Local slide summaries"
    ),
    script_matching=ModelConfig(
        primary=DEFAULT_OLLAMA_GENERAL,
        fallback="deepseek-r1:8b",
        temperature=0.1,
        max_tokens=4000,
        description="Local script alignment"
    ),
    coaching=ModelConfig(
        primary=DEFAULT_OLLAMA_GENERAL,
        fallback="gemma3:4b",
        temperature=0.3,
        max_tokens=1200,
        description="Local coaching"
    ),
)


_STAGE_MODELS_BY_PROVIDER: Dict[LLMProviderType, StageModels] = {
    LLMProviderType.OPENAI: DEFAULT_STAGE_MODELS,
    LLMProviderType.GEMINI: GEMINI_STAGE_MODELS,
    LLMProviderType.OLLAMA: OLLAMA_STAGE_MODELS,
}


def get_stage_models(provider: Optional[LLMProviderType] = None) -> StageModels:
    """Stage configuration for a provider (the active one by default)"""
    return _STAGE_MODELS_BY_PROVIDER[provider or get_active_provider()]


def list_stages() -> List[str]:
    """Names of all configurable pipeline stages"""
    return [f.name for f in fields(StageModels)]


def get_stage_config(stage: str, provider: Optional[LLMProviderType] = None) -> ModelConfig:
    """Get model configuration for a pipeline stage

    Args:
        stage: Stage name (e.g. "script_matching")
        provider: Provider whose defaults to use. Defaults to the active provider.

    Returns:
        ModelConfig for the stage

    Raises:
        ValueError: If the stage is unknown
    """
    stage_models = get_stage_models(provider)
    if stage not in list_stages():
        raise ValueError(
            f"Unknown pipeline stage: {stage}. Available stages: {', '.join(list_stages())}"
        )
    return getattr(stage_models, stage)
