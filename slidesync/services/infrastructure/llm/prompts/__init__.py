"""
Prompt Registry - maps pipeline stages to their prompt templates.

Structure:
    prompts/
    ├── __init__.py      # This file - exports and registry
    ├── base.py          # PromptTemplate and StagePrompt
    └── alignment.py     # Vision, summary, matching and coaching prompts

Usage:
    from slidesync.services.infrastructure.llm.prompts import get_stage_prompt

    messages = get_stage_prompt("coaching").build_messages(payload)
"""

from typing import Dict

from .base import PromptTemplate, StagePrompt
from .alignment import (
    VISION_ANALYSIS,
    SLIDE_SUMMARY,
    SCRIPT_MATCHING,
    COACHING,
)


_REGISTRY: Dict[str, StagePrompt] = {
    prompt.stage: prompt
    for prompt in (VISION_ANALYSIS, SLIDE_SUMMARY, SCRIPT_MATCHING, COACHING)
}


def get_stage_prompt(stage: str) -> StagePrompt:
    """Get the prompt for a pipeline stage."""
    if stage not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY.keys()))
        raise KeyError(f"Unknown prompt stage: '{stage}'. Available: {available}")
    return _REGISTRY[stage]


def list_stage_prompts() -> list:
    """List all stages that have prompts."""
    return sorted(_REGISTRY.keys())


__all__ = [
    "PromptTemplate",
    "StagePrompt",
    "VISION_ANALYSIS",
    "SLIDE_SUMMARY",
    "SCRIPT_MATCHING",
    "COACHING",
    "get_stage_prompt",
    "list_stage_prompts",
]
