"""
Schemas for the alignment pipeline

Every entity is recomputed per run. Fields are snake_case in Python and
accept the camelCase keys that model output and JS callers use.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _as_list(value: Any) -> Any:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return value


def _clamp_confidence(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    return int(round(max(0.0, min(100.0, number))))


# === Script ===

class ScriptSection(CamelModel):
    """One per-slide slice of the script (index is 1-based)"""
    index: int
    text: str = ""
    word_count: int = 0

    @property
    def is_placeholder(self) -> bool:
        return not self.text.strip()


# === Slides ===

class SlideAnalysis(CamelModel):
    """Structured metadata produced by vision analysis of one slide"""
    all_text: str = ""
    main_topic: str = ""
    key_points: List[str] = Field(default_factory=list)
    visual_elements: List[str] = Field(default_factory=list)
    suggested_talking_points: List[str] = Field(default_factory=list)
    emotional_tone: str = "professional"  # "professional", "casual", "inspirational"
    complexity: str = "moderate"  # "basic", "moderate", "advanced"
    recommended_duration: int = 60  # seconds

    @field_validator("key_points", "visual_elements", "suggested_talking_points", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        return _as_list(value)

    @field_validator("recommended_duration", mode="before")
    @classmethod
    def _coerce_duration(cls, value: Any) -> int:
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 60


class SlideSummary(CamelModel):
    """Compact slide description used as matching input"""
    slide_number: int
    summary: str
    tags: List[str] = Field(default_factory=list, max_length=5)

    @field_validator("tags", mode="before")
    @classmethod
    def _cap_tags(cls, value: Any) -> Any:
        value = _as_list(value)
        return list(value)[:5]


# === Alignment ===

class ScriptMatch(CamelModel):
    """Script section assigned to one slide"""
    slide_number: int
    script_section: str = ""
    confidence: int = 0  # 0-100
    reasoning: str = ""
    key_alignment: List[str] = Field(default_factory=list)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> int:
        return _clamp_confidence(value)

    @field_validator("key_alignment", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        return _as_list(value)

    @field_validator("script_section", "reasoning", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class CoachingGuide(CamelModel):
    """Delivery guidance for one slide"""
    opening_strategy: str = ""
    key_emphasis_points: List[str] = Field(default_factory=list)
    body_language_tips: List[str] = Field(default_factory=list)
    voice_modulation: List[str] = Field(default_factory=list)
    audience_engagement: List[str] = Field(default_factory=list)
    transition_to_next: str = ""
    timing_recommendation: str = ""
    potential_questions: List[str] = Field(default_factory=list)
    common_mistakes: List[str] = Field(default_factory=list)
    energy_level: Literal["low", "medium", "high"] = "medium"

    @field_validator(
        "key_emphasis_points",
        "body_language_tips",
        "voice_modulation",
        "audience_engagement",
        "potential_questions",
        "common_mistakes",
        mode="before",
    )
    @classmethod
    def _coerce_list(cls, value: Any) -> Any:
        return _as_list(value)

    @field_validator("energy_level", mode="before")
    @classmethod
    def _normalize_energy(cls, value: Any) -> str:
        level = str(value or "").strip().lower()
        return level if level in ("low", "medium", "high") else "medium"


class ContentGuide(CamelModel):
    """Presenter notes derived from a section and its neighbours"""
    transition_from: Optional[str] = None
    key_messages: List[str] = Field(default_factory=list)
    key_concepts: List[str] = Field(default_factory=list)
    transition_to: Optional[str] = None


class ScriptInsights(CamelModel):
    """Delivery cues found in one slide's script section"""
    key_points: List[str] = Field(default_factory=list)
    transition_phrases: List[str] = Field(default_factory=list)
    timing_cues: List[str] = Field(default_factory=list)
    highlighted_script: str = ""
    word_count: int = 0
    speaking_time: str = "0 minutes"


# === Pipeline request/response ===

class AlignmentRequest(CamelModel):
    """Input to a full alignment run

    Provide either `analyses` (already produced by vision analysis) or
    `slide_images` (data URLs handed to the configured analyzer). When
    neither is given, `slide_count` drives the non-AI path alone.
    """
    script: str
    slide_count: Optional[int] = None
    analyses: List[SlideAnalysis] = Field(default_factory=list)
    slide_images: List[str] = Field(default_factory=list)
    slide_ids: List[str] = Field(default_factory=list)
    include_coaching: bool = True


class AlignmentResponse(CamelModel):
    """Result of a full alignment run"""
    run_id: str
    matches: List[ScriptMatch]
    sections: List[ScriptSection]
    summaries: List[SlideSummary] = Field(default_factory=list)
    coaching: List[CoachingGuide] = Field(default_factory=list)
    content_guides: List[ContentGuide] = Field(default_factory=list)
    insights: List[ScriptInsights] = Field(default_factory=list)
    flagged_for_review: List[int] = Field(default_factory=list)
    slide_assignments: Dict[str, ScriptMatch] = Field(default_factory=dict)
    used_fallback: bool = False
    warnings: List[str] = Field(default_factory=list)
