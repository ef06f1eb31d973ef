"""
Alignment pipeline prompts.

Used by: pipeline/alignment/{analyzer,summarizer,aligner,coaching}.py
"""

from .base import PromptTemplate, StagePrompt


VISION_ANALYSIS = StagePrompt(
    stage="vision_analysis",
    system=PromptTemplate(
        template="""You are analyzing a presentation slide image for structured metadata.
Return ONLY valid JSON following the schema exactly.
Focus on: all visible text (OCR-quality summary), key topics, and visual elements.""",
        description="Vision analysis role"
    ),
    user=PromptTemplate(
        template="""Slide number: {slide_number}.

Return JSON with this shape:
{{
  "allText": "string",
  "mainTopic": "string",
  "keyPoints": ["string"],
  "visualElements": ["string"],
  "suggestedTalkingPoints": ["string"],
  "emotionalTone": "professional|casual|inspirational",
  "complexity": "basic|moderate|advanced",
  "recommendedDuration": number
}}""",
        description="Structured slide analysis"
    ),
)


SLIDE_SUMMARY = StagePrompt(
    stage="slide_summary",
    system=PromptTemplate(
        template="You compress slide analyses into short matching summaries. Return JSON only.",
        description="Summary role"
    ),
    user=PromptTemplate(
        template="""Summarize slide {slide_number} for script matching.

Slide Analysis JSON:
{analysis_json}

Rules:
- "summary": at most 80 tokens, naming the slide's topic and its main claims
- "tags": 3 to 5 lowercase keywords a speaker would say aloud on this slide

Return JSON exactly as:
{{
  "slideNumber": {slide_number},
  "summary": "string",
  "tags": ["string"]
}}""",
        description="Compact slide summary"
    ),
)


SCRIPT_MATCHING = StagePrompt(
    stage="script_matching",
    system=PromptTemplate(
        template="""You align a presentation script to slides.
Rules:
- Segment the script into coherent slide-sized sections along topic boundaries.
- Do NOT split the script evenly or by word count; a section ends where its topic ends.
- Map each section to exactly one slide by semantic alignment with the slide summaries.
- Every slide from 1 to {slide_count} gets exactly one section, in script order.
- Provide a 0-100 confidence and brief reasoning per match.
- Return only JSON in the required shape.""",
        description="Script matching role"
    ),
    user=PromptTemplate(
        template="""Full Script:
{script}

Slide Summaries JSON ({slide_count} slides):
{summaries_json}

Return JSON exactly as:
{{
  "matches": [
    {{
      "slideNumber": <number>,
      "scriptSection": "string",
      "confidence": <number 0-100>,
      "reasoning": "string",
      "keyAlignment": ["string"]
    }}
  ]
}}""",
        description="Script-to-slide matching"
    ),
)


COACHING = StagePrompt(
    stage="coaching",
    system=PromptTemplate(
        template="""You are an executive presentation coach. You give precise, practical coaching with timing.
Return JSON only.""",
        description="Coaching role"
    ),
    user=PromptTemplate(
        template="""CONTEXT:
- This is slide {slide_number} of {total_slides}
- Slide Analysis: {analysis_json}

SPEAKER'S SCRIPT FOR THIS SLIDE:
{script_section}

Return JSON exactly as:
{{
  "openingStrategy": "string",
  "keyEmphasisPoints": ["string"],
  "bodyLanguageTips": ["string"],
  "voiceModulation": ["string"],
  "audienceEngagement": ["string"],
  "transitionToNext": "string",
  "timingRecommendation": "string",
  "potentialQuestions": ["string"],
  "commonMistakes": ["string"],
  "energyLevel": "low|medium|high"
}}

Be specific and reference the actual slide content.""",
        description="Per-slide delivery coaching"
    ),
)
