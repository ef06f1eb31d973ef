"""
Script insights and presenter content guides.

Deterministic text analysis over a slide's script section: key points,
transition phrases, timing cues, speaking time estimate, key concepts and
the neighbour-aware content guide shown next to each slide.
"""

import math
import re
from typing import Iterable, List, Optional, Sequence, Union

from slidesync.models import ContentGuide, ScriptInsights, ScriptSection, SlideAnalysis, SlideSummary

IMPORTANCE_KEYWORDS = [
    "important", "key", "crucial", "essential", "critical", "remember",
    "note", "emphasize", "highlight", "focus", "main", "primary",
]

TRANSITION_PHRASES = [
    "moving on", "next", "now let's", "let's move", "turning to",
    "shifting to", "looking at", "considering", "examining",
    "in conclusion", "to summarize", "finally", "lastly",
    "meanwhile", "however", "therefore", "consequently",
    "as we can see", "this brings us to", "which leads to",
]

TIMING_CUES = [
    "pause", "wait", "take a moment", "let that sink in",
    "give them time", "slow down", "speed up", "emphasize",
    "repeat", "click", "advance", "next slide",
]

WORDS_PER_MINUTE = 155

SENTENCE_SPLIT = re.compile(r"[.!?]+")
PROPER_NOUNS = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\b")
NUMBERS_WITH_UNITS = re.compile(
    r"\b\d+(?:[.,]\d+)*(?:\s*(?:%|percent|million|billion|thousand|dollars?|fields?|years?))?"
)
TECHNICAL_TERMS = re.compile(
    r"\b(?:framework|system|platform|infrastructure|capability|model|process|methodology)\b",
    re.IGNORECASE,
)


def _capitalize(sentence: str) -> str:
    return sentence[:1].upper() + sentence[1:]


def split_sentences(text: str, min_length: int = 0) -> List[str]:
    sentences = (s.strip() for s in SENTENCE_SPLIT.split(text))
    return [s for s in sentences if s and len(s) > min_length]


def count_words(text: str) -> int:
    return len(text.split()) if text and text.strip() else 0


def _has_importance_keyword(sentence: str) -> bool:
    lowered = sentence.lower()
    return any(keyword in lowered for keyword in IMPORTANCE_KEYWORDS)


def extract_key_points(script: str) -> List[str]:
    """Sentences carrying an importance keyword, else the first three sentences"""
    sentences = split_sentences(script, min_length=10)
    key_points = [_capitalize(s) for s in sentences if _has_importance_keyword(s)]
    return key_points or sentences[:3]


def _sentences_containing(script: str, phrases: Iterable[str]) -> List[str]:
    lowered = script.lower()
    found: List[str] = []
    sentences = [s.strip() for s in SENTENCE_SPLIT.split(script)]
    for phrase in phrases:
        if phrase not in lowered:
            continue
        for sentence in sentences:
            if sentence and phrase in sentence.lower():
                cleaned = _capitalize(sentence)
                if cleaned not in found:
                    found.append(cleaned)
    return found


def extract_transition_phrases(script: str) -> List[str]:
    return _sentences_containing(script, TRANSITION_PHRASES) if script.strip() else []


def extract_timing_cues(script: str) -> List[str]:
    return _sentences_containing(script, TIMING_CUES) if script.strip() else []


def highlight_script(script: str) -> str:
    """Wrap importance keywords and transition phrases in **bold** markdown"""
    if not script.strip():
        return script

    highlighted = script
    for keyword in IMPORTANCE_KEYWORDS:
        highlighted = re.sub(rf"\b{re.escape(keyword)}\b", r"**\g<0>**", highlighted, flags=re.IGNORECASE)
    for phrase in TRANSITION_PHRASES:
        highlighted = re.sub(re.escape(phrase), r"**\g<0>**", highlighted, flags=re.IGNORECASE)
    return highlighted


def process_script(script: str) -> ScriptInsights:
    """Extract all presenter guidance from one script section"""
    word_count = count_words(script)
    return ScriptInsights(
        key_points=extract_key_points(script),
        transition_phrases=extract_transition_phrases(script),
        timing_cues=extract_timing_cues(script),
        highlighted_script=highlight_script(script),
        word_count=word_count,
        speaking_time=estimate_speaking_time(word_count),
    )


def estimate_speaking_time(word_count: int) -> str:
    """Speaking time at an average of 155 words per minute"""
    if word_count <= 0:
        return "0 minutes"
    minutes = math.ceil(word_count / WORDS_PER_MINUTE)
    if minutes == 1:
        return "1 minute"
    return f"{minutes} minutes"


def extract_key_concepts(script: str) -> List[str]:
    """Up to five concepts: proper nouns (3), numbers (2), technical terms (2)"""
    if not script.strip():
        return []

    concepts = (
        PROPER_NOUNS.findall(script)[:3]
        + NUMBERS_WITH_UNITS.findall(script)[:2]
        + TECHNICAL_TERMS.findall(script)[:2]
    )
    return list(dict.fromkeys(concepts))[:5]


def _bold_concepts(sentence: str) -> str:
    highlighted = sentence
    for concept in extract_key_concepts(sentence):
        highlighted = re.sub(
            rf"\b{re.escape(concept)}\b", r"**\g<0>**", highlighted, flags=re.IGNORECASE
        )
    return _capitalize(highlighted)


def extract_key_messages(script: str) -> List[str]:
    """Two or three most important sentences, key concepts in bold"""
    sentences = split_sentences(script, min_length=15)
    if not sentences:
        return []

    chosen = [s for s in sentences if _has_importance_keyword(s)][:2]
    if not chosen:
        chosen = sentences[:2]
    if len(chosen) == 1 and len(sentences) > 1:
        extra = next((s for s in sentences if s[:20] not in chosen[0]), None)
        if extra:
            chosen.append(extra)

    return [_bold_concepts(s) for s in chosen][:3]


def _first_sentence(script: str) -> str:
    sentences = SENTENCE_SPLIT.split(script)
    return sentences[0].strip() if sentences else ""


def generate_transition_to(current: str, next_script: str) -> Optional[str]:
    if not current.strip() or not next_script.strip():
        return None

    concepts = extract_key_concepts(next_script)
    if concepts:
        return f"This leads us to examine {concepts[0].lower()}..."

    first = _first_sentence(next_script)
    if len(first) > 10:
        lowered = first.lower()
        if "now" in lowered or "next" in lowered:
            return "Moving on to our next topic..."
        if "let" in lowered:
            return "Let's shift our focus..."
        return "This brings us to the next point..."
    return "Moving forward..."


def generate_transition_from(previous: str, current: str) -> Optional[str]:
    if not previous.strip() or not current.strip():
        return None

    concepts = extract_key_concepts(previous)
    if concepts:
        return f"Building on {concepts[0].lower()} we just discussed..."

    first = _first_sentence(current)
    if len(first) > 10:
        lowered = first.lower()
        if "now" in lowered or "next" in lowered:
            return "Continuing from where we left off..."
        return "Following up on that point..."
    return "Building on what we just covered..."


def generate_content_guide(
    current: str,
    previous: Optional[str] = None,
    next_script: Optional[str] = None,
) -> ContentGuide:
    """Content-focused notes for one slide, aware of its neighbours"""
    if not current or not current.strip():
        return ContentGuide()

    return ContentGuide(
        transition_from=generate_transition_from(previous, current) if previous else None,
        key_messages=extract_key_messages(current),
        key_concepts=extract_key_concepts(current),
        transition_to=generate_transition_to(current, next_script) if next_script else None,
    )


def generate_all_content_guides(scripts: Sequence[str]) -> List[ContentGuide]:
    return [
        generate_content_guide(
            script,
            scripts[i - 1] if i > 0 else None,
            scripts[i + 1] if i < len(scripts) - 1 else None,
        )
        for i, script in enumerate(scripts)
    ]


def build_sections(texts: Sequence[str]) -> List[ScriptSection]:
    """ScriptSection records with 1-based indices and word counts"""
    return [
        ScriptSection(index=i, text=text.strip(), word_count=count_words(text))
        for i, text in enumerate(texts, start=1)
    ]


def find_key_alignments(
    section_text: str,
    source: Union[SlideAnalysis, SlideSummary, None],
    limit: int = 3,
) -> List[str]:
    """Slide vocabulary (words over 3 characters) that the section actually uses"""
    if source is None or not section_text:
        return []

    if isinstance(source, SlideAnalysis):
        phrases = [source.main_topic, *source.key_points]
    else:
        phrases = [source.summary, *source.tags]

    section_lower = section_text.lower()
    alignments: List[str] = []
    for phrase in phrases:
        for word in (phrase or "").lower().split():
            word = word.strip(".,;:!?\"'()[]")
            if len(word) > 3 and word in section_lower and word not in alignments:
                alignments.append(word)
    return alignments[:limit]
