"""
Semantic profile text compiler.

Renders a ProfileSnapshot into the single string that is embedded and
fingerprinted. Section order is part of the fingerprint contract: reordering
lines invalidates every stored fingerprint, so any format change must bump
FINGERPRINT_VERSION in core.config.
"""
from typing import List, Optional, Tuple

from semantic_engine.models import ProfileSnapshot, PsychProfile

SEPARATOR = ". "

# (label, snapshot attribute) in emission order
LIFESTYLE_FIELDS: List[Tuple[str, str]] = [
    ("Works as", "occupation"),
    ("Education", "education"),
    ("Drinking", "drinking"),
    ("Smoking", "smoking"),
    ("Children", "children"),
]

# (scale attribute, label when > midpoint, label otherwise)
PERSONALITY_ADJECTIVES: List[Tuple[str, str, str]] = [
    ("introvert_scale", "Extravert", "Introvert"),
    ("spontaneity_scale", "Spontaneous", "Planner"),
    ("adventure_scale", "Adventurous", "Routine-oriented"),
]
SCALE_MIDPOINT = 5

# Tie-break order for equal scores is this list's order
LOVE_LANGUAGES: List[Tuple[str, str]] = [
    ("love_lang_words", "words of affirmation"),
    ("love_lang_time", "quality time"),
    ("love_lang_gifts", "gifts"),
    ("love_lang_acts", "acts of service"),
    ("love_lang_touch", "physical touch"),
]


def rank_love_languages(psych: PsychProfile) -> List[Tuple[str, float]]:
    """Return (name, score) pairs sorted by score descending, ties in source order."""
    scored = [(name, getattr(psych, attr) or 0) for attr, name in LOVE_LANGUAGES]
    # sorted() is stable, so equal scores keep LOVE_LANGUAGES order
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


def _psych_lines(psych: PsychProfile) -> List[str]:
    lines: List[str] = []

    for attr, high_label, low_label in PERSONALITY_ADJECTIVES:
        value: Optional[float] = getattr(psych, attr)
        if value is not None:
            lines.append(high_label if value > SCALE_MIDPOINT else low_label)

    if psych.relationship_goal:
        lines.append(f"Relationship goal: {psych.relationship_goal}")
    if psych.conflict_style:
        lines.append(f"Conflict style: {psych.conflict_style}")
    if psych.communication_style:
        lines.append(f"Communication: {psych.communication_style}")

    ranked = rank_love_languages(psych)
    for prefix, (name, score) in zip(("Primary", "Secondary"), ranked):
        if score > 0:
            lines.append(f"{prefix} love language: {name}")

    return lines


def build_semantic_profile(snapshot: ProfileSnapshot) -> str:
    parts: List[str] = []

    if snapshot.bio:
        parts.append(f"Bio: {snapshot.bio}")
    if snapshot.interests:
        parts.append(f"Interests: {snapshot.interests}")

    for label, attr in LIFESTYLE_FIELDS:
        value = getattr(snapshot, attr)
        if value:
            parts.append(f"{label}: {value}")

    if snapshot.psych_profile is not None:
        parts.extend(_psych_lines(snapshot.psych_profile))

    for answer in snapshot.prompt_answers:
        if answer.answer_label and answer.vector_tag:
            parts.append(f"{answer.vector_tag}: {answer.answer_label}")

    if snapshot.semantic_tags:
        parts.append("Tags: " + ", ".join(snapshot.semantic_tags))

    return SEPARATOR.join(parts)
