from typing import Iterable, List, Tuple

from semantic_engine.models import ProfileSnapshot, PsychProfile

MAX_SEMANTIC_TAGS = 20

HIGH_THRESHOLD = 7
LOW_THRESHOLD = 4

# Scanned in this order; a bio may match several entries
BIO_KEYWORD_TAGS: List[Tuple[str, Tuple[str, ...]]] = [
    ("travel-lover", ("travel",)),
    ("fitness-enthusiast", ("sport", "fitness")),
    ("music-lover", ("music", "concert")),
    ("foodie", ("cook", "food")),
    ("nature-lover", ("hik", "nature", "natuur")),
    ("bookworm", ("read", "book")),
    ("film-buff", ("film", "movie", "serie")),
]

RELATIONSHIP_GOAL_TAGS = {
    "serious": "looking-for-serious",
    "marriage": "marriage-minded",
    "casual": "casual-dater",
}


def _above(value, threshold) -> bool:
    return value is not None and value > threshold


def _below(value, threshold) -> bool:
    return value is not None and value < threshold


def _psych_tags(psych: PsychProfile) -> List[str]:
    tags: List[str] = []

    if _above(psych.introvert_scale, HIGH_THRESHOLD):
        tags.append("social-butterfly")
    if _below(psych.introvert_scale, LOW_THRESHOLD):
        tags.append("homebody")
    if _above(psych.adventure_scale, HIGH_THRESHOLD):
        tags.append("adventure-seeker")
    if _above(psych.spontaneity_scale, HIGH_THRESHOLD):
        tags.append("spontaneous")
    if _below(psych.spontaneity_scale, LOW_THRESHOLD):
        tags.append("planner")

    goal_tag = RELATIONSHIP_GOAL_TAGS.get(psych.relationship_goal or "")
    if goal_tag:
        tags.append(goal_tag)

    if _above(psych.family_importance, HIGH_THRESHOLD):
        tags.append("family-oriented")
    if _above(psych.career_importance, HIGH_THRESHOLD):
        tags.append("career-focused")

    return tags


def bio_keyword_tags(bio: str) -> List[str]:
    text = (bio or "").lower()
    return [
        tag for tag, keywords in BIO_KEYWORD_TAGS
        if any(keyword in text for keyword in keywords)
    ]


def dedupe_tags(tags: Iterable[str], limit: int = MAX_SEMANTIC_TAGS) -> List[str]:
    """Drop duplicates keeping first occurrence, then cap at ``limit``."""
    seen = set()
    unique: List[str] = []
    for tag in tags:
        if tag not in seen:
            seen.add(tag)
            unique.append(tag)
    return unique[:limit]


def derive_semantic_tags(snapshot: ProfileSnapshot) -> List[str]:
    """
    Derive human-readable tags from psych thresholds, bio keywords and
    answered prompts. Computed fresh each run, never merged with old tags.
    """
    tags: List[str] = []

    if snapshot.psych_profile is not None:
        tags.extend(_psych_tags(snapshot.psych_profile))

    if snapshot.bio:
        tags.extend(bio_keyword_tags(snapshot.bio))

    for answer in snapshot.prompt_answers:
        if answer.vector_tag and answer.answer:
            tags.append(f"{answer.vector_tag}-{answer.answer}")

    return dedupe_tags(tags)
