from pydantic import BaseModel, Field
from typing import List, Optional, Dict, Any
from datetime import datetime

Scale = Optional[float]


class PsychProfile(BaseModel):
    # 0-10 scales
    introvert_scale: Scale = Field(None, ge=0, le=10)  # higher = more extravert
    emotional_scale: Scale = Field(None, ge=0, le=10)
    spontaneity_scale: Scale = Field(None, ge=0, le=10)
    adventure_scale: Scale = Field(None, ge=0, le=10)
    family_importance: Scale = Field(None, ge=0, le=10)
    career_importance: Scale = Field(None, ge=0, le=10)
    social_importance: Scale = Field(None, ge=0, le=10)

    conflict_style: Optional[str] = None
    communication_style: Optional[str] = None

    love_lang_words: Scale = Field(None, ge=0)
    love_lang_time: Scale = Field(None, ge=0)
    love_lang_gifts: Scale = Field(None, ge=0)
    love_lang_acts: Scale = Field(None, ge=0)
    love_lang_touch: Scale = Field(None, ge=0)

    attachment_style: Optional[str] = None
    wants_children: Optional[str] = None
    relationship_goal: Optional[str] = None


class PromptAnswer(BaseModel):
    answer: Optional[str] = None  # raw option value, e.g. "mountains"
    answer_label: Optional[str] = None  # display label, e.g. "Bergen"
    vector_tag: Optional[str] = None  # prompt's tag, e.g. "vacation-preference"
    category: Optional[str] = None
    weight: float = 1.0


class ProfileSnapshot(BaseModel):
    """Read-only view of everything the vectorizer needs for one user."""
    user_id: str
    bio: Optional[str] = None
    interests: Optional[str] = None
    occupation: Optional[str] = None
    education: Optional[str] = None
    drinking: Optional[str] = None
    smoking: Optional[str] = None
    children: Optional[str] = None
    psych_profile: Optional[PsychProfile] = None
    prompt_answers: List[PromptAnswer] = []
    semantic_tags: List[str] = []


class ProfileEmbedding(BaseModel):
    user_id: str
    embedding: List[float]
    fingerprint: str
    enriched_embedding: Optional[List[float]] = None
    enriched_at: Optional[datetime] = None
    embedding_source: Optional[str] = None  # provider that produced the vector, e.g. "openai" or "hash"
    derived_tags: List[str] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BatchUpdateRequest(BaseModel):
    user_ids: List[str] = Field(..., min_length=1)


class VectorMetadata(BaseModel):
    user_id: str
    fingerprint: str
    dimension: int
    embedding_source: Optional[str] = None
    derived_tags: List[str] = []
    enriched_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SimilarityResponse(BaseModel):
    user_a: str
    user_b: str
    similarity: float


class TaskQueued(BaseModel):
    task_id: str
    details: Optional[Dict[str, Any]] = None
