"""Models module - Pydantic models for profile snapshots, embeddings and API bodies"""
from .models import (
    PsychProfile, PromptAnswer, ProfileSnapshot, ProfileEmbedding,
    BatchUpdateRequest, VectorMetadata, SimilarityResponse, TaskQueued
)

__all__ = [
    'PsychProfile', 'PromptAnswer', 'ProfileSnapshot', 'ProfileEmbedding',
    'BatchUpdateRequest', 'VectorMetadata', 'SimilarityResponse', 'TaskQueued'
]
