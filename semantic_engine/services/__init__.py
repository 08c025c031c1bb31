"""Services module - profile vectorization pipeline and its building blocks"""
from .semantic_text import build_semantic_profile
from .fingerprint import profile_fingerprint, needs_update
from .embeddings import (
    EmbeddingProvider, HashEmbeddingProvider, OpenAIEmbeddingProvider,
    EmbeddingProviderError, build_embedding_provider,
    get_embedding_service, reset_embedding_service
)
from .semantic_tags import derive_semantic_tags
from .similarity import cosine_similarity, calculate_semantic_similarity
from .profile_store import ProfileStore, VectorPersistenceError, get_profile_store, close_profile_store
from .profile_updater import update_user_vector, batch_update_vectors

__all__ = [
    'build_semantic_profile',
    'profile_fingerprint', 'needs_update',
    'EmbeddingProvider', 'HashEmbeddingProvider', 'OpenAIEmbeddingProvider',
    'EmbeddingProviderError', 'build_embedding_provider',
    'get_embedding_service', 'reset_embedding_service',
    'derive_semantic_tags',
    'cosine_similarity', 'calculate_semantic_similarity',
    'ProfileStore', 'VectorPersistenceError', 'get_profile_store', 'close_profile_store',
    'update_user_vector', 'batch_update_vectors'
]
