import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Cosine similarity in [-1, 1].

    Returns 0.0 for length mismatch, empty input or a zero-norm vector; this is
    a ranking signal, so it never raises on bad shapes.
    """
    a = np.asarray(vec_a, dtype=np.float64).ravel()
    b = np.asarray(vec_b, dtype=np.float64).ravel()
    if a.size == 0 or a.size != b.size:
        return 0.0

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(np.dot(a, b) / (norm_a * norm_b))
    return max(-1.0, min(1.0, similarity))


def select_vector(record: Optional[Dict[str, Any]]) -> Optional[Sequence[float]]:
    """Enriched vector when present, else the raw embedding."""
    if not record:
        return None
    enriched = record.get("enriched_embedding")
    if enriched is not None and len(enriched) > 0:
        return enriched
    return record.get("embedding")


def embedding_similarity(record_a: Optional[Dict[str, Any]], record_b: Optional[Dict[str, Any]]) -> float:
    vec_a = select_vector(record_a)
    vec_b = select_vector(record_b)
    if vec_a is None or vec_b is None:
        return 0.0
    return cosine_similarity(vec_a, vec_b)


def calculate_semantic_similarity(user_a: str, user_b: str, store=None) -> float:
    """Similarity of two users' stored vectors; 0.0 if either has none or the store fails."""
    if store is None:
        from semantic_engine.services.profile_store import get_profile_store
        store = get_profile_store()

    try:
        record_a = store.fetch_embedding(user_a)
        record_b = store.fetch_embedding(user_b)
    except PyMongoError as e:
        logger.warning(f"⚠️ Could not load embeddings for {user_a}/{user_b}, similarity=0: {e}")
        return 0.0
    if not record_a or not record_b:
        logger.debug(f"No embedding for {user_a if not record_a else user_b}, similarity=0")
        return 0.0
    return embedding_similarity(record_a, record_b)
