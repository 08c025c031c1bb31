"""
Semantic Update Engine

Refreshes a user's profile vector for AI matching. Called when a user answers
a daily prompt, edits their profile, or completes onboarding, and in batches
from the background worker.

Pipeline: assemble snapshot -> derive tags -> compile text ->
fingerprint gate -> embed -> persist.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List

from semantic_engine.core.config import VECTOR_BATCH_DELAY_SECONDS
from semantic_engine.services.embeddings import EmbeddingProvider, HashEmbeddingProvider, get_embedding_service
from semantic_engine.services.fingerprint import needs_update
from semantic_engine.services.profile_store import get_profile_store
from semantic_engine.services.semantic_tags import derive_semantic_tags
from semantic_engine.services.semantic_text import build_semantic_profile

logger = logging.getLogger(__name__)

STATUS_NOT_FOUND = "not_found"
STATUS_UNCHANGED = "unchanged"
STATUS_UPDATED = "updated"


def _fallback_vector_stale(existing, provider: EmbeddingProvider) -> bool:
    """True when a stored hash vector sits behind a provider that is not the hash generator."""
    return (
        bool(existing)
        and existing.get("embedding_source") == HashEmbeddingProvider.name
        and provider.name != HashEmbeddingProvider.name
    )


def update_user_vector(user_id: str, store=None, provider: EmbeddingProvider = None) -> str:
    """
    Run the single-user pipeline.

    Returns ``"not_found"``, ``"unchanged"`` or ``"updated"``. Store and
    persistence errors propagate to the caller; provider failures are handled
    inside the provider.
    """
    store = store if store is not None else get_profile_store()
    provider = provider if provider is not None else get_embedding_service()

    logger.info(f"🔄 Starting vector update for user {user_id}")

    snapshot = store.fetch_profile_snapshot(user_id)
    if snapshot is None:
        logger.warning(f"⚠️ User {user_id} not found, skipping vector update")
        return STATUS_NOT_FOUND

    # The user's tag field is rewritten with these tags below; compiling with
    # them keeps the text stable across runs when nothing else changes
    derived_tags = derive_semantic_tags(snapshot)
    semantic_profile = build_semantic_profile(snapshot.model_copy(update={"semantic_tags": derived_tags}))

    existing = store.fetch_embedding(user_id)
    update_needed, fingerprint = needs_update(
        semantic_profile, existing.get("fingerprint") if existing else None
    )
    if not update_needed and _fallback_vector_stale(existing, provider):
        logger.info(f"🔁 Stored vector for user {user_id} came from the fallback generator, retrying with {provider.name}")
        update_needed = True

    if not update_needed:
        # A failed tag write after a successful upsert leaves the fingerprint current
        if snapshot.semantic_tags != derived_tags:
            store.sync_user_tags(user_id, derived_tags)
            logger.info(f"🏷️ Repaired semantic tags for user {user_id}")
        logger.info(f"✅ No changes detected for user {user_id}")
        return STATUS_UNCHANGED

    embedding, source = provider.embed_with_source(semantic_profile)

    # No enrichment step yet: the enriched vector mirrors the raw one
    store.save_embedding(
        user_id,
        embedding=list(embedding),
        fingerprint=fingerprint,
        derived_tags=derived_tags,
        enriched_embedding=list(embedding),
        embedding_source=source,
    )

    logger.info(f"✅ Updated vector for user {user_id} ({len(embedding)}D via {source}, {len(derived_tags)} tags)")
    return STATUS_UPDATED


def batch_update_vectors(
    user_ids: Iterable[str],
    store=None,
    provider: EmbeddingProvider = None,
    delay_seconds: float = None,
) -> Dict[str, Any]:
    """
    Update vectors for many users one after another.

    A failure for one user is logged and recorded in the summary; the batch
    carries on. There is no retry: failed users are picked up again by the
    next run or their next profile edit.
    """
    user_ids = list(user_ids)
    delay = VECTOR_BATCH_DELAY_SECONDS if delay_seconds is None else delay_seconds
    store = store if store is not None else get_profile_store()
    provider = provider if provider is not None else get_embedding_service()

    summary: Dict[str, Any] = {
        "total": len(user_ids),
        STATUS_UPDATED: 0,
        STATUS_UNCHANGED: 0,
        STATUS_NOT_FOUND: 0,
        "failed": 0,
        "failed_users": [],
        "started_at": datetime.now(timezone.utc).isoformat(),
    }

    logger.info(f"🚀 Starting batch vector update for {len(user_ids)} users")

    for index, user_id in enumerate(user_ids):
        try:
            status = update_user_vector(user_id, store=store, provider=provider)
            summary[status] += 1
        except Exception as e:
            logger.warning(f"❌ Batch error for user {user_id}: {e}")
            summary["failed"] += 1
            summary["failed_users"].append({"user_id": user_id, "error": str(e)})

        # Fixed pause between users to go easy on the embedding provider
        if delay > 0 and index < len(user_ids) - 1:
            time.sleep(delay)

    summary["finished_at"] = datetime.now(timezone.utc).isoformat()
    summary["completed"] = True
    logger.info(
        f"✅ Batch vector update completed: {summary[STATUS_UPDATED]} updated, "
        f"{summary[STATUS_UNCHANGED]} unchanged, {summary[STATUS_NOT_FOUND]} not found, "
        f"{summary['failed']} failed"
    )
    return summary


def failed_user_ids(summary: Dict[str, Any]) -> List[str]:
    return [entry["user_id"] for entry in summary.get("failed_users", [])]
