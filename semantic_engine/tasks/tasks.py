import logging
from typing import Any, Dict, List

from semantic_engine.tasks.celery_app import cel
from semantic_engine.services.profile_updater import (
    update_user_vector,
    batch_update_vectors,
    failed_user_ids,
)

logger = logging.getLogger(__name__)


@cel.task(name="tasks.update_user_vector_task")
def update_user_vector_task(user_id: str) -> Dict[str, Any]:
    """
    Trigger point for onboarding completion, profile edits and prompt answers.
    Persistence errors fail the task so they show up in the result backend.
    """
    status = update_user_vector(user_id)
    return {"user_id": user_id, "status": status}


@cel.task(bind=True, name="tasks.batch_update_vectors_task")
def batch_update_vectors_task(self, user_ids: List[str]) -> Dict[str, Any]:
    """Batch entry point: callers choose which users to refresh."""
    user_ids = list(user_ids or [])
    if self.request.id:
        self.update_state(state="PROGRESS", meta={"total": len(user_ids), "status": "Updating vectors"})

    summary = batch_update_vectors(user_ids)
    failed = failed_user_ids(summary)
    if failed:
        logger.warning(f"⚠️ Batch finished with {len(failed)} failed users: {failed}")
    return summary
