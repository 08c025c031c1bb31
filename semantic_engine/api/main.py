import logging
import os

from celery.result import AsyncResult
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from semantic_engine.core.config import LOG_LEVEL
from semantic_engine.models import BatchUpdateRequest, SimilarityResponse, TaskQueued, VectorMetadata
from semantic_engine.services.profile_store import close_profile_store, get_profile_store
from semantic_engine.services.similarity import calculate_semantic_similarity
from semantic_engine.tasks.celery_app import cel
from semantic_engine.tasks.tasks import update_user_vector_task, batch_update_vectors_task

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


def _parse_csv_setting(raw_value: str | None, default: list[str]) -> list[str]:
    if not raw_value:
        return default
    value = raw_value.strip()
    if not value:
        return default
    if value == "*":
        return ["*"]
    return [item.strip().rstrip("/") for item in value.split(",") if item.strip()]


app = FastAPI(title="Semantic Profile Vectorizer")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_csv_setting(os.getenv("CORS_ALLOWED_ORIGINS"), ["*"]),
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup_initialization():
    logger.info("🔧 Creating MongoDB indexes...")
    try:
        get_profile_store().ensure_indexes()
        logger.info("✅ MongoDB indexes created successfully")
    except PyMongoError as e:
        logger.warning(f"⚠️ Failed to create MongoDB indexes: {e}")


@app.on_event("shutdown")
def shutdown_cleanup():
    close_profile_store()
    logger.info("👋 MongoDB client closed")


@app.post("/vectors/{user_id}/refresh", response_model=TaskQueued, status_code=202)
def refresh_user_vector(user_id: str):
    """Trigger point for profile edits, prompt answers and onboarding completion."""
    result = update_user_vector_task.delay(user_id)
    logger.info(f"📥 Queued vector refresh for user {user_id} (task {result.id})")
    return TaskQueued(task_id=result.id, details={"user_id": user_id})


@app.post("/vectors/batch", response_model=TaskQueued, status_code=202)
def refresh_vectors_batch(request: BatchUpdateRequest):
    result = batch_update_vectors_task.delay(request.user_ids)
    logger.info(f"📥 Queued batch vector refresh for {len(request.user_ids)} users (task {result.id})")
    return TaskQueued(task_id=result.id, details={"total": len(request.user_ids)})


@app.get("/tasks/{tid}")
def task_status(tid: str):
    r = AsyncResult(tid, app=cel)
    if r.state == "PENDING":
        return {"state": r.state, "info": {"status": "Task is pending, waiting to be processed..."}}
    if r.state == "PROGRESS":
        return {"state": r.state, "info": r.info or {"status": "Processing..."}}
    if r.state == "SUCCESS":
        return {"state": r.state, "result": r.result or {}}
    if r.state == "FAILURE":
        return {"state": r.state, "error": str(r.result)}
    return {"state": r.state}


@app.get("/vectors/{user_id}", response_model=VectorMetadata)
def get_vector_metadata(user_id: str):
    record = get_profile_store().fetch_embedding(user_id)
    if not record:
        raise HTTPException(status_code=404, detail=f"No embedding for user {user_id}")
    return VectorMetadata(
        user_id=user_id,
        fingerprint=record.get("fingerprint", ""),
        dimension=len(record.get("embedding") or []),
        embedding_source=record.get("embedding_source"),
        derived_tags=record.get("derived_tags") or [],
        enriched_at=record.get("enriched_at"),
        updated_at=record.get("updated_at"),
    )


@app.get("/similarity/{user_a}/{user_b}", response_model=SimilarityResponse)
def get_similarity(user_a: str, user_b: str):
    similarity = calculate_semantic_similarity(user_a, user_b, store=get_profile_store())
    return SimilarityResponse(user_a=user_a, user_b=user_b, similarity=similarity)
