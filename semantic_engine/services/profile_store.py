"""
MongoDB-backed profile store.

Read side assembles a ProfileSnapshot from the users, prompt_answers and
daily_prompts collections. Write side owns the profile_embeddings collection
and the denormalized ``users.semantic_tags`` field; nothing else in the
product writes either of them.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from semantic_engine.db_sync import (
    close_db_client,
    get_db,
    USERS_COLLECTION,
    DAILY_PROMPTS_COLLECTION,
    PROMPT_ANSWERS_COLLECTION,
    PROFILE_EMBEDDINGS_COLLECTION,
)
from semantic_engine.models import ProfileEmbedding, ProfileSnapshot, PsychProfile, PromptAnswer

logger = logging.getLogger(__name__)

SNAPSHOT_FIELDS = (
    "bio", "interests", "occupation", "education",
    "drinking", "smoking", "children", "semantic_tags", "psych_profile",
)


class VectorPersistenceError(RuntimeError):
    """The embedding record or the denormalized tags could not be written."""


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


class ProfileStore:
    def __init__(self, db=None):
        self.db = db if db is not None else get_db()
        self.users = self.db[USERS_COLLECTION]
        self.daily_prompts = self.db[DAILY_PROMPTS_COLLECTION]
        self.prompt_answers = self.db[PROMPT_ANSWERS_COLLECTION]
        self.embeddings = self.db[PROFILE_EMBEDDINGS_COLLECTION]

    def ensure_indexes(self) -> None:
        self.embeddings.create_index([("user_id", ASCENDING)], unique=True)
        self.prompt_answers.create_index([("user_id", ASCENDING), ("created_at", ASCENDING)])

    # ------------------------------------------------------------------
    # Read contract
    # ------------------------------------------------------------------

    def _fetch_prompt_answers(self, user_id: str) -> List[PromptAnswer]:
        answers = list(
            self.prompt_answers.find({"user_id": user_id}).sort(
                [("created_at", ASCENDING), ("_id", ASCENDING)]
            )
        )
        if not answers:
            return []

        prompt_ids = list({a.get("prompt_id") for a in answers if a.get("prompt_id") is not None})
        prompts = {
            p["_id"]: p
            for p in self.daily_prompts.find({"_id": {"$in": prompt_ids}})
        }

        result: List[PromptAnswer] = []
        for answer in answers:
            prompt = prompts.get(answer.get("prompt_id")) or {}
            result.append(PromptAnswer(
                answer=_as_text(answer.get("answer")),
                answer_label=_as_text(answer.get("answer_label")),
                vector_tag=prompt.get("vector_tag"),
                category=prompt.get("category"),
                weight=prompt.get("weight") if prompt.get("weight") is not None else 1.0,
            ))
        return result

    def fetch_profile_snapshot(self, user_id: str) -> Optional[ProfileSnapshot]:
        """Assemble everything needed for vectorization, or None if the user is unknown."""
        user = self.users.find_one({"_id": user_id}, {field: 1 for field in SNAPSHOT_FIELDS})
        if not user:
            return None

        psych_doc = user.get("psych_profile")
        return ProfileSnapshot(
            user_id=user_id,
            bio=user.get("bio"),
            interests=user.get("interests"),
            occupation=user.get("occupation"),
            education=user.get("education"),
            drinking=user.get("drinking"),
            smoking=user.get("smoking"),
            children=user.get("children"),
            psych_profile=PsychProfile.model_validate(psych_doc) if psych_doc else None,
            prompt_answers=self._fetch_prompt_answers(user_id),
            semantic_tags=user.get("semantic_tags") or [],
        )

    def fetch_embedding(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self.embeddings.find_one({"user_id": user_id}, {"_id": 0})

    # ------------------------------------------------------------------
    # Write contract
    # ------------------------------------------------------------------

    def save_embedding(
        self,
        user_id: str,
        embedding: List[float],
        fingerprint: str,
        derived_tags: List[str],
        enriched_embedding: Optional[List[float]] = None,
        embedding_source: Optional[str] = None,
    ) -> None:
        """
        Upsert the user's embedding record, then mirror the tags onto the user.

        Vector and fingerprint go out in a single document update so they can
        never diverge.
        """
        now = datetime.now(timezone.utc)
        vector = [float(v) for v in embedding]
        record = ProfileEmbedding(
            user_id=user_id,
            embedding=vector,
            fingerprint=fingerprint,
            enriched_embedding=[float(v) for v in enriched_embedding] if enriched_embedding is not None else vector,
            enriched_at=now,
            embedding_source=embedding_source,
            derived_tags=list(derived_tags),
            updated_at=now,
        )
        try:
            self.embeddings.update_one(
                {"user_id": user_id},
                {
                    "$set": record.model_dump(exclude={"user_id", "created_at"}),
                    "$setOnInsert": {"created_at": now},
                },
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"❌ Failed to persist embedding for user {user_id}: {e}")
            raise VectorPersistenceError(f"Could not persist embedding for user {user_id}") from e
        self.sync_user_tags(user_id, derived_tags)

    def sync_user_tags(self, user_id: str, tags: List[str]) -> None:
        """Overwrite the user's denormalized tag field, touching nothing else."""
        try:
            self.users.update_one({"_id": user_id}, {"$set": {"semantic_tags": list(tags)}})
        except PyMongoError as e:
            logger.error(f"❌ Failed to write semantic tags for user {user_id}: {e}")
            raise VectorPersistenceError(f"Could not write semantic tags for user {user_id}") from e

    def delete_embedding(self, user_id: str) -> bool:
        """Account-deletion hook. Returns True if a record was removed."""
        result = self.embeddings.delete_one({"user_id": user_id})
        if result.deleted_count:
            logger.info(f"🗑️ Deleted embedding for user {user_id}")
        return bool(result.deleted_count)


# Global store instance
_profile_store: Optional[ProfileStore] = None


def get_profile_store() -> ProfileStore:
    """Get or create the global profile store."""
    global _profile_store
    if _profile_store is None:
        _profile_store = ProfileStore()
    return _profile_store


def close_profile_store() -> None:
    """Drop the global store and close the shared Mongo client."""
    global _profile_store
    _profile_store = None
    close_db_client()
