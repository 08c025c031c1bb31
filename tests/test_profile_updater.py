from types import SimpleNamespace

import pytest

from semantic_engine.core import config
from semantic_engine.models import ProfileSnapshot, PsychProfile
from semantic_engine.services import profile_updater
from semantic_engine.services.embeddings import HashEmbeddingProvider, OpenAIEmbeddingProvider
from semantic_engine.services.fingerprint import profile_fingerprint
from semantic_engine.services.profile_store import VectorPersistenceError
from semantic_engine.services.profile_updater import update_user_vector, batch_update_vectors
from semantic_engine.services.semantic_text import build_semantic_profile
from semantic_engine.services.similarity import calculate_semantic_similarity


def test_unknown_user_is_a_no_op(store, provider):
    assert update_user_vector("ghost", store=store, provider=provider) == "not_found"
    assert provider.calls == 0
    assert store.save_calls == 0


def test_first_run_persists_vector_fingerprint_and_tags(store, provider, full_snapshot):
    store.snapshots["u-full"] = full_snapshot

    assert update_user_vector("u-full", store=store, provider=provider) == "updated"

    record = store.embeddings["u-full"]
    assert len(record["embedding"]) == config.EMBEDDING_DIMENSION
    assert record["enriched_embedding"] == record["embedding"]
    compiled = build_semantic_profile(full_snapshot.model_copy(update={"semantic_tags": record["derived_tags"]}))
    assert record["fingerprint"] == profile_fingerprint(compiled)
    assert "old-tag" not in record["derived_tags"]
    assert "travel-lover" in record["derived_tags"]
    assert store.user_tags["u-full"] == record["derived_tags"]


def test_second_run_without_changes_skips_embedding(store, provider, full_snapshot):
    store.snapshots["u-full"] = full_snapshot

    update_user_vector("u-full", store=store, provider=provider)
    assert update_user_vector("u-full", store=store, provider=provider) == "unchanged"

    assert provider.calls == 1
    assert store.save_calls == 1
    assert store.tag_syncs == 0


def test_profile_change_triggers_recompute(store, provider):
    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Cyclist")
    update_user_vector("u1", store=store, provider=provider)
    first_fingerprint = store.embeddings["u1"]["fingerprint"]

    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Cyclist and baker")
    assert update_user_vector("u1", store=store, provider=provider) == "updated"
    assert provider.calls == 2
    assert store.embeddings["u1"]["fingerprint"] != first_fingerprint


def test_tags_are_recomputed_not_merged(store, provider):
    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Concert every week")
    update_user_vector("u1", store=store, provider=provider)
    assert store.embeddings["u1"]["derived_tags"] == ["music-lover"]

    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Mostly books now")
    update_user_vector("u1", store=store, provider=provider)
    assert store.embeddings["u1"]["derived_tags"] == ["bookworm"]


def test_unchanged_run_rewrites_out_of_date_tags(store, provider, full_snapshot):
    store.snapshots["u-full"] = full_snapshot
    update_user_vector("u-full", store=store, provider=provider)
    store.snapshots["u-full"].semantic_tags = ["stale"]

    assert update_user_vector("u-full", store=store, provider=provider) == "unchanged"
    assert store.tag_syncs == 1
    assert store.user_tags["u-full"] == store.embeddings["u-full"]["derived_tags"]
    assert provider.calls == 1


class FlakyEmbeddingsAPI:
    def __init__(self, dimension):
        self.dimension = dimension
        self.down = True
        self.calls = 0

    def create(self, **kwargs):
        self.calls += 1
        if self.down:
            raise ConnectionError("service unavailable")
        return SimpleNamespace(data=[SimpleNamespace(embedding=[0.25] * self.dimension)])


def test_fallback_vector_is_replaced_once_provider_recovers(store):
    api = FlakyEmbeddingsAPI(config.EMBEDDING_DIMENSION)
    openai_provider = OpenAIEmbeddingProvider(
        api_key="sk-test-0123456789abcdefghijklmnop", client=SimpleNamespace(embeddings=api), strict=False
    )
    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Cyclist")

    assert update_user_vector("u1", store=store, provider=openai_provider) == "updated"
    assert store.embeddings["u1"]["embedding_source"] == "hash"
    fingerprint = store.embeddings["u1"]["fingerprint"]

    api.down = False
    assert update_user_vector("u1", store=store, provider=openai_provider) == "updated"
    record = store.embeddings["u1"]
    assert record["embedding_source"] == "openai"
    assert record["fingerprint"] == fingerprint
    assert record["embedding"] == [0.25] * config.EMBEDDING_DIMENSION

    assert update_user_vector("u1", store=store, provider=openai_provider) == "unchanged"
    assert api.calls == 2


def test_hash_vector_is_kept_when_hash_is_the_configured_provider(store, provider):
    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Cyclist")
    update_user_vector("u1", store=store, provider=provider)
    store.embeddings["u1"]["embedding_source"] = "hash"

    assert update_user_vector("u1", store=store, provider=HashEmbeddingProvider()) == "unchanged"


def test_persistence_failure_is_raised(store, provider):
    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Hi")
    store.fail_on_save = VectorPersistenceError("write failed")

    with pytest.raises(VectorPersistenceError):
        update_user_vector("u1", store=store, provider=provider)
    assert "u1" not in store.embeddings


def test_identical_users_are_similar(store, provider):
    psych = PsychProfile(introvert_scale=7, adventure_scale=3, love_lang_acts=6)
    for user_id in ("a", "b"):
        store.snapshots[user_id] = ProfileSnapshot(user_id=user_id, bio="Weekend hikes and good coffee", psych_profile=psych)
        update_user_vector(user_id, store=store, provider=provider)

    assert calculate_semantic_similarity("a", "b", store=store) >= 0.99


def test_batch_isolates_failures(store, provider, monkeypatch):
    sleeps = []
    monkeypatch.setattr(profile_updater.time, "sleep", sleeps.append)
    for user_id in ("u1", "u2", "u3"):
        store.snapshots[user_id] = ProfileSnapshot(user_id=user_id, bio=f"Bio of {user_id}")
    store.fail_on_fetch.add("u2")

    summary = batch_update_vectors(["u1", "u2", "u3"], store=store, provider=provider, delay_seconds=0.25)

    assert summary["completed"] is True
    assert summary["total"] == 3
    assert summary["updated"] == 2
    assert summary["failed"] == 1
    assert summary["failed_users"][0]["user_id"] == "u2"
    assert set(store.embeddings) == {"u1", "u3"}
    assert sleeps == [0.25, 0.25]


def test_batch_counts_statuses(store, provider, monkeypatch):
    monkeypatch.setattr(profile_updater.time, "sleep", lambda _: None)
    store.snapshots["u1"] = ProfileSnapshot(user_id="u1", bio="Hi")
    update_user_vector("u1", store=store, provider=provider)

    summary = batch_update_vectors(["u1", "ghost"], store=store, provider=provider)

    assert summary["unchanged"] == 1
    assert summary["not_found"] == 1
    assert summary["failed"] == 0
    assert profile_updater.failed_user_ids(summary) == []


def test_empty_batch(store, provider):
    summary = batch_update_vectors([], store=store, provider=provider)
    assert summary["total"] == 0
    assert summary["completed"] is True
