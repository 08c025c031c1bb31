import copy

import pytest

from semantic_engine.models import ProfileSnapshot, PsychProfile, PromptAnswer
from semantic_engine.services.embeddings import HashEmbeddingProvider


class InMemoryProfileStore:
    """Store double with the same read/write contract as ProfileStore."""

    def __init__(self, snapshots=None):
        self.snapshots = dict(snapshots or {})
        self.embeddings = {}
        self.user_tags = {}
        self.save_calls = 0
        self.tag_syncs = 0
        self.fail_on_save = None
        self.fail_on_fetch = set()

    def fetch_profile_snapshot(self, user_id):
        if user_id in self.fail_on_fetch:
            raise RuntimeError(f"store unavailable for {user_id}")
        snapshot = self.snapshots.get(user_id)
        return copy.deepcopy(snapshot) if snapshot is not None else None

    def fetch_embedding(self, user_id):
        record = self.embeddings.get(user_id)
        return copy.deepcopy(record) if record is not None else None

    def save_embedding(self, user_id, embedding, fingerprint, derived_tags, enriched_embedding=None, embedding_source=None):
        if self.fail_on_save is not None:
            raise self.fail_on_save
        self.save_calls += 1
        self.embeddings[user_id] = {
            "user_id": user_id,
            "embedding": [float(v) for v in embedding],
            "fingerprint": fingerprint,
            "enriched_embedding": [float(v) for v in (enriched_embedding if enriched_embedding is not None else embedding)],
            "embedding_source": embedding_source,
            "derived_tags": list(derived_tags),
        }
        self._mirror_tags(user_id, derived_tags)

    def sync_user_tags(self, user_id, tags):
        self.tag_syncs += 1
        self._mirror_tags(user_id, tags)

    def _mirror_tags(self, user_id, tags):
        self.user_tags[user_id] = list(tags)
        if user_id in self.snapshots:
            self.snapshots[user_id].semantic_tags = list(tags)


class CountingProvider(HashEmbeddingProvider):
    name = "counting"

    def __init__(self, dimension=None):
        super().__init__(dimension)
        self.calls = 0

    def embed(self, text):
        self.calls += 1
        return super().embed(text)


@pytest.fixture
def psych_profile():
    return PsychProfile(
        introvert_scale=8,
        spontaneity_scale=3,
        adventure_scale=9,
        family_importance=9,
        career_importance=5,
        conflict_style="talk it out",
        communication_style="direct",
        love_lang_words=2,
        love_lang_time=9,
        love_lang_gifts=1,
        love_lang_acts=4,
        love_lang_touch=7,
        relationship_goal="serious",
    )


@pytest.fixture
def full_snapshot(psych_profile):
    return ProfileSnapshot(
        user_id="u-full",
        bio="Love to travel and cook",
        interests="climbing, jazz",
        occupation="nurse",
        education="HBO",
        drinking="socially",
        smoking="never",
        children="wants someday",
        psych_profile=psych_profile,
        prompt_answers=[
            PromptAnswer(answer="mountains", answer_label="Bergen", vector_tag="vacation-preference", category="lifestyle"),
            PromptAnswer(answer="night", answer_label="Nachtuil", vector_tag="sleep-schedule", category="lifestyle", weight=1.2),
        ],
        semantic_tags=["old-tag"],
    )


@pytest.fixture
def store():
    return InMemoryProfileStore()


@pytest.fixture
def provider():
    return CountingProvider()
