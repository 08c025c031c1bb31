"""
Semantic profile vectorization engine.

Turns a member's profile, psych profile and answered prompts into a fixed-length
embedding, caches it behind a content fingerprint, derives semantic tags and
exposes pairwise cosine similarity for match ranking.
"""

__version__ = "1.0.0"
