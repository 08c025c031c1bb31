"""
Profile Embedding Providers
Turns compiled profile text into a fixed-dimension vector.

Two strategies, chosen once at construction time:
- OpenAIEmbeddingProvider calls the OpenAI embeddings endpoint and falls back to
  the deterministic generator on any failure.
- HashEmbeddingProvider derives a pseudo-embedding from a sha256 digest of the
  text, with fixed keyword dimensions forced high.
"""
import hashlib
import logging
import math
from typing import List, Optional, Tuple

import numpy as np

from semantic_engine.core import config

logger = logging.getLogger(__name__)

# (keyword, dimension index) forced to KEYWORD_SIGNAL when the keyword appears
KEYWORD_DIMENSIONS: List[Tuple[str, int]] = [
    ("adventurous", 10),
    ("outdoor", 20),
    ("travel", 30),
    ("family", 40),
    ("career", 50),
    ("creative", 60),
    ("sports", 70),
    ("music", 80),
    ("cooking", 90),
    ("reading", 100),
]
KEYWORD_SIGNAL = 0.9


class EmbeddingProviderError(RuntimeError):
    """Raised by a configured external provider in strict mode."""


class EmbeddingProvider:
    """Strategy interface: text in, vector of ``dimension`` floats out."""

    name = "base"

    def __init__(self, dimension: int = None):
        self.dimension = dimension or config.EMBEDDING_DIMENSION

    def embed(self, text: str) -> np.ndarray:
        raise NotImplementedError

    def embed_with_source(self, text: str) -> Tuple[np.ndarray, str]:
        """Vector plus the name of the strategy that actually produced it."""
        return self.embed(text), self.name


class HashEmbeddingProvider(EmbeddingProvider):
    """Deterministic fallback generator. Identical text always yields an identical vector."""

    name = "hash"

    def embed(self, text: str) -> np.ndarray:
        normalized = (text or "").lower()
        digest = hashlib.sha256(normalized.encode("utf-8")).digest()

        # Digest bytes repeat cyclically across all dimensions, scaled to [-1, 1]
        hash_bytes = np.frombuffer(digest, dtype=np.uint8)
        embedding = np.resize(hash_bytes, self.dimension).astype(np.float64) / 255.0 * 2.0 - 1.0

        for keyword, index in KEYWORD_DIMENSIONS:
            if index < self.dimension and keyword in normalized:
                embedding[index] = KEYWORD_SIGNAL

        return embedding


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """External strategy backed by the OpenAI embeddings API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model_name: str = None,
        dimension: int = None,
        timeout: float = None,
        strict: bool = None,
        client=None,
        fallback: Optional[EmbeddingProvider] = None,
    ):
        super().__init__(dimension)
        self.model_name = model_name or config.EMBEDDING_MODEL
        self.strict = config.EMBEDDING_STRICT if strict is None else strict
        self.fallback = fallback or HashEmbeddingProvider(self.dimension)
        self.failure_count = 0
        if client is None:
            from openai import OpenAI
            client = OpenAI(
                api_key=api_key,
                timeout=timeout if timeout is not None else config.EMBEDDING_TIMEOUT_SECONDS,
            )
        self.client = client
        logger.info(f"✅ Initialized OpenAI embedding model: {self.model_name} ({self.dimension}D)")

    def _request(self, text: str) -> np.ndarray:
        kwargs = {"model": self.model_name, "input": text}
        if self.model_name.startswith("text-embedding-3"):
            # v3 models can shorten their output to the system dimension
            kwargs["dimensions"] = self.dimension
        response = self.client.embeddings.create(**kwargs)

        if not response or not getattr(response, "data", None):
            raise ValueError("Embedding response contained no data")
        values = response.data[0].embedding
        if not isinstance(values, (list, tuple)) or len(values) != self.dimension:
            raise ValueError(
                f"Embedding response has dimension {len(values) if isinstance(values, (list, tuple)) else 'n/a'}, "
                f"expected {self.dimension}"
            )
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
            raise ValueError("Embedding response contains non-numeric values")
        return np.asarray(values, dtype=np.float64)

    def embed(self, text: str) -> np.ndarray:
        return self.embed_with_source(text)[0]

    def embed_with_source(self, text: str) -> Tuple[np.ndarray, str]:
        try:
            return self._request(text), self.name
        except Exception as e:
            self.failure_count += 1
            # Configured but failing is an operational problem, unlike never configured
            logger.error(f"❌ OpenAI embedding failed ({self.failure_count} total): {e}")
            if self.strict:
                raise EmbeddingProviderError(f"OpenAI embedding failed: {e}") from e
            logger.warning("⚠️ Falling back to deterministic hash embedding")
            return self.fallback.embed_with_source(text)


def build_embedding_provider(api_key: str = None, dimension: int = None, **kwargs) -> EmbeddingProvider:
    """Select the provider strategy from configuration."""
    key = config.OPENAI_API_KEY if api_key is None else api_key
    if config.openai_key_configured(key):
        return OpenAIEmbeddingProvider(api_key=key, dimension=dimension, **kwargs)
    logger.info("ℹ️ OPENAI_API_KEY not configured, using deterministic hash embeddings")
    return HashEmbeddingProvider(dimension)


# Global embedding provider instance
_embedding_service: Optional[EmbeddingProvider] = None


def get_embedding_service() -> EmbeddingProvider:
    """Get or create global embedding provider instance."""
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = build_embedding_provider()
    return _embedding_service


def reset_embedding_service():
    """Reset the global embedding provider (useful after API key changes)."""
    global _embedding_service
    _embedding_service = None
    logger.info("🔄 Reset embedding service instance (will be recreated on next use)")
