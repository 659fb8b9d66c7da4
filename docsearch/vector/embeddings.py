"""
Embedding providers: turn page and query text into fixed-length vectors.
"""

from abc import ABC, abstractmethod
import hashlib

import numpy as np
import requests

from ..core.errors import EmbeddingError


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider.

    Seeds a random generator with a SHA-256 digest of the text, so the same
    text always maps to the same unit vector. Useful for tests and local runs
    without model downloads; it carries no semantic meaning.
    """

    def __init__(self, dimension: int = 384):
        self.dimension = dimension

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector using hash function."""
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        rng = np.random.default_rng(int.from_bytes(digest[:8], "big"))
        vector = rng.uniform(-1.0, 1.0, self.dimension)

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm
        return vector.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector using sentence transformers."""
        try:
            embedding = self.model.encode(text, convert_to_tensor=False)
        except Exception as e:
            raise EmbeddingError(f"Sentence transformer encode failed: {e}") from e
        return embedding.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension


class OpenAIEmbedding(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible /embeddings endpoint."""

    def __init__(self, api_url: str, api_key: str, model: str, timeout: float = 30.0, session: requests.Session = None):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._session = session or requests.Session()
        self._dimension = None

    def embed_text(self, text: str) -> list[float]:
        """POST the text and return the first embedding in the response."""
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"model": self.model, "input": text}

        try:
            response = self._session.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout as e:
            raise EmbeddingError(f"Embedding request timed out after {self.timeout}s") from e
        except requests.RequestException as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e

        if response.status_code == 429:
            raise EmbeddingError("Embedding provider quota exceeded")
        if response.status_code in (401, 403):
            raise EmbeddingError("Embedding provider rejected credentials")
        if response.status_code >= 400:
            raise EmbeddingError(f"Embedding provider returned HTTP {response.status_code}")

        try:
            embedding = response.json()["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmbeddingError("Malformed embedding response") from e

        if not isinstance(embedding, list) or not embedding:
            raise EmbeddingError("Malformed embedding response")

        if self._dimension is None:
            self._dimension = len(embedding)
        return [float(x) for x in embedding]

    def get_dimension(self) -> int:
        """Dimension of the vectors seen so far (probes the endpoint once if needed)."""
        if self._dimension is None:
            self.embed_text("dimension probe")
        return self._dimension
