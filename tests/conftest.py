"""
tests/conftest.py
Shared fixtures.  Knowledge stores in tests use a deterministic
bag-of-words embedder so no sentence-transformers model is downloaded.
"""
import math
import re
import sys
import zlib
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from knowledge_base.knowledge_store import KnowledgeStore

_WORD = re.compile(r"[a-z0-9]+")
_STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "by", "do", "does", "for", "from",
    "how", "in", "is", "it", "of", "on", "or", "the", "this", "that", "to",
    "what", "when", "which", "who", "with",
})


class BagOfWordsEmbedder:
    """Hashes each distinct non-stop word into one dimension of a unit vector."""

    def __init__(self, dims: int = 2048) -> None:
        self.dims = dims

    def embed(self, texts: list[str]) -> list[list[float]]:
        return [self._vector(text) for text in texts]

    def _vector(self, text: str) -> list[float]:
        vector = [0.0] * self.dims
        # keeps stop-word-only text from producing a zero vector
        vector[0] = 0.01
        for word in set(_WORD.findall(text.lower())) - _STOP_WORDS:
            vector[zlib.crc32(word.encode()) % (self.dims - 1) + 1] = 1.0
        norm = math.sqrt(sum(v * v for v in vector))
        return [v / norm for v in vector]


@pytest.fixture
def embedder() -> BagOfWordsEmbedder:
    return BagOfWordsEmbedder()


@pytest.fixture
def make_store(embedder):
    """Factory for knowledge stores backed by the test embedder."""
    def _make(seed: bool = True) -> KnowledgeStore:
        return KnowledgeStore(seed=seed, embedder=embedder)
    return _make


@pytest.fixture
def knowledge_store(make_store) -> KnowledgeStore:
    return make_store()
