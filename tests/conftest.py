"""Shared fixtures: a throwaway SQLite database, a recording graph store and a fake embedder."""

from typing import Any, Dict, List, Optional

import pytest

from docgraph.config.settings import settings
from docgraph.db.db import Database


class FakeGraphStore:
    """Records every Cypher statement and replays queued result sets in order."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self._results: List[List[Dict[str, Any]]] = []

    def queue(self, *results: List[Dict[str, Any]]) -> None:
        self._results.extend(results)

    def _next(self, mode: str, query: str, params: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
        self.calls.append({"mode": mode, "query": query, "params": params or {}})
        return self._results.pop(0) if self._results else []

    async def execute_read(self, query: str, params: Optional[Dict[str, Any]] = None):
        return self._next("read", query, params)

    async def execute_write(self, query: str, params: Optional[Dict[str, Any]] = None):
        return self._next("write", query, params)

    @property
    def last(self) -> Dict[str, Any]:
        return self.calls[-1]


class FakeEmbedder:
    """Deterministic vectors of the configured dimension; counts requested texts."""

    def __init__(self, dimension: Optional[int] = None):
        self.dimension = dimension or settings.EMBEDDING_DIMENSION
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        vector = [0.0] * self.dimension
        vector[len(text) % self.dimension] = 1.0
        return vector

    async def embed_text(self, text: str) -> List[float]:
        self.calls.append([text])
        return self._vector(text)

    async def embed_texts(self, texts):
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]


@pytest.fixture
def graph_store() -> FakeGraphStore:
    return FakeGraphStore()


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
async def database(tmp_path):
    db = Database(url=f"sqlite+aiosqlite:///{tmp_path / 'docgraph-test.db'}")
    await db.init()
    yield db
    await db.close()


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "handbook.md"
    path.write_text(
        "# Handbook\n\nKeys are rotated every ninety days. Ask the platform team for access.\n",
        encoding="utf-8",
    )
    return path
