"""Vector retrieval over stored document chunks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from docgraph.config.logger import app_logger
from docgraph.config.settings import settings
from docgraph.rag.embedding import OpenAIEmbedder
from docgraph.rag.vectors import vector_to_literal
from docgraph.repositories.chunk_repo import ChunkRepository
from docgraph.utils.errors import InvalidInputError

DEFAULT_TOP_K = 5
DEFAULT_THRESHOLD = 0.7


@dataclass
class RetrievedChunk:
    content: str
    similarity: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def doc_id(self) -> str:
        return self.metadata.get("doc_id", "")


def _or_default(value, default):
    return value if value is not None and value > 0 else default


class VectorRetriever:
    """Embeds a query and returns the most similar chunks above a threshold."""

    def __init__(
        self,
        chunk_repo: ChunkRepository,
        embedder: OpenAIEmbedder,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
    ):
        self.chunk_repo = chunk_repo
        self.embedder = embedder
        self.top_k = _or_default(top_k, _or_default(settings.RETRIEVER_TOP_K, DEFAULT_TOP_K))
        self.threshold = _or_default(
            threshold, _or_default(settings.RETRIEVER_SIMILARITY_THRESHOLD, DEFAULT_THRESHOLD)
        )

    async def retrieve(
        self,
        query: str,
        top_k: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[RetrievedChunk]:
        if not query or not query.strip():
            raise InvalidInputError("query cannot be empty")
        top_k = _or_default(top_k, self.top_k)
        threshold = _or_default(threshold, self.threshold)

        query_vector = await self.embedder.embed_text(query)
        matches = await self.chunk_repo.search_similar(vector_to_literal(query_vector), top_k, threshold)

        # Enforce the contract regardless of what the store returned
        results = [
            RetrievedChunk(
                content=match.content,
                similarity=match.similarity,
                metadata={"doc_id": match.doc_id, "chunk_index": match.chunk_index, "chunk_id": match.id},
            )
            for match in matches
            if match.similarity > threshold
        ]
        results.sort(key=lambda chunk: chunk.similarity, reverse=True)
        results = results[:top_k]
        app_logger.debug(f"Retrieved {len(results)} chunks (top_k={top_k}, threshold={threshold})")
        return results
