"""OpenAI embeddings client with sharded, order-preserving batch embedding."""

from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from docgraph.config.logger import app_logger
from docgraph.config.settings import settings
from docgraph.utils.errors import InvalidInputError, UnsupportedError, UpstreamError


def build_openai_client() -> AsyncOpenAI:
    """Create the shared AsyncOpenAI client from settings."""
    if not settings.OPENAI_API_KEY:
        raise UpstreamError("OPENAI_API_KEY must be configured")
    kwargs = {"api_key": settings.OPENAI_API_KEY}
    if settings.OPENAI_BASE_URL:
        kwargs["base_url"] = settings.OPENAI_BASE_URL
    client = AsyncOpenAI(**kwargs)
    app_logger.info("OpenAI client initialized")
    return client


class OpenAIEmbedder:
    """Embeds texts through the OpenAI embeddings endpoint."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        batch_size: Optional[int] = None,
        dimension: Optional[int] = None,
    ):
        self._client = client
        self.model = model or settings.OPENAI_EMBEDDING_MODEL
        self.batch_size = max(1, batch_size or settings.EMBEDDING_BATCH_SIZE)
        self.dimension = dimension or settings.EMBEDDING_DIMENSION

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = build_openai_client()
        return self._client

    async def embed_text(self, text: str) -> List[float]:
        if not text or not text.strip():
            raise InvalidInputError("text to embed cannot be empty")
        vectors = await self.embed_texts([text])
        return vectors[0]

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        """Embed ``texts``; output position i is the vector for input i."""
        if not texts:
            raise InvalidInputError("texts to embed cannot be empty")
        shards = [list(texts[i:i + self.batch_size]) for i in range(0, len(texts), self.batch_size)]
        # Every shard runs to completion so no request is left pending when one fails
        results = await asyncio.gather(*(self._embed_shard(shard) for shard in shards), return_exceptions=True)
        for result in results:
            if isinstance(result, BaseException):
                raise result
        vectors = [vector for shard_vectors in results for vector in shard_vectors]
        if len(vectors) != len(texts):
            raise UpstreamError(
                "embedding count mismatch",
                {"expected": len(texts), "received": len(vectors)},
            )
        return vectors

    async def _embed_shard(self, shard: List[str]) -> List[List[float]]:
        try:
            response = await self.client.embeddings.create(model=self.model, input=shard)
        except OpenAIError as e:
            app_logger.error(f"Embedding request failed: {e}")
            raise UpstreamError("embedding request failed", {"error": str(e)}) from e

        items = sorted(response.data, key=lambda item: item.index)
        vectors = [list(item.embedding) for item in items]
        for vector in vectors:
            if len(vector) != self.dimension:
                raise UpstreamError(
                    "embedding dimension mismatch",
                    {"expected": self.dimension, "received": len(vector)},
                )
        return vectors


def build_embedder(client: Optional[AsyncOpenAI] = None) -> OpenAIEmbedder:
    if settings.EMBEDDING_PROVIDER.lower() != "openai":
        raise UnsupportedError(
            f"unsupported embedding provider: {settings.EMBEDDING_PROVIDER}",
            {"provider": settings.EMBEDDING_PROVIDER},
        )
    return OpenAIEmbedder(client=client)
