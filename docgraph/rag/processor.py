"""Ingestion pipeline: load, split, embed, persist."""

from __future__ import annotations

import time
from typing import List, Optional

from docgraph.config.logger import app_logger, log_performance
from docgraph.models.document import DocumentChunk
from docgraph.rag.embedding import OpenAIEmbedder
from docgraph.rag.loaders import LoaderFactory
from docgraph.rag.splitter import TextSplitter
from docgraph.repositories.chunk_repo import BATCH_SIZE, ChunkRepository
from docgraph.utils.errors import DocGraphError, ProcessingError, UpstreamError


class DocumentProcessor:
    """Turns one source file into persisted, embedded chunks."""

    def __init__(
        self,
        chunk_repo: ChunkRepository,
        embedder: OpenAIEmbedder,
        splitter: Optional[TextSplitter] = None,
        loader_factory: type = LoaderFactory,
    ):
        self.chunk_repo = chunk_repo
        self.embedder = embedder
        self.splitter = splitter or TextSplitter()
        self.loader_factory = loader_factory

    async def process(self, doc_id: str, file_path: str) -> int:
        """Return the number of chunks stored. Nothing is written unless every chunk was embedded."""
        start_time = time.time()

        loader = self.loader_factory.get_loader(file_path)
        documents = await loader.load(file_path)
        if not documents:
            raise ProcessingError("no documents loaded", {"doc_id": doc_id, "file_path": file_path})

        pieces = self.splitter.split_documents(documents)
        if not pieces:
            raise ProcessingError("no chunks created", {"doc_id": doc_id, "file_path": file_path})
        app_logger.info(f"Split {file_path} into {len(pieces)} chunks")

        texts = [piece.content for piece in pieces]
        try:
            embeddings = await self.embedder.embed_texts(texts)
        except DocGraphError:
            raise
        except Exception as e:
            raise UpstreamError("failed to embed chunks", {"doc_id": doc_id, "error": str(e)}) from e
        if len(embeddings) != len(pieces):
            raise UpstreamError(
                "embedding count mismatch",
                {"doc_id": doc_id, "expected": len(pieces), "received": len(embeddings)},
            )

        chunks: List[DocumentChunk] = [
            DocumentChunk(
                doc_id=doc_id,
                chunk_index=piece.metadata.get("chunk_index", 0),
                content=piece.content,
                embedding=embedding,
                meta={},
            )
            for piece, embedding in zip(pieces, embeddings)
        ]
        stored = await self.chunk_repo.batch_create(chunks, batch_size=BATCH_SIZE)

        log_performance("document_processing", time.time() - start_time, doc_id=doc_id, chunks=stored)
        return stored
