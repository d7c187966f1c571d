"""Document chunk persistence and pgvector similarity search."""

from dataclasses import dataclass
from typing import List, Sequence

from sqlalchemy import delete, text
from sqlmodel import select

from docgraph.models.document import DocumentChunk
from docgraph.repositories.base import SQLRepository
from docgraph.utils.errors import UnsupportedError

BATCH_SIZE = 100

# Cosine similarity is 1 - cosine distance (<=>)
SIMILARITY_SQL = text(
    """
    SELECT id, doc_id, chunk_index, content,
           1 - (embedding <=> CAST(CAST(:embedding AS TEXT) AS vector)) AS similarity
    FROM document_chunks
    WHERE embedding IS NOT NULL
      AND 1 - (embedding <=> CAST(CAST(:embedding AS TEXT) AS vector)) > :threshold
    ORDER BY embedding <=> CAST(CAST(:embedding AS TEXT) AS vector)
    LIMIT :top_k
    """
)


@dataclass
class SimilarChunk:
    id: int
    doc_id: str
    chunk_index: int
    content: str
    similarity: float


class ChunkRepository(SQLRepository):

    async def create(self, chunk: DocumentChunk) -> DocumentChunk:
        async with self.session() as session:
            session.add(chunk)
            await session.commit()
            await session.refresh(chunk)
            return chunk

    async def batch_create(self, chunks: Sequence[DocumentChunk], batch_size: int = BATCH_SIZE) -> int:
        """Insert all chunks in one transaction, flushing every ``batch_size`` rows."""
        if not chunks:
            return 0
        async with self.session() as session:
            for i in range(0, len(chunks), batch_size):
                session.add_all(chunks[i:i + batch_size])
                await session.flush()
            await session.commit()
        return len(chunks)

    async def get_by_doc_id(self, doc_id: str) -> List[DocumentChunk]:
        async with self.session() as session:
            result = await session.execute(
                select(DocumentChunk)
                .where(DocumentChunk.doc_id == doc_id)
                .order_by(DocumentChunk.chunk_index)
            )
            return list(result.scalars().all())

    async def delete_by_doc_id(self, doc_id: str) -> int:
        async with self.session() as session:
            result = await session.execute(delete(DocumentChunk).where(DocumentChunk.doc_id == doc_id))
            await session.commit()
            return result.rowcount or 0

    async def search_similar(self, embedding_literal: str, top_k: int, threshold: float) -> List[SimilarChunk]:
        """Top ``top_k`` chunks with cosine similarity strictly above ``threshold``."""
        async with self.session() as session:
            if self.dialect_name(session) != "postgresql":
                raise UnsupportedError("vector search requires PostgreSQL with pgvector")
            result = await session.execute(
                SIMILARITY_SQL,
                {"embedding": embedding_literal, "threshold": threshold, "top_k": top_k},
            )
            return [
                SimilarChunk(
                    id=row.id,
                    doc_id=row.doc_id,
                    chunk_index=row.chunk_index,
                    content=row.content,
                    similarity=float(row.similarity),
                )
                for row in result
            ]
