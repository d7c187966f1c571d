"""Chat message persistence and similarity search."""

from typing import List, Optional, Tuple

from sqlalchemy import func, text
from sqlmodel import select

from docgraph.config.logger import app_logger
from docgraph.models.chat import ChatChunk
from docgraph.repositories.base import SQLRepository
from docgraph.utils.errors import ConflictError, UnsupportedError

SIMILARITY_SQL = text(
    """
    SELECT id, 1 - (embedding <=> CAST(CAST(:embedding AS TEXT) AS vector)) AS similarity
    FROM chat_chunks
    WHERE embedding IS NOT NULL
      AND 1 - (embedding <=> CAST(CAST(:embedding AS TEXT) AS vector)) > :threshold
    ORDER BY embedding <=> CAST(CAST(:embedding AS TEXT) AS vector)
    LIMIT :top_k
    """
)


class ChatRepository(SQLRepository):

    INDEX_ATTEMPTS = 3

    async def _next_index(self, session) -> int:
        current = (await session.execute(select(func.max(ChatChunk.chunk_index)))).scalar()
        return 0 if current is None else current + 1

    async def create(self, message: ChatChunk, assign_index: bool = True) -> ChatChunk:
        """Insert a message; with ``assign_index`` it is numbered after the current last one.

        ``chunk_index`` is unique, so a concurrent writer that took the same index makes the
        insert fail; the index is then re-read and the insert retried.
        """
        attempt = 1
        while True:
            try:
                async with self.session() as session:
                    if assign_index:
                        message.chunk_index = await self._next_index(session)
                    session.add(message)
                    await session.commit()
                    await session.refresh(message)
                    return message
            except ConflictError:
                if not assign_index or attempt >= self.INDEX_ATTEMPTS:
                    raise
                app_logger.warning(f"Chat index {message.chunk_index} taken, retrying (attempt {attempt})")
                attempt += 1

    async def get(self, message_id: int) -> Optional[ChatChunk]:
        async with self.session() as session:
            return await session.get(ChatChunk, message_id)

    async def list(self, limit: int, offset: int, role: Optional[str] = None) -> Tuple[List[ChatChunk], int]:
        async with self.session() as session:
            count_query = select(func.count()).select_from(ChatChunk)
            query = select(ChatChunk)
            if role:
                count_query = count_query.where(ChatChunk.role == role)
                query = query.where(ChatChunk.role == role)
            total = (await session.execute(count_query)).scalar_one()
            result = await session.execute(
                query.order_by(ChatChunk.chunk_index, ChatChunk.id).offset(offset).limit(limit)
            )
            return list(result.scalars().all()), total

    async def delete(self, message_id: int) -> bool:
        async with self.session() as session:
            message = await session.get(ChatChunk, message_id)
            if message is None:
                return False
            await session.delete(message)
            await session.commit()
            return True

    async def search_similar(
        self, embedding_literal: str, top_k: int, threshold: float
    ) -> List[Tuple[ChatChunk, float]]:
        async with self.session() as session:
            if self.dialect_name(session) != "postgresql":
                raise UnsupportedError("vector search requires PostgreSQL with pgvector")
            rows = (
                await session.execute(
                    SIMILARITY_SQL,
                    {"embedding": embedding_literal, "threshold": threshold, "top_k": top_k},
                )
            ).all()
            matches: List[Tuple[ChatChunk, float]] = []
            for row in rows:
                message = await session.get(ChatChunk, row.id)
                if message is not None:
                    matches.append((message, float(row.similarity)))
            return matches
