"""Chat message persistence with optional embeddings and similarity search."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from docgraph.config.logger import app_logger
from docgraph.config.settings import settings
from docgraph.models.chat import ChatChunk, ChatRole
from docgraph.rag.embedding import OpenAIEmbedder
from docgraph.rag.retriever import DEFAULT_THRESHOLD, DEFAULT_TOP_K
from docgraph.rag.vectors import vector_to_literal
from docgraph.repositories.base import normalize_page
from docgraph.repositories.chat_repo import ChatRepository
from docgraph.utils.errors import InvalidInputError, NotFoundError

VALID_ROLES = {role.value for role in ChatRole}


class ChatService:

    def __init__(
        self,
        chat_repo: ChatRepository,
        embedder: Optional[OpenAIEmbedder] = None,
        embed_messages: Optional[bool] = None,
    ):
        self.chat_repo = chat_repo
        self.embedder = embedder
        self.embed_messages = settings.CHAT_EMBED_MESSAGES if embed_messages is None else embed_messages

    async def create_message(
        self, role: str, content: str, metadata: Optional[Dict[str, Any]] = None
    ) -> ChatChunk:
        if role not in VALID_ROLES:
            raise InvalidInputError(f"invalid role: {role}", {"role": role, "allowed": sorted(VALID_ROLES)})
        if not content or not content.strip():
            raise InvalidInputError("content cannot be empty")

        embedding = None
        if self.embed_messages and self.embedder is not None:
            embedding = await self.embedder.embed_text(content)

        message = ChatChunk(role=role, content=content, embedding=embedding, meta=metadata or {})
        message = await self.chat_repo.create(message)
        app_logger.info(f"Chat message stored: id={message.id} role={role} index={message.chunk_index}")
        return message

    async def get_message(self, message_id: int) -> ChatChunk:
        message = await self.chat_repo.get(message_id)
        if message is None:
            raise NotFoundError(f"chat message not found: {message_id}", {"id": message_id})
        return message

    async def list_messages(
        self, limit: Optional[int] = None, offset: Optional[int] = 0, role: Optional[str] = None
    ) -> Tuple[List[ChatChunk], int]:
        if role is not None and role not in VALID_ROLES:
            raise InvalidInputError(f"invalid role: {role}", {"role": role})
        limit, offset = normalize_page(limit, offset)
        return await self.chat_repo.list(limit, offset, role)

    async def delete_message(self, message_id: int) -> None:
        if not await self.chat_repo.delete(message_id):
            raise NotFoundError(f"chat message not found: {message_id}", {"id": message_id})

    async def search_similar(self, query: str, top_k: Optional[int] = None) -> List[Tuple[ChatChunk, float]]:
        if not query or not query.strip():
            raise InvalidInputError("query cannot be empty")
        if self.embedder is None:
            raise InvalidInputError("chat search requires an embedder")
        top_k = top_k if top_k and top_k > 0 else (settings.RETRIEVER_TOP_K or DEFAULT_TOP_K)
        threshold = settings.RETRIEVER_SIMILARITY_THRESHOLD or DEFAULT_THRESHOLD

        vector = await self.embedder.embed_text(query)
        matches = await self.chat_repo.search_similar(vector_to_literal(vector), top_k, threshold)
        matches = [match for match in matches if match[1] > threshold]
        matches.sort(key=lambda match: match[1], reverse=True)
        return matches[:top_k]
