"""Models module - imports all table models for SQLModel registration."""

from docgraph.models.document import Document, DocumentChunk, Entity, SyncState
from docgraph.models.chat import ChatChunk, ChatRole

__all__ = [
    "Document",
    "DocumentChunk",
    "Entity",
    "SyncState",
    "ChatChunk",
    "ChatRole",
]
