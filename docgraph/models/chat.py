"""Chat message model for persisting conversation turns with optional embeddings."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, Column, DateTime, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from docgraph.config.settings import settings


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatChunk(SQLModel, table=True):
    """A single chat message, independent of any document."""

    __tablename__ = "chat_chunks"

    id: Optional[int] = Field(default=None, primary_key=True)
    role: str = Field(max_length=20, index=True, description="user, assistant or system")
    chunk_index: int = Field(default=0, ge=0, unique=True, index=True)
    content: str = Field(sa_column=Column(Text, nullable=False))
    embedding: Any = Field(
        default=None,
        sa_column=Column(Vector(settings.EMBEDDING_DIMENSION), nullable=True),
    )
    meta: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
