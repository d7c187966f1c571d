"""Relational models for the document registry, its chunks and extracted entities."""

from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Dict, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, Column, DateTime, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlmodel import Field, SQLModel

from docgraph.config.settings import settings


def _json_column(name: str = "metadata") -> Column:
    return Column(name, JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncState(IntEnum):
    """Per-store sync flag on a Document."""

    PENDING = 0
    SYNCED = 1
    FAILED = 2  # reserved, never written


class Document(SQLModel, table=True):
    """Registry record for an uploaded source file.

    Tracks whether the file has been projected into the vector store
    (``sync_rag_state``) and into the knowledge graph (``sync_entity_state``).
    """

    __tablename__ = "documents"

    doc_id: str = Field(primary_key=True, max_length=32)
    doc_name: str = Field(max_length=255)
    doc_hash: str = Field(max_length=32, index=True)
    file_path: str = Field(max_length=1024, unique=True, index=True)
    file_type: str = Field(default="", max_length=32)
    sync_rag_state: int = Field(default=SyncState.PENDING, index=True)
    sync_entity_state: int = Field(default=SyncState.PENDING, index=True)
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )


class DocumentChunk(SQLModel, table=True):
    """A contiguous piece of a document with its embedding."""

    __tablename__ = "document_chunks"
    __table_args__ = (UniqueConstraint("doc_id", "chunk_index", name="uq_document_chunks_doc_index"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    doc_id: str = Field(foreign_key="documents.doc_id", index=True, max_length=32)
    chunk_index: int = Field(default=0, ge=0)
    content: str = Field(sa_column=Column(Text, nullable=False))
    embedding: Any = Field(
        default=None,
        sa_column=Column(Vector(settings.EMBEDDING_DIMENSION), nullable=True),
    )
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=_json_column())
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class Entity(SQLModel, table=True):
    """Entity extracted from a document, kept relationally and projected into the graph."""

    __tablename__ = "entities"

    id: Optional[int] = Field(default=None, primary_key=True)
    doc_id: str = Field(foreign_key="documents.doc_id", index=True, max_length=32)
    entity_type: str = Field(max_length=100, index=True)
    entity_name: str = Field(max_length=255, index=True)
    entity_value: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=_json_column())
    created_at: datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
