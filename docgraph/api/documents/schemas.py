"""Request and response schemas for document registry and entity endpoints."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from docgraph.models.document import Document, DocumentChunk, Entity


class DocumentUploadRequest(BaseModel):
    """Request schema for POST /v1/documents."""

    file_path: str = Field(..., min_length=1, description="Path of the file on the server.")
    doc_name: Optional[str] = Field(default=None, description="Display name; defaults to the file name.")

    model_config = {
        "json_schema_extra": {
            "example": {"file_path": "/data/docs/handbook.md", "doc_name": "Team handbook"}
        }
    }


class DocumentOut(BaseModel):
    doc_id: str
    doc_name: str
    doc_hash: str
    file_path: str
    file_type: str
    sync_rag_state: int
    sync_entity_state: int
    created_at: datetime

    model_config = {"from_attributes": True}

    @classmethod
    def from_model(cls, document: Document) -> "DocumentOut":
        return cls.model_validate(document)


class ProcessResult(BaseModel):
    doc_id: str
    chunks: int


class ChunkOut(BaseModel):
    id: int
    doc_id: str
    chunk_index: int
    content: str
    created_at: datetime

    @classmethod
    def from_model(cls, chunk: DocumentChunk) -> "ChunkOut":
        return cls(
            id=chunk.id,
            doc_id=chunk.doc_id,
            chunk_index=chunk.chunk_index,
            content=chunk.content,
            created_at=chunk.created_at,
        )


class EntityIn(BaseModel):
    entity_type: str = Field(..., min_length=1)
    entity_name: str = Field(..., min_length=1)
    entity_value: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EntitiesCreateRequest(BaseModel):
    """Request schema for POST /v1/documents/{doc_id}/entities."""

    entities: List[EntityIn] = Field(..., min_length=1)


class EntityOut(BaseModel):
    id: int
    doc_id: str
    entity_type: str
    entity_name: str
    entity_value: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime

    @classmethod
    def from_model(cls, entity: Entity) -> "EntityOut":
        return cls(
            id=entity.id,
            doc_id=entity.doc_id,
            entity_type=entity.entity_type,
            entity_name=entity.entity_name,
            entity_value=entity.entity_value,
            metadata=entity.meta or {},
            created_at=entity.created_at,
        )


class GraphSyncResult(BaseModel):
    doc_id: str
    entities: int
