"""Request and response schemas for chat message endpoints."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from docgraph.models.chat import ChatChunk


class ChatMessageCreate(BaseModel):
    """Request schema for POST /v1/chat/messages."""

    role: str = Field(..., description="user, assistant or system")
    content: str = Field(..., description="Message text")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {"example": {"role": "user", "content": "Summarize the onboarding doc."}}
    }


class ChatMessageOut(BaseModel):
    id: int
    role: str
    chunk_index: int
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
    similarity: Optional[float] = None

    @classmethod
    def from_model(cls, message: ChatChunk, similarity: Optional[float] = None) -> "ChatMessageOut":
        return cls(
            id=message.id,
            role=message.role,
            chunk_index=message.chunk_index,
            content=message.content,
            metadata=message.meta or {},
            created_at=message.created_at,
            similarity=similarity,
        )


class ChatSearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    top_k: Optional[int] = Field(default=None, ge=1, le=50)
