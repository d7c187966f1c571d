"""Request and response schemas for the RAG query endpoint."""

from typing import List, Optional

from pydantic import BaseModel, Field


class QueryRequest(BaseModel):
    """Request schema for POST /v1/query."""

    query: str = Field(..., min_length=1, description="Natural-language question.")
    top_k: Optional[int] = Field(default=None, ge=1, le=50, description="Number of chunks to retrieve.")

    model_config = {
        "json_schema_extra": {"example": {"query": "How do I rotate the API keys?", "top_k": 5}}
    }


class SourceOut(BaseModel):
    doc_id: str
    doc_name: str = ""
    chunk_index: int = 0
    content: str
    similarity: float


class UsageOut(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class QueryResponse(BaseModel):
    answer: str
    sources: List[SourceOut] = Field(default_factory=list)
    usage: UsageOut = Field(default_factory=UsageOut)
