"""RAG query endpoint."""

from fastapi import APIRouter, Depends

from docgraph.api.dependencies import get_rag_service
from docgraph.api.query.schemas import QueryRequest, QueryResponse
from docgraph.services.rag_service import RAGService
from docgraph.utils.responses import SuccessResponse, success_response

router = APIRouter(prefix="/v1", tags=["query"])


@router.post("/query", response_model=SuccessResponse[QueryResponse])
async def query(request: QueryRequest, service: RAGService = Depends(get_rag_service)):
    """Answer a question from the ingested documents.

    Retrieves the most similar chunks, asks the chat model to answer from
    them only, and returns the answer with its sources and token usage.
    """
    result = await service.query(request.query, top_k=request.top_k)
    return success_response(data=QueryResponse(**result), message="Query completed successfully")
