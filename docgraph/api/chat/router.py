"""Chat message CRUD and similarity search endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docgraph.api.chat.schemas import ChatMessageCreate, ChatMessageOut, ChatSearchRequest
from docgraph.api.dependencies import get_chat_service
from docgraph.services.chat_service import ChatService
from docgraph.utils.responses import PaginatedResponse, SuccessResponse, offset_response, success_response

router = APIRouter(prefix="/v1/chat", tags=["chat"])


@router.post("/messages", response_model=SuccessResponse[ChatMessageOut], status_code=status.HTTP_201_CREATED)
async def create_message(request: ChatMessageCreate, service: ChatService = Depends(get_chat_service)):
    message = await service.create_message(request.role, request.content, request.metadata)
    return success_response(data=ChatMessageOut.from_model(message), message="Message stored successfully")


@router.get("/messages", response_model=PaginatedResponse[ChatMessageOut])
async def list_messages(
    role: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: ChatService = Depends(get_chat_service),
):
    messages, total = await service.list_messages(limit=limit, offset=offset, role=role)
    return offset_response(
        data=[ChatMessageOut.from_model(m) for m in messages],
        offset=offset,
        limit=limit,
        total=total,
        message="Messages retrieved successfully",
    )


@router.get("/messages/{message_id}", response_model=SuccessResponse[ChatMessageOut])
async def get_message(message_id: int, service: ChatService = Depends(get_chat_service)):
    message = await service.get_message(message_id)
    return success_response(data=ChatMessageOut.from_model(message), message="Message retrieved successfully")


@router.delete("/messages/{message_id}", response_model=SuccessResponse[dict])
async def delete_message(message_id: int, service: ChatService = Depends(get_chat_service)):
    await service.delete_message(message_id)
    return success_response(data={"id": message_id, "deleted": True}, message="Message deleted successfully")


@router.post("/search", response_model=SuccessResponse[List[ChatMessageOut]])
async def search_messages(request: ChatSearchRequest, service: ChatService = Depends(get_chat_service)):
    matches = await service.search_similar(request.query, request.top_k)
    return success_response(
        data=[ChatMessageOut.from_model(message, similarity) for message, similarity in matches],
        message="Search completed successfully",
    )
