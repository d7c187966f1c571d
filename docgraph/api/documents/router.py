"""Document registry, ingestion and entity endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docgraph.api.dependencies import (
    get_document_service,
    get_entity_service,
    get_graph_sync_service,
)
from docgraph.api.documents.schemas import (
    ChunkOut,
    DocumentOut,
    DocumentUploadRequest,
    EntitiesCreateRequest,
    EntityOut,
    GraphSyncResult,
    ProcessResult,
)
from docgraph.config.logger import app_logger
from docgraph.services.document_service import DocumentService
from docgraph.services.entity_service import EntityService
from docgraph.services.graph_sync_service import GraphSyncService
from docgraph.utils.responses import (
    PaginatedResponse,
    SuccessResponse,
    paginated_response,
    success_response,
)

router = APIRouter(prefix="/v1", tags=["documents"])


@router.post(
    "/documents",
    response_model=SuccessResponse[DocumentOut],
    status_code=status.HTTP_201_CREATED,
    summary="Register a document for ingestion",
)
async def upload_document(
    request: DocumentUploadRequest,
    service: DocumentService = Depends(get_document_service),
):
    app_logger.info(f"Document upload request: {request.file_path}")
    document = await service.upload(request.file_path, request.doc_name)
    return success_response(data=DocumentOut.from_model(document), message="Document uploaded successfully")


@router.get("/documents", response_model=PaginatedResponse[DocumentOut])
async def list_documents(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=20, ge=1, le=100),
    service: DocumentService = Depends(get_document_service),
):
    documents, total = await service.list(page, per_page)
    return paginated_response(
        data=[DocumentOut.from_model(d) for d in documents],
        page=page,
        limit=per_page,
        total=total,
        message="Documents retrieved successfully",
    )


@router.get("/documents/{doc_id}", response_model=SuccessResponse[DocumentOut])
async def get_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    document = await service.get(doc_id)
    return success_response(data=DocumentOut.from_model(document), message="Document retrieved successfully")


@router.delete("/documents/{doc_id}", response_model=SuccessResponse[dict])
async def delete_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    """Deletes the document, its chunks and its entities. Graph nodes are kept."""
    await service.delete(doc_id)
    return success_response(data={"doc_id": doc_id, "deleted": True}, message="Document deleted successfully")


@router.post("/documents/{doc_id}/process", response_model=SuccessResponse[ProcessResult])
async def process_document(doc_id: str, service: DocumentService = Depends(get_document_service)):
    """Run load, split, embed and store for the document."""
    app_logger.info(f"Document process request: {doc_id}")
    stored = await service.process(doc_id)
    return success_response(data=ProcessResult(doc_id=doc_id, chunks=stored), message="Document processed successfully")


@router.get("/documents/{doc_id}/chunks", response_model=SuccessResponse[List[ChunkOut]])
async def get_document_chunks(doc_id: str, service: DocumentService = Depends(get_document_service)):
    chunks = await service.get_chunks(doc_id)
    return success_response(data=[ChunkOut.from_model(c) for c in chunks], message="Chunks retrieved successfully")


@router.post(
    "/documents/{doc_id}/entities",
    response_model=SuccessResponse[List[EntityOut]],
    status_code=status.HTTP_201_CREATED,
)
async def add_document_entities(
    doc_id: str,
    request: EntitiesCreateRequest,
    service: EntityService = Depends(get_entity_service),
):
    entities = await service.add_entities(doc_id, [e.model_dump() for e in request.entities])
    return success_response(data=[EntityOut.from_model(e) for e in entities], message="Entities added successfully")


@router.get("/documents/{doc_id}/entities", response_model=SuccessResponse[List[EntityOut]])
async def list_document_entities(doc_id: str, service: EntityService = Depends(get_entity_service)):
    entities = await service.list_by_document(doc_id)
    return success_response(data=[EntityOut.from_model(e) for e in entities], message="Entities retrieved successfully")


@router.get("/entities", response_model=SuccessResponse[List[EntityOut]])
async def find_entities(
    entity_type: Optional[str] = Query(default=None, alias="type"),
    name: Optional[str] = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    service: EntityService = Depends(get_entity_service),
):
    """Filter entities by exact type or by case-insensitive name fragment."""
    if name:
        entities = await service.search_by_name(name, offset, limit)
    elif entity_type:
        entities, _ = await service.list_by_type(entity_type, offset, limit)
    else:
        entities = []
    return success_response(data=[EntityOut.from_model(e) for e in entities], message="Entities retrieved successfully")


@router.post("/documents/{doc_id}/graph-sync", response_model=SuccessResponse[GraphSyncResult])
async def sync_document_graph(doc_id: str, service: GraphSyncService = Depends(get_graph_sync_service)):
    """Project the document and its entities into the knowledge graph."""
    result = await service.sync_document(doc_id)
    return success_response(data=GraphSyncResult(**result), message="Document synced to graph")
