"""Knowledge graph endpoints: typed nodes, relationships, traversals and sync."""

from typing import Any, Dict, List, Optional, Type

from fastapi import APIRouter, Body, Depends, Query, status
from pydantic import ValidationError

from docgraph.api.dependencies import get_graph_sync_service, get_relationship_repository
from docgraph.api.graph.schemas import GraphSyncSummary, NodeOut, RelationshipCreate
from docgraph.config.logger import app_logger
from docgraph.models.graph import NODE_LABELS, GraphNode, Relationship
from docgraph.repositories.graph.nodes import NodeRepository, detach_delete
from docgraph.repositories.graph.relationships import RelationshipRepository
from docgraph.services.graph_sync_service import GraphSyncService
from docgraph.utils.errors import InvalidInputError, NotFoundError
from docgraph.utils.responses import SuccessResponse, success_response

router = APIRouter(prefix="/v1/graph", tags=["graph"])


def _node_type(label: str) -> Type[GraphNode]:
    node_type = NODE_LABELS.get(label)
    if node_type is None:
        raise NotFoundError(f"unknown node label: {label}", {"label": label, "known": sorted(NODE_LABELS)})
    return node_type


def _parse_node(node_type: Type[GraphNode], payload: Dict[str, Any]) -> GraphNode:
    try:
        return node_type.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError(f"invalid {node_type.LABEL} node", {"errors": e.errors(include_url=False, include_context=False, include_input=False)}) from e


@router.post(
    "/labels/{label}/nodes",
    response_model=SuccessResponse[NodeOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_node(
    label: str,
    payload: Dict[str, Any] = Body(...),
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    """Create a node; child labels (Character, Class, ...) are linked to their parent."""
    node_type = _node_type(label)
    node = await NodeRepository(relationships.store, node_type).create(_parse_node(node_type, payload))
    app_logger.info(f"Graph node created: {label} {node.id}")
    return success_response(data=NodeOut.from_node(node), message="Node created successfully")


@router.get("/labels/{label}/nodes", response_model=SuccessResponse[List[NodeOut]])
async def list_nodes(
    label: str,
    limit: int = Query(default=20, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    nodes = await NodeRepository(relationships.store, _node_type(label)).list(limit=limit, offset=offset)
    return success_response(data=[NodeOut.from_node(n) for n in nodes], message="Nodes retrieved successfully")


@router.get("/labels/{label}/nodes/{node_id}", response_model=SuccessResponse[NodeOut])
async def get_node(
    label: str,
    node_id: str,
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    node = await NodeRepository(relationships.store, _node_type(label)).get(node_id)
    return success_response(data=NodeOut.from_node(node), message="Node retrieved successfully")


@router.put("/labels/{label}/nodes/{node_id}", response_model=SuccessResponse[NodeOut])
async def update_node(
    label: str,
    node_id: str,
    payload: Dict[str, Any] = Body(...),
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    """Replace every attribute of the node; created_at is preserved."""
    node_type = _node_type(label)
    node = _parse_node(node_type, {**payload, "id": node_id})
    updated = await NodeRepository(relationships.store, node_type).update(node)
    return success_response(data=NodeOut.from_node(updated), message="Node updated successfully")


@router.delete("/nodes/{node_id}", response_model=SuccessResponse[dict])
async def delete_node(
    node_id: str,
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    """Remove a node of any label together with all of its relationships."""
    await detach_delete(relationships.store, node_id)
    return success_response(data={"id": node_id, "deleted": True}, message="Node deleted successfully")


@router.post(
    "/relationships",
    response_model=SuccessResponse[Relationship],
    status_code=status.HTTP_201_CREATED,
)
async def create_relationship(
    request: RelationshipCreate,
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    relationship = await relationships.create(request.type, request.from_id, request.to_id, request.properties)
    return success_response(data=relationship, message="Relationship created successfully")


@router.delete("/relationships/{rel_id}", response_model=SuccessResponse[dict])
async def delete_relationship(
    rel_id: str,
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    await relationships.delete(rel_id)
    return success_response(data={"id": rel_id, "deleted": True}, message="Relationship deleted successfully")


@router.get("/nodes/{node_id}/relationships", response_model=SuccessResponse[List[Relationship]])
async def list_node_relationships(
    node_id: str,
    direction: str = Query(default="out", pattern="^(in|out)$"),
    rel_type: Optional[str] = Query(default=None, alias="type"),
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    if direction == "in":
        result = await relationships.incoming(node_id, rel_type)
    else:
        result = await relationships.outgoing(node_id, rel_type)
    return success_response(data=result, message="Relationships retrieved successfully")


@router.get("/nodes/{node_id}/related", response_model=SuccessResponse[List[NodeOut]])
async def get_related_nodes(
    node_id: str,
    depth: int = Query(default=2, ge=1, le=10),
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    """Nodes reachable over REFERENCES / RELATED_TO in either direction."""
    nodes = await relationships.get_related(node_id, depth)
    return success_response(data=[NodeOut.from_node(n) for n in nodes], message="Related nodes retrieved successfully")


@router.get("/nodes/{node_id}/dependencies", response_model=SuccessResponse[List[NodeOut]])
async def get_node_dependencies(
    node_id: str,
    min_depth: int = Query(default=1, ge=0, le=10),
    max_depth: int = Query(default=3, ge=0, le=10),
    relationships: RelationshipRepository = Depends(get_relationship_repository),
):
    nodes = await relationships.get_dependencies(node_id, min_depth, max_depth)
    return success_response(data=[NodeOut.from_node(n) for n in nodes], message="Dependencies retrieved successfully")


@router.post("/sync", response_model=SuccessResponse[GraphSyncSummary])
async def sync_pending_documents(
    limit: int = Query(default=100, ge=1, le=1000),
    service: GraphSyncService = Depends(get_graph_sync_service),
):
    """Project every document whose entity sync is pending."""
    summary = await service.sync_pending(limit)
    return success_response(data=GraphSyncSummary(**summary), message="Graph sync completed")
