"""Request and response schemas for knowledge graph endpoints."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from docgraph.models.graph import GraphNode


class RelationshipCreate(BaseModel):
    """Request schema for POST /v1/graph/relationships."""

    type: str = Field(..., min_length=1, description="Relationship type, e.g. REFERENCES or KNOWS")
    from_id: str = Field(..., min_length=1)
    to_id: str = Field(..., min_length=1)
    properties: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "json_schema_extra": {
            "example": {"type": "REFERENCES", "from_id": "doc-a", "to_id": "doc-b", "properties": {"section": "2.1"}}
        }
    }


class NodeOut(BaseModel):
    label: str
    id: str
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_node(cls, node: GraphNode) -> "NodeOut":
        attributes = node.model_dump(mode="json", exclude={"id"})
        return cls(label=node.LABEL, id=node.id, attributes=attributes)


class GraphSyncSummary(BaseModel):
    synced: int
    failed: int
    details: List[Dict[str, Any]] = Field(default_factory=list)
