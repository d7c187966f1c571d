"""Core document / entity graph."""

from typing import Any, Dict, List, Optional, Tuple

from docgraph.db.graph import GraphStore
from docgraph.models.graph import DocumentNode, DocumentRelationship, EntityNode
from docgraph.repositories.graph.nodes import NodeRepository
from docgraph.repositories.graph.relationships import RelationshipRepository


class DocumentGraphRepository:

    def __init__(self, store: GraphStore, relationships: Optional[RelationshipRepository] = None):
        self.store = store
        self.documents = NodeRepository(store, DocumentNode)
        self.entities = NodeRepository(store, EntityNode)
        self.relationships = relationships or RelationshipRepository(store)

    async def link_entity(self, doc_id: str, entity_id: str, properties: Optional[Dict[str, Any]] = None):
        """(Document)-[:CONTAINS]->(Entity); repeated calls keep a single edge."""
        return await self.relationships.merge(
            DocumentRelationship.CONTAINS, doc_id, entity_id, properties,
            from_label=DocumentNode.LABEL, to_label=EntityNode.LABEL,
        )

    async def link_similar(self, doc_id: str, other_id: str, score: float):
        return await self.relationships.merge(
            DocumentRelationship.SIMILAR_TO, doc_id, other_id, {"score": float(score)},
            from_label=DocumentNode.LABEL, to_label=DocumentNode.LABEL,
        )

    async def link_reference(self, from_doc_id: str, to_doc_id: str):
        return await self.relationships.create(
            DocumentRelationship.REFERENCES, from_doc_id, to_doc_id,
            from_label=DocumentNode.LABEL, to_label=DocumentNode.LABEL,
        )

    async def find_similar(self, doc_id: str, limit: int = 10) -> List[Tuple[DocumentNode, float]]:
        """Documents joined by SIMILAR_TO in either direction, best score first."""
        records = await self.store.execute_read(
            "MATCH (d:Document {id: $id})-[r:SIMILAR_TO]-(other:Document) "
            "RETURN other, r.score AS score ORDER BY score DESC LIMIT $limit",
            {"id": doc_id, "limit": limit},
        )
        return [(DocumentNode.from_properties(r["other"]), float(r["score"] or 0.0)) for r in records]

    async def get_entities(self, doc_id: str) -> List[EntityNode]:
        records = await self.store.execute_read(
            "MATCH (d:Document {id: $id})-[:CONTAINS]->(e:Entity) RETURN e ORDER BY e.entity_name, e.id",
            {"id": doc_id},
        )
        return [EntityNode.from_properties(r["e"]) for r in records]

    async def get_entity_documents(self, entity_id: str) -> List[DocumentNode]:
        records = await self.store.execute_read(
            "MATCH (d:Document)-[:CONTAINS]->(e:Entity {id: $id}) RETURN d ORDER BY d.created_at DESC",
            {"id": entity_id},
        )
        return [DocumentNode.from_properties(r["d"]) for r in records]

    async def find_entities_by_type(self, entity_type: str, limit: int = 50) -> List[EntityNode]:
        return await self.entities.list(limit=limit, entity_type=entity_type)

    async def find_entities_by_name(self, name: str, limit: int = 50) -> List[EntityNode]:
        records = await self.store.execute_read(
            "MATCH (e:Entity) WHERE toLower(e.entity_name) CONTAINS toLower($name) "
            "RETURN e ORDER BY e.entity_name LIMIT $limit",
            {"name": name, "limit": limit},
        )
        return [EntityNode.from_properties(r["e"]) for r in records]
