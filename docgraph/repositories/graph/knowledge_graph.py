"""General knowledge base graph: documents, topics, concepts and entities."""

from typing import List, Optional

from docgraph.db.graph import GraphStore
from docgraph.models.graph import (
    ConceptNode,
    KnowledgeDocumentNode,
    KnowledgeEntityNode,
    KnowledgeRelationship,
    Relationship,
    TopicNode,
)
from docgraph.repositories.graph.nodes import NodeRepository
from docgraph.repositories.graph.relationships import RelationshipRepository

TOPIC_HIERARCHY_DEPTH = 5


class KnowledgeGraphRepository:

    def __init__(self, store: GraphStore, relationships: Optional[RelationshipRepository] = None):
        self.store = store
        self.documents = NodeRepository(store, KnowledgeDocumentNode)
        self.topics = NodeRepository(store, TopicNode)
        self.concepts = NodeRepository(store, ConceptNode)
        self.entities = NodeRepository(store, KnowledgeEntityNode)
        self.relationships = relationships or RelationshipRepository(store)

    async def search_documents(self, keyword: str, limit: int = 20) -> List[KnowledgeDocumentNode]:
        """Title or content contains ``keyword`` (case-insensitive)."""
        records = await self.store.execute_read(
            "MATCH (d:KnowledgeDocument) "
            "WHERE toLower(d.title) CONTAINS toLower($keyword) "
            "OR toLower(d.content) CONTAINS toLower($keyword) "
            "RETURN d ORDER BY d.title, d.id LIMIT $limit",
            {"keyword": keyword, "limit": limit},
        )
        return [KnowledgeDocumentNode.from_properties(r["d"]) for r in records]

    async def link_document_to_topic(self, doc_id: str, topic_id: str) -> Relationship:
        return await self.relationships.create(
            KnowledgeRelationship.COVERS, doc_id, topic_id,
            from_label=KnowledgeDocumentNode.LABEL, to_label=TopicNode.LABEL,
        )

    async def link_concept_to_topic(self, concept_id: str, topic_id: str) -> Relationship:
        return await self.relationships.create(
            KnowledgeRelationship.BELONGS_TO, concept_id, topic_id,
            from_label=ConceptNode.LABEL, to_label=TopicNode.LABEL,
        )

    async def add_subtopic(self, parent_id: str, child_id: str) -> Relationship:
        return await self.relationships.create(
            KnowledgeRelationship.CONTAINS, parent_id, child_id,
            from_label=TopicNode.LABEL, to_label=TopicNode.LABEL,
        )

    async def get_topic_hierarchy(self, root_id: str) -> List[TopicNode]:
        """The root topic and every topic under it, up to five CONTAINS hops."""
        nodes = await self.relationships.traverse(
            root_id,
            (KnowledgeRelationship.CONTAINS,),
            0,
            TOPIC_HIERARCHY_DEPTH,
            direction="out",
            target_label=TopicNode.LABEL,
            start_label=TopicNode.LABEL,
        )
        return [node for node in nodes if isinstance(node, TopicNode)]

    async def get_related_documents(self, doc_id: str, depth: int = 2) -> List[KnowledgeDocumentNode]:
        nodes = await self.relationships.traverse(
            doc_id,
            (KnowledgeRelationship.REFERENCES, KnowledgeRelationship.RELATED_TO),
            1,
            depth,
            direction="both",
            target_label=KnowledgeDocumentNode.LABEL,
            start_label=KnowledgeDocumentNode.LABEL,
        )
        return [node for node in nodes if isinstance(node, KnowledgeDocumentNode) and node.id != doc_id]
