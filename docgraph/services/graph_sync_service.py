"""Projects registered documents and their relational entities into the knowledge graph."""

from __future__ import annotations

import time
from typing import Any, Dict

from docgraph.config.logger import app_logger, log_performance
from docgraph.models.document import SyncState
from docgraph.models.graph import DocumentNode, EntityNode
from docgraph.repositories.document_repo import DocumentRepository
from docgraph.repositories.entity_repo import EntityRepository
from docgraph.repositories.graph.document_graph import DocumentGraphRepository
from docgraph.utils.errors import DocGraphError, NotFoundError, log_errors


def graph_entity_id(doc_id: str, entity_id: int) -> str:
    return f"{doc_id}:{entity_id}"


class GraphSyncService:
    """Idempotent: re-running a sync MERGEs the same nodes and edges."""

    def __init__(
        self,
        document_repo: DocumentRepository,
        entity_repo: EntityRepository,
        document_graph: DocumentGraphRepository,
    ):
        self.document_repo = document_repo
        self.entity_repo = entity_repo
        self.document_graph = document_graph

    @log_errors
    async def sync_document(self, doc_id: str) -> Dict[str, Any]:
        document = await self.document_repo.get(doc_id)
        if document is None:
            raise NotFoundError(f"document not found: {doc_id}", {"doc_id": doc_id})

        await self.document_graph.documents.upsert(
            DocumentNode(
                id=document.doc_id,
                doc_name=document.doc_name,
                doc_hash=document.doc_hash,
                file_path=document.file_path,
                file_type=document.file_type,
                created_at=document.created_at,
            )
        )

        entities = await self.entity_repo.get_by_doc_id(doc_id)
        for entity in entities:
            node_id = graph_entity_id(doc_id, entity.id)
            await self.document_graph.entities.upsert(
                EntityNode(
                    id=node_id,
                    doc_id=doc_id,
                    entity_type=entity.entity_type,
                    entity_name=entity.entity_name,
                    entity_value=entity.entity_value,
                    additional_attributes=entity.meta or {},
                    created_at=entity.created_at,
                )
            )
            await self.document_graph.link_entity(doc_id, node_id)

        await self.document_repo.update_sync_state(doc_id, entity_state=SyncState.SYNCED)
        app_logger.info(f"Graph sync complete for {doc_id}: {len(entities)} entities")
        return {"doc_id": doc_id, "entities": len(entities)}

    async def sync_pending(self, limit: int = 100) -> Dict[str, Any]:
        """Sync every document whose entity state is pending; failures stay pending."""
        start_time = time.time()
        documents = await self.document_repo.list_by_entity_state(SyncState.PENDING, limit)
        summary: Dict[str, Any] = {"synced": 0, "failed": 0, "details": []}

        for document in documents:
            try:
                result = await self.sync_document(document.doc_id)
            except DocGraphError as e:
                summary["failed"] += 1
                summary["details"].append({"doc_id": document.doc_id, "status": "failed", "error": str(e)})
                continue
            summary["synced"] += 1
            summary["details"].append({"status": "synced", **result})

        log_performance("graph_sync", time.time() - start_time, synced=summary["synced"], failed=summary["failed"])
        app_logger.info(f"Graph sync summary: synced={summary['synced']} failed={summary['failed']}")
        return summary
