"""Relational entities attached to registered documents."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from docgraph.config.logger import app_logger
from docgraph.models.document import Entity, SyncState
from docgraph.repositories.base import normalize_page
from docgraph.repositories.document_repo import DocumentRepository
from docgraph.repositories.entity_repo import EntityRepository
from docgraph.utils.errors import InvalidInputError, NotFoundError


class EntityService:

    def __init__(self, entity_repo: EntityRepository, document_repo: DocumentRepository):
        self.entity_repo = entity_repo
        self.document_repo = document_repo

    async def add_entities(self, doc_id: str, entities: Sequence[Dict[str, Any]]) -> List[Entity]:
        """Store entities for a document and mark its graph projection stale."""
        if await self.document_repo.get(doc_id) is None:
            raise NotFoundError(f"document not found: {doc_id}", {"doc_id": doc_id})

        rows: List[Entity] = []
        for item in entities:
            entity_type = (item.get("entity_type") or "").strip()
            entity_name = (item.get("entity_name") or "").strip()
            if not entity_type or not entity_name:
                raise InvalidInputError("entity_type and entity_name are required", {"entity": item})
            rows.append(
                Entity(
                    doc_id=doc_id,
                    entity_type=entity_type,
                    entity_name=entity_name,
                    entity_value=item.get("entity_value") or "",
                    meta=item.get("metadata") or {},
                )
            )

        created = await self.entity_repo.batch_create(rows)
        await self.document_repo.update_sync_state(doc_id, entity_state=SyncState.PENDING)
        app_logger.info(f"Added {len(created)} entities to {doc_id}")
        return created

    async def list_by_document(self, doc_id: str) -> List[Entity]:
        return await self.entity_repo.get_by_doc_id(doc_id)

    async def list_by_type(
        self, entity_type: str, offset: Optional[int] = 0, limit: Optional[int] = None
    ) -> Tuple[List[Entity], int]:
        limit, offset = normalize_page(limit, offset)
        return await self.entity_repo.get_by_type(entity_type, offset, limit)

    async def search_by_name(self, name: str, offset: Optional[int] = 0, limit: Optional[int] = None) -> List[Entity]:
        if not name or not name.strip():
            raise InvalidInputError("name cannot be empty")
        limit, offset = normalize_page(limit, offset)
        return await self.entity_repo.search_by_name(name.strip(), offset, limit)
