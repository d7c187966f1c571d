"""Document registry persistence."""

from typing import List, Optional, Tuple

from sqlalchemy import delete, func
from sqlmodel import select

from docgraph.models.document import Document, DocumentChunk, Entity, SyncState
from docgraph.repositories.base import SQLRepository


class DocumentRepository(SQLRepository):

    async def create(self, document: Document) -> Document:
        async with self.session() as session:
            session.add(document)
            await session.commit()
            await session.refresh(document)
            return document

    async def get(self, doc_id: str) -> Optional[Document]:
        async with self.session() as session:
            return await session.get(Document, doc_id)

    async def get_by_path(self, file_path: str) -> Optional[Document]:
        async with self.session() as session:
            result = await session.execute(select(Document).where(Document.file_path == file_path))
            return result.scalars().first()

    async def list(self, offset: int, limit: int) -> Tuple[List[Document], int]:
        """Newest first; doc_id breaks ties so paging is stable."""
        async with self.session() as session:
            total = (await session.execute(select(func.count()).select_from(Document))).scalar_one()
            result = await session.execute(
                select(Document)
                .order_by(Document.created_at.desc(), Document.doc_id)
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all()), total

    async def list_by_entity_state(self, state: SyncState, limit: int) -> List[Document]:
        async with self.session() as session:
            result = await session.execute(
                select(Document)
                .where(Document.sync_entity_state == int(state))
                .order_by(Document.created_at, Document.doc_id)
                .limit(limit)
            )
            return list(result.scalars().all())

    async def update(self, document: Document) -> Document:
        async with self.session() as session:
            merged = await session.merge(document)
            await session.commit()
            return merged

    async def update_sync_state(
        self,
        doc_id: str,
        rag_state: Optional[SyncState] = None,
        entity_state: Optional[SyncState] = None,
    ) -> bool:
        async with self.session() as session:
            document = await session.get(Document, doc_id)
            if document is None:
                return False
            if rag_state is not None:
                document.sync_rag_state = int(rag_state)
            if entity_state is not None:
                document.sync_entity_state = int(entity_state)
            session.add(document)
            await session.commit()
            return True

    async def delete_cascade(self, doc_id: str) -> bool:
        """Delete chunks, entities and the document in one transaction."""
        async with self.session() as session:
            document = await session.get(Document, doc_id)
            if document is None:
                return False
            await session.execute(delete(DocumentChunk).where(DocumentChunk.doc_id == doc_id))
            await session.execute(delete(Entity).where(Entity.doc_id == doc_id))
            await session.delete(document)
            await session.commit()
            return True
