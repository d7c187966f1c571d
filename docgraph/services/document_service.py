"""Document registry lifecycle: upload, list, delete and (re)process."""

from __future__ import annotations

import asyncio
import hashlib
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from docgraph.config.logger import app_logger
from docgraph.models.document import Document, DocumentChunk, SyncState
from docgraph.rag.processor import DocumentProcessor
from docgraph.repositories.base import MAX_LIMIT
from docgraph.repositories.chunk_repo import ChunkRepository
from docgraph.repositories.document_repo import DocumentRepository
from docgraph.utils.errors import ConflictError, InvalidInputError, NotFoundError, log_errors


def compute_doc_id(file_path: str) -> str:
    return hashlib.md5(file_path.encode("utf-8")).hexdigest()


def _hash_file(path: Path) -> str:
    digest = hashlib.md5()
    with path.open("rb") as handle:
        for block in iter(lambda: handle.read(65536), b""):
            digest.update(block)
    return digest.hexdigest()


async def compute_file_hash(file_path: str) -> str:
    return await asyncio.to_thread(_hash_file, Path(file_path))


class DocumentService:

    def __init__(
        self,
        document_repo: DocumentRepository,
        chunk_repo: ChunkRepository,
        processor: DocumentProcessor,
    ):
        self.document_repo = document_repo
        self.chunk_repo = chunk_repo
        self.processor = processor
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def upload(self, file_path: str, doc_name: Optional[str] = None) -> Document:
        """Register a file. Both sync states start pending; no chunks are written."""
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"file not found: {file_path}", {"file_path": file_path})

        if await self.document_repo.get_by_path(file_path) is not None:
            raise ConflictError(f"document already exists: {file_path}", {"file_path": file_path})

        document = Document(
            doc_id=compute_doc_id(file_path),
            doc_name=doc_name or path.name,
            doc_hash=await compute_file_hash(file_path),
            file_path=file_path,
            file_type=path.suffix.lower(),
            sync_rag_state=SyncState.PENDING,
            sync_entity_state=SyncState.PENDING,
        )
        # A concurrent upload of the same path surfaces as ConflictError from the unique index
        document = await self.document_repo.create(document)
        app_logger.info(f"Document uploaded: {document.doc_id} ({file_path})")
        return document

    async def get(self, doc_id: str) -> Document:
        document = await self.document_repo.get(doc_id)
        if document is None:
            raise NotFoundError(f"document not found: {doc_id}", {"doc_id": doc_id})
        return document

    async def list(self, page: int = 1, per_page: int = 20) -> Tuple[List[Document], int]:
        if page < 1:
            raise InvalidInputError("page must be >= 1", {"page": page})
        if not 1 <= per_page <= MAX_LIMIT:
            raise InvalidInputError(f"per_page must be between 1 and {MAX_LIMIT}", {"per_page": per_page})
        return await self.document_repo.list(offset=(page - 1) * per_page, limit=per_page)

    async def delete(self, doc_id: str) -> None:
        """Remove the document with its chunks and entities. Graph nodes are left alone."""
        if not await self.document_repo.delete_cascade(doc_id):
            raise NotFoundError(f"document not found: {doc_id}", {"doc_id": doc_id})
        self._locks.pop(doc_id, None)
        app_logger.info(f"Document deleted: {doc_id}")

    async def get_chunks(self, doc_id: str) -> List[DocumentChunk]:
        await self.get(doc_id)
        return await self.chunk_repo.get_by_doc_id(doc_id)

    @log_errors
    async def process(self, doc_id: str) -> int:
        """Rebuild the document's chunks; marks RAG sync done only on success."""
        async with self._locks[doc_id]:
            document = await self.get(doc_id)
            # Stays PENDING until the new chunks are stored
            if document.sync_rag_state != SyncState.PENDING:
                await self.document_repo.update_sync_state(doc_id, rag_state=SyncState.PENDING)
            removed = await self.chunk_repo.delete_by_doc_id(doc_id)
            if removed:
                app_logger.info(f"Removed {removed} stale chunks for {doc_id}")

            stored = await self.processor.process(doc_id, document.file_path)
            await self.document_repo.update_sync_state(doc_id, rag_state=SyncState.SYNCED)
            app_logger.info(f"Document processed: {doc_id} ({stored} chunks)")
            return stored
