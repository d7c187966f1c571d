"""Unit tests for the ingestion pipeline."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from docgraph.rag.loaders import LoadedDocument
from docgraph.rag.processor import DocumentProcessor
from docgraph.rag.splitter import TextSplitter
from docgraph.utils.errors import NotFoundError, ProcessingError, UpstreamError


def _chunk_repo():
    repo = MagicMock()
    repo.batch_create = AsyncMock(side_effect=lambda chunks, batch_size=100: len(chunks))
    return repo


def _factory_returning(documents):
    loader = MagicMock()
    loader.load = AsyncMock(return_value=documents)
    factory = MagicMock()
    factory.get_loader.return_value = loader
    return factory


class TestDocumentProcessor:
    """load -> split -> embed -> store."""

    @pytest.mark.asyncio
    async def test_process_stores_embedded_chunks(self, sample_file, embedder):
        chunk_repo = _chunk_repo()
        processor = DocumentProcessor(chunk_repo, embedder, TextSplitter(40, 0))

        stored = await processor.process("doc-1", str(sample_file))

        chunks = chunk_repo.batch_create.await_args.args[0]
        assert stored == len(chunks) > 1
        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
        assert all(c.doc_id == "doc-1" for c in chunks)
        assert all(len(c.embedding) == embedder.dimension for c in chunks)
        assert all(c.meta == {} for c in chunks)
        assert embedder.calls == [[c.content for c in chunks]]

    @pytest.mark.asyncio
    async def test_missing_file_propagates(self, tmp_path, embedder):
        processor = DocumentProcessor(_chunk_repo(), embedder)

        with pytest.raises(NotFoundError):
            await processor.process("doc-1", str(tmp_path / "nope.txt"))

    @pytest.mark.asyncio
    async def test_no_documents_loaded(self, embedder):
        processor = DocumentProcessor(_chunk_repo(), embedder, loader_factory=_factory_returning([]))

        with pytest.raises(ProcessingError, match="no documents loaded"):
            await processor.process("doc-1", "empty.txt")

    @pytest.mark.asyncio
    async def test_no_chunks_created(self, embedder):
        factory = _factory_returning([LoadedDocument(content="   \n  ")])
        processor = DocumentProcessor(_chunk_repo(), embedder, loader_factory=factory)

        with pytest.raises(ProcessingError, match="no chunks created"):
            await processor.process("doc-1", "blank.txt")

    @pytest.mark.asyncio
    async def test_embedder_failure_writes_nothing(self, sample_file):
        chunk_repo = _chunk_repo()
        embedder = MagicMock()
        embedder.embed_texts = AsyncMock(side_effect=RuntimeError("socket closed"))
        processor = DocumentProcessor(chunk_repo, embedder)

        with pytest.raises(UpstreamError, match="failed to embed chunks"):
            await processor.process("doc-1", str(sample_file))
        chunk_repo.batch_create.assert_not_called()

    @pytest.mark.asyncio
    async def test_short_embedding_result_writes_nothing(self, sample_file):
        chunk_repo = _chunk_repo()
        embedder = MagicMock()
        embedder.embed_texts = AsyncMock(return_value=[])
        processor = DocumentProcessor(chunk_repo, embedder)

        with pytest.raises(UpstreamError, match="count mismatch"):
            await processor.process("doc-1", str(sample_file))
        chunk_repo.batch_create.assert_not_called()
