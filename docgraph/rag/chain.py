"""Answer synthesis: retrieve context, prompt the chat model, attribute sources."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from docgraph.config.logger import app_logger, log_performance
from docgraph.rag.chat_model import OpenAIChatModel, TokenUsage
from docgraph.rag.retriever import RetrievedChunk, VectorRetriever
from docgraph.repositories.document_repo import DocumentRepository
from docgraph.utils.errors import DocGraphError, InvalidInputError

NO_CONTEXT_ANSWER = (
    "I couldn't find any relevant information in the knowledge base to answer your question."
)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions using only the provided context. "
    "If the context does not contain the information needed to answer, say so clearly "
    "instead of guessing."
)

PROMPT_TEMPLATE = """Answer the question based on the context below.

Context:
{context}

Question: {query}

Answer:"""


@dataclass
class SourceChunk:
    doc_id: str
    doc_name: str
    chunk_index: int
    content: str
    similarity: float


@dataclass
class RAGResponse:
    answer: str
    sources: List[SourceChunk] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)


def build_context(chunks: List[RetrievedChunk]) -> str:
    return "".join(f"[Document {i}]\n{chunk.content}\n\n" for i, chunk in enumerate(chunks, start=1))


def build_prompt(context: str, query: str) -> str:
    return PROMPT_TEMPLATE.format(context=context, query=query)


class RAGChain:

    def __init__(
        self,
        retriever: VectorRetriever,
        chat_model: OpenAIChatModel,
        document_repo: Optional[DocumentRepository] = None,
    ):
        self.retriever = retriever
        self.chat_model = chat_model
        self.document_repo = document_repo

    async def run(self, query: str, top_k: Optional[int] = None) -> RAGResponse:
        if not query or not query.strip():
            raise InvalidInputError("query cannot be empty")
        start_time = time.time()

        chunks = await self.retriever.retrieve(query, top_k=top_k)
        if not chunks:
            app_logger.info("No chunks above threshold; returning fixed answer")
            return RAGResponse(answer=NO_CONTEXT_ANSWER)

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_prompt(build_context(chunks), query)},
        ]
        result = await self.chat_model.generate(messages)

        names = await self._document_names({chunk.doc_id for chunk in chunks})
        sources = [
            SourceChunk(
                doc_id=chunk.doc_id,
                doc_name=names.get(chunk.doc_id, ""),
                chunk_index=chunk.metadata.get("chunk_index", 0),
                content=chunk.content,
                similarity=chunk.similarity,
            )
            for chunk in chunks
        ]

        log_performance("rag_query", time.time() - start_time, sources=len(sources))
        return RAGResponse(answer=result.content, sources=sources, usage=result.usage)

    async def _document_names(self, doc_ids: set) -> Dict[str, str]:
        """Best-effort lookup; a failed or missing lookup leaves the name empty."""
        names: Dict[str, str] = {}
        if self.document_repo is None:
            return names
        for doc_id in doc_ids:
            try:
                document = await self.document_repo.get(doc_id)
            except DocGraphError as e:
                app_logger.warning(f"Source attribution failed for {doc_id}: {e}")
                continue
            if document is not None:
                names[doc_id] = document.doc_name
        return names
