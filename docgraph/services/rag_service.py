"""Query service wrapping the RAG chain."""

from __future__ import annotations

from typing import Any, Dict, Optional

from docgraph.config.logger import app_logger
from docgraph.rag.chain import RAGChain


class RAGService:

    def __init__(self, chain: RAGChain):
        self.chain = chain

    async def query(self, query: str, top_k: Optional[int] = None) -> Dict[str, Any]:
        app_logger.info(f"RAG query: {query[:100]} (top_k={top_k})")
        response = await self.chain.run(query, top_k=top_k)
        return {
            "answer": response.answer,
            "sources": [
                {
                    "doc_id": source.doc_id,
                    "doc_name": source.doc_name,
                    "chunk_index": source.chunk_index,
                    "content": source.content,
                    "similarity": source.similarity,
                }
                for source in response.sources
            ],
            "usage": {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            },
        }
