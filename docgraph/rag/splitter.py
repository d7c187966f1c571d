"""Boundary-aware, overlapping text splitter."""

from __future__ import annotations

from typing import Iterable, List

from docgraph.rag.loaders import LoadedDocument

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200

SENTENCE_TERMINATORS = ".!?\n"
SENTENCE_LOOKBACK = 100
WHITESPACE_LOOKBACK = 50


class TextSplitter:
    """Cut text into windows of at most ``chunk_size`` characters.

    Each cut is pulled back to just after the nearest sentence terminator
    within the last 100 characters, otherwise onto the nearest whitespace
    within the last 50, otherwise it stays a hard cut. Consecutive windows
    overlap by ``chunk_overlap`` characters when the window allows it.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, chunk_overlap: int = DEFAULT_CHUNK_OVERLAP):
        if chunk_size <= 0:
            chunk_size = DEFAULT_CHUNK_SIZE
        if chunk_overlap < 0:
            chunk_overlap = 0
        if chunk_overlap >= chunk_size:
            chunk_overlap = chunk_size // 4
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split_text(self, text: str) -> List[str]:
        """Raw windows over ``text``; consecutive windows leave no gaps."""
        if not text:
            return []
        length = len(text)
        if length <= self.chunk_size:
            return [text]

        pieces: List[str] = []
        start = 0
        while start < length:
            end = min(start + self.chunk_size, length)
            if end < length:
                end = self._find_break(text, start, end)
            pieces.append(text[start:end])
            if end >= length:
                break

            next_start = max(end - self.chunk_overlap, 0)
            if next_start <= start:
                next_start = end
            start = next_start
        return pieces

    def _find_break(self, text: str, start: int, end: int) -> int:
        floor = max(start, end - SENTENCE_LOOKBACK)
        for i in range(end - 1, floor - 1, -1):
            if text[i] in SENTENCE_TERMINATORS:
                return i + 1

        # A break at start itself would leave an empty window
        floor = max(start + 1, end - WHITESPACE_LOOKBACK)
        for i in range(end - 1, floor - 1, -1):
            if text[i].isspace():
                return i
        return end

    def transform(self, document: LoadedDocument, first_index: int = 0) -> List[LoadedDocument]:
        chunks: List[LoadedDocument] = []
        index = first_index
        for piece in self.split_text(document.content):
            content = piece.strip()
            if not content:
                continue
            metadata = dict(document.metadata)
            metadata["chunk_index"] = index
            metadata["chunk_size"] = len(content)
            chunks.append(LoadedDocument(content=content, metadata=metadata))
            index += 1
        return chunks

    def split_documents(self, documents: Iterable[LoadedDocument]) -> List[LoadedDocument]:
        """Split each document; chunk indices run sequentially over the whole output."""
        chunks: List[LoadedDocument] = []
        for document in documents:
            chunks.extend(self.transform(document, first_index=len(chunks)))
        return chunks
