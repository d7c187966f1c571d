"""File loaders that turn a source file into normalized text documents."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

from docgraph.config.logger import app_logger
from docgraph.utils.errors import EmptyDocumentError, NotFoundError, UnsupportedError


@dataclass
class LoadedDocument:
    """Text content plus source metadata, before or after splitting."""

    content: str
    metadata: Dict[str, Any] = field(default_factory=dict)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return path.read_text(encoding="latin-1")


class TextLoader:
    """Loads a file as plain text."""

    async def load(self, file_path: str) -> List[LoadedDocument]:
        path = Path(file_path)
        if not path.is_file():
            raise NotFoundError(f"file not found: {file_path}", {"file_path": file_path})

        size = await asyncio.to_thread(lambda: path.stat().st_size)
        if size == 0:
            raise EmptyDocumentError(f"file is empty: {file_path}", {"file_path": file_path})

        content = await asyncio.to_thread(_read_text, path)
        app_logger.debug(f"Loaded {len(content)} characters from {file_path}")
        return [LoadedDocument(content=content, metadata=self._metadata(path))]

    def _metadata(self, path: Path) -> Dict[str, Any]:
        return {
            "source": str(path),
            "file_name": path.name,
            "file_type": path.suffix.lower(),
        }


class MarkdownLoader(TextLoader):
    """Loads Markdown as text; the markup is kept verbatim."""

    def _metadata(self, path: Path) -> Dict[str, Any]:
        metadata = super()._metadata(path)
        metadata["format"] = "markdown"
        return metadata


class LoaderFactory:
    """Selects a loader by file extension."""

    MARKDOWN_EXTENSIONS = (".md", ".markdown")

    @classmethod
    def get_loader(cls, file_path: str) -> TextLoader:
        ext = Path(file_path).suffix.lower()
        if ext == ".pdf":
            raise UnsupportedError("PDF loader not implemented yet", {"file_type": ext})
        if ext in cls.MARKDOWN_EXTENSIONS:
            return MarkdownLoader()
        # .txt and unknown extensions are read as plain text
        return TextLoader()
