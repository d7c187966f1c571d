"""Script to register and process documents from the command line."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the parent directory to the path so we can import from docgraph
sys.path.insert(0, str(Path(__file__).parent.parent))

from docgraph.api.dependencies import build_services
from docgraph.db.db import Database
from docgraph.db.graph import GraphStore
from docgraph.services.document_service import compute_doc_id
from docgraph.utils.errors import ConflictError, DocGraphError

SUPPORTED_SUFFIXES = {".txt", ".md", ".markdown"}


def collect_files(target: Path) -> list[Path]:
    if target.is_dir():
        return sorted(p for p in target.rglob("*") if p.is_file() and p.suffix.lower() in SUPPORTED_SUFFIXES)
    return [target]


async def ingest(paths: list[Path], reprocess: bool) -> int:
    """Upload and process each file; returns the number of failures."""
    database = Database()
    await database.init()
    graph_store = GraphStore()
    services = build_services(database, graph_store)
    failures = 0

    try:
        for path in paths:
            file_path = str(path)
            try:
                try:
                    document = await services.documents.upload(file_path)
                    print(f"Uploaded {file_path} as {document.doc_id}")
                except ConflictError:
                    if not reprocess:
                        print(f"Skipping {file_path}: already registered")
                        continue
                    document = await services.documents.get(compute_doc_id(file_path))

                chunks = await services.documents.process(document.doc_id)
                print(f"Processed {file_path}: {chunks} chunks")
            except DocGraphError as e:
                failures += 1
                print(f"Failed {file_path}: {e} {e.details}")
    finally:
        await graph_store.close()
        await database.close()

    return failures


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Register and process documents for RAG")
    parser.add_argument("paths", nargs="+", help="Files or directories to ingest")
    parser.add_argument("--reprocess", action="store_true", help="Re-run processing for already registered files")
    args = parser.parse_args()

    files: list[Path] = []
    for raw in args.paths:
        files.extend(collect_files(Path(raw).resolve()))

    print(f"Ingesting {len(files)} file(s)...")
    failures = await ingest(files, args.reprocess)
    print("Done!" if failures == 0 else f"Done with {failures} failure(s)")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
