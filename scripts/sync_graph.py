"""Script to create the Neo4j schema and project pending documents into the graph."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add the parent directory to the path so we can import from docgraph
sys.path.insert(0, str(Path(__file__).parent.parent))

from docgraph.api.dependencies import build_services
from docgraph.db.db import Database
from docgraph.db.graph import GraphStore


async def sync_graph(limit: int, schema_only: bool) -> int:
    database = Database()
    await database.init()
    graph_store = GraphStore()

    try:
        await graph_store.ensure_schema()
        print("Neo4j constraints and indexes are in place")
        if schema_only:
            return 0

        services = build_services(database, graph_store)
        summary = await services.graph_sync.sync_pending(limit)
        print("=" * 50)
        print(f"Synced: {summary['synced']}")
        print(f"Failed: {summary['failed']}")
        for detail in summary["details"]:
            if detail["status"] == "failed":
                print(f"  {detail['doc_id']}: {detail['error']}")
        print("=" * 50)
        return 1 if summary["failed"] else 0
    finally:
        await graph_store.close()
        await database.close()


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Sync pending documents into the knowledge graph")
    parser.add_argument("--limit", type=int, default=100, help="Maximum documents to sync")
    parser.add_argument("--schema-only", action="store_true", help="Only create constraints and indexes")
    args = parser.parse_args()
    return await sync_graph(args.limit, args.schema_only)


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
