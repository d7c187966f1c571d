"""Neo4j connection management for the knowledge graph."""

from typing import Any, Dict, List, Optional

from neo4j import AsyncDriver, AsyncGraphDatabase, AsyncManagedTransaction
from neo4j.exceptions import ConstraintError, DriverError, Neo4jError

from docgraph.config.logger import app_logger
from docgraph.config.settings import settings
from docgraph.models.graph import NODE_TYPES
from docgraph.utils.errors import ConflictError, UpstreamError

# Secondary lookup indexes beyond the per-label id constraints
_PROPERTY_INDEXES = (
    ("Document", "file_path"),
    ("Entity", "entity_name"),
    ("Entity", "entity_type"),
    ("Novel", "title"),
    ("Character", "name"),
    ("Location", "name"),
    ("Faction", "name"),
    ("CodeFile", "file_path"),
    ("CodeFile", "project_id"),
    ("Class", "name"),
    ("Function", "name"),
    ("Package", "name"),
    ("KnowledgeDocument", "title"),
    ("Topic", "name"),
    ("Concept", "name"),
    ("KnowledgeEntity", "name"),
)


async def _collect(tx: AsyncManagedTransaction, query: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    result = await tx.run(query, params)
    return await result.data()


class GraphStore:
    """Thin async wrapper around a Neo4j driver returning plain record dicts."""

    def __init__(
        self,
        uri: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        driver: Optional[AsyncDriver] = None,
    ):
        self.database = database or settings.NEO4J_DATABASE
        self.driver = driver or AsyncGraphDatabase.driver(
            uri or settings.NEO4J_URI,
            auth=(username or settings.NEO4J_USERNAME, password or settings.NEO4J_PASSWORD),
            max_connection_pool_size=settings.NEO4J_MAX_POOL_SIZE,
        )

    async def execute_read(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            async with self.driver.session(database=self.database) as session:
                return await session.execute_read(_collect, query, params or {})
        except (Neo4jError, DriverError) as e:
            app_logger.error(f"Neo4j read failed: {e}")
            raise UpstreamError("graph read failed", {"error": str(e)}) from e

    async def execute_write(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        try:
            async with self.driver.session(database=self.database) as session:
                return await session.execute_write(_collect, query, params or {})
        except ConstraintError as e:
            app_logger.warning(f"Neo4j constraint violated: {e}")
            raise ConflictError("graph constraint violated", {"error": str(e)}) from e
        except (Neo4jError, DriverError) as e:
            app_logger.error(f"Neo4j write failed: {e}")
            raise UpstreamError("graph write failed", {"error": str(e)}) from e

    async def verify_connectivity(self) -> tuple[bool, str]:
        try:
            await self.driver.verify_connectivity()
            return True, "Neo4j connection healthy"
        except (Neo4jError, DriverError, OSError) as e:
            return False, f"Neo4j connectivity check failed: {e}"

    async def ensure_schema(self) -> None:
        """Create id uniqueness constraints and lookup indexes (idempotent)."""
        for node_type in NODE_TYPES:
            label = node_type.LABEL
            await self.execute_write(
                f"CREATE CONSTRAINT {label.lower()}_id_unique IF NOT EXISTS "
                f"FOR (n:{label}) REQUIRE n.id IS UNIQUE"
            )
        for label, prop in _PROPERTY_INDEXES:
            await self.execute_write(
                f"CREATE INDEX {label.lower()}_{prop}_idx IF NOT EXISTS FOR (n:{label}) ON (n.{prop})"
            )
        app_logger.info("Neo4j constraints and indexes ensured")

    async def close(self) -> None:
        await self.driver.close()
        app_logger.info("Neo4j driver closed")
