"""Generic CRUD over one node label."""

from datetime import datetime, timezone
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar
from uuid import uuid4

from docgraph.db.graph import GraphStore
from docgraph.models.graph import GraphNode
from docgraph.utils.errors import InvalidInputError, NotFoundError

T = TypeVar("T", bound=GraphNode)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def detach_delete(store: GraphStore, node_id: str, label: Optional[str] = None) -> None:
    """Remove a node and every relationship touching it."""
    pattern = f"(n:{label} {{id: $id}})" if label else "(n {id: $id})"
    records = await store.execute_write(
        f"MATCH {pattern} WITH n, n.id AS node_id DETACH DELETE n RETURN count(node_id) AS deleted",
        {"id": node_id},
    )
    if not records or records[0]["deleted"] == 0:
        raise NotFoundError(f"{label or 'node'} not found: {node_id}", {"id": node_id})


class NodeRepository(Generic[T]):
    """Create / get / update / delete / list for a single GraphNode type."""

    def __init__(self, store: GraphStore, node_type: Type[T]):
        self.store = store
        self.node_type = node_type
        self.label = node_type.LABEL

    async def create(self, node: T) -> T:
        """Create the node; a declared parent must exist and gets linked in the same statement."""
        node.touch_created()
        params: Dict[str, Any] = {"props": node.to_properties()}
        parent = self.node_type.PARENT

        if parent is None:
            query = f"CREATE (n:{self.label}) SET n = $props RETURN n"
        else:
            parent_id = getattr(node, parent.field)
            params.update({"parent_id": parent_id, "rel_id": uuid4().hex, "rel_created_at": _now()})
            query = (
                f"MATCH (p:{parent.label} {{id: $parent_id}}) "
                f"CREATE (p)-[:{parent.rel_type} {{id: $rel_id, created_at: $rel_created_at}}]->(n:{self.label}) "
                "SET n = $props RETURN n"
            )

        records = await self.store.execute_write(query, params)
        if not records:
            raise NotFoundError(
                f"{parent.label} not found: {params['parent_id']}",
                {"label": parent.label, "id": params["parent_id"]},
            )
        return node

    async def upsert(self, node: T) -> T:
        """MERGE on id and overwrite attributes; keeps the first created_at. Parent links are not touched."""
        node.touch_created()
        props = node.to_properties()
        props.pop("id")
        created_at = props.pop("created_at")
        props.pop("updated_at", None)
        await self.store.execute_write(
            f"MERGE (n:{self.label} {{id: $id}}) "
            "ON CREATE SET n.created_at = $created_at "
            "SET n += $props, n.updated_at = $updated_at "
            "RETURN n",
            {"id": node.id, "created_at": created_at, "props": props, "updated_at": _now()},
        )
        return node

    async def get(self, node_id: str) -> T:
        records = await self.store.execute_read(
            f"MATCH (n:{self.label} {{id: $id}}) RETURN n", {"id": node_id}
        )
        if not records:
            raise NotFoundError(f"{self.label} not found: {node_id}", {"label": self.label, "id": node_id})
        return self.node_type.from_properties(records[0]["n"])

    async def update(self, node: T) -> T:
        """Full attribute replace; created_at survives and updated_at is stamped."""
        props = node.to_properties()
        props["updated_at"] = _now()
        records = await self.store.execute_write(
            f"MATCH (n:{self.label} {{id: $id}}) "
            "WITH n, n.created_at AS created_at "
            "SET n = $props "
            "SET n.created_at = coalesce(created_at, $props.created_at) "
            "RETURN n",
            {"id": node.id, "props": props},
        )
        if not records:
            raise NotFoundError(f"{self.label} not found: {node.id}", {"label": self.label, "id": node.id})
        return self.node_type.from_properties(records[0]["n"])

    async def delete(self, node_id: str) -> None:
        await detach_delete(self.store, node_id, self.label)

    async def list(self, limit: int = 20, offset: int = 0, **filters: Any) -> List[T]:
        """Nodes of this label, optionally filtered on exact attribute values."""
        clauses = []
        params: Dict[str, Any] = {"limit": limit, "offset": offset}
        for i, (name, value) in enumerate(sorted(filters.items())):
            if name not in self.node_type.model_fields:
                raise InvalidInputError(f"unknown {self.label} attribute: {name}", {"attribute": name})
            clauses.append(f"n.{name} = $f{i}")
            params[f"f{i}"] = value

        where = f"WHERE {' AND '.join(clauses)} " if clauses else ""
        records = await self.store.execute_read(
            f"MATCH (n:{self.label}) {where}"
            f"RETURN n ORDER BY n.{self.node_type.SORT_KEY}, n.id SKIP $offset LIMIT $limit",
            params,
        )
        return [self.node_type.from_properties(record["n"]) for record in records]
