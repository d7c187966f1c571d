"""One relationship repository for every domain vocabulary."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Union
from uuid import uuid4

from docgraph.config.logger import app_logger
from docgraph.db.graph import GraphStore
from docgraph.models.graph import NODE_LABELS, RELATIONSHIP_TYPES, GraphNode, Relationship
from docgraph.utils.errors import InvalidInputError, NotFoundError

MAX_TRAVERSAL_DEPTH = 10

DEPENDENCY_TYPES = ("INHERITS", "IMPLEMENTS", "DEPENDS_ON", "IMPORTS")
RELATED_TYPES = ("REFERENCES", "RELATED_TO")

_RETURN_REL = (
    "RETURN r.id AS id, type(r) AS type, a.id AS from_id, b.id AS to_id, "
    "properties(r) AS properties"
)
_SCALARS = (str, int, float, bool)

RelType = Union[str, Enum]


def _node(var: str, param: str, label: Optional[str] = None) -> str:
    return f"({var}:{label} {{id: ${param}}})" if label else f"({var} {{id: ${param}}})"


def _check_properties(properties: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Relationship properties must be scalars or lists of scalars."""
    properties = dict(properties or {})
    for key, value in properties.items():
        if key in ("id", "created_at"):
            raise InvalidInputError(f"reserved relationship property: {key}", {"property": key})
        if isinstance(value, list):
            ok = all(isinstance(item, _SCALARS) for item in value)
        else:
            ok = value is None or isinstance(value, _SCALARS)
        if not ok:
            raise InvalidInputError(f"unsupported value for relationship property: {key}", {"property": key})
    return properties


def validate_depth(min_depth: int, max_depth: int) -> None:
    if not 0 <= min_depth <= max_depth <= MAX_TRAVERSAL_DEPTH:
        raise InvalidInputError(
            f"depth bounds must satisfy 0 <= min <= max <= {MAX_TRAVERSAL_DEPTH}",
            {"min_depth": min_depth, "max_depth": max_depth},
        )


def node_from_record(props: Dict[str, Any], labels: Iterable[str]) -> Optional[GraphNode]:
    for label in labels:
        node_type = NODE_LABELS.get(label)
        if node_type is not None:
            return node_type.from_properties(props)
    return None


class RelationshipRepository:
    """Typed edges between nodes identified by their ``id`` property."""

    def __init__(self, store: GraphStore):
        self.store = store

    @staticmethod
    def validate_type(rel_type: RelType) -> str:
        value = rel_type.value if isinstance(rel_type, Enum) else str(rel_type)
        if value not in RELATIONSHIP_TYPES:
            raise InvalidInputError(f"unknown relationship type: {value}", {"type": value})
        return value

    @staticmethod
    def _to_relationship(record: Dict[str, Any]) -> Relationship:
        properties = dict(record.get("properties") or {})
        properties.pop("id", None)
        created_at = properties.pop("created_at", None)
        return Relationship(
            id=record["id"],
            type=record["type"],
            from_id=record["from_id"],
            to_id=record["to_id"],
            properties=properties,
            created_at=created_at,
        )

    async def create(
        self,
        rel_type: RelType,
        from_id: str,
        to_id: str,
        properties: Optional[Dict[str, Any]] = None,
        from_label: Optional[str] = None,
        to_label: Optional[str] = None,
    ) -> Relationship:
        """Create an edge; both endpoints must already exist."""
        rel_type = self.validate_type(rel_type)
        records = await self.store.execute_write(
            f"MATCH {_node('a', 'from_id', from_label)} "
            f"MATCH {_node('b', 'to_id', to_label)} "
            f"CREATE (a)-[r:{rel_type}]->(b) "
            "SET r += $properties, r.id = $rel_id, r.created_at = $created_at "
            f"{_RETURN_REL}",
            {
                "from_id": from_id,
                "to_id": to_id,
                "properties": _check_properties(properties),
                "rel_id": uuid4().hex,
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        if not records:
            raise NotFoundError(
                "relationship endpoint not found",
                {"from_id": from_id, "to_id": to_id, "type": rel_type},
            )
        return self._to_relationship(records[0])

    async def merge(
        self,
        rel_type: RelType,
        from_id: str,
        to_id: str,
        properties: Optional[Dict[str, Any]] = None,
        from_label: Optional[str] = None,
        to_label: Optional[str] = None,
    ) -> Relationship:
        """Like create, but at most one edge of this type exists between the pair."""
        rel_type = self.validate_type(rel_type)
        records = await self.store.execute_write(
            f"MATCH {_node('a', 'from_id', from_label)} "
            f"MATCH {_node('b', 'to_id', to_label)} "
            f"MERGE (a)-[r:{rel_type}]->(b) "
            "ON CREATE SET r.id = $rel_id, r.created_at = $created_at "
            "SET r += $properties "
            f"{_RETURN_REL}",
            {
                "from_id": from_id,
                "to_id": to_id,
                "properties": _check_properties(properties),
                "rel_id": uuid4().hex,
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
        )
        if not records:
            raise NotFoundError(
                "relationship endpoint not found",
                {"from_id": from_id, "to_id": to_id, "type": rel_type},
            )
        return self._to_relationship(records[0])

    async def get(self, rel_id: str) -> Relationship:
        records = await self.store.execute_read(
            f"MATCH (a)-[r {{id: $rel_id}}]->(b) {_RETURN_REL}", {"rel_id": rel_id}
        )
        if not records:
            raise NotFoundError(f"relationship not found: {rel_id}", {"id": rel_id})
        return self._to_relationship(records[0])

    async def delete(self, rel_id: str) -> None:
        records = await self.store.execute_write(
            "MATCH ()-[r {id: $rel_id}]->() WITH r, r.id AS rel_id DELETE r RETURN count(rel_id) AS deleted",
            {"rel_id": rel_id},
        )
        if not records or records[0]["deleted"] == 0:
            raise NotFoundError(f"relationship not found: {rel_id}", {"id": rel_id})

    async def delete_between(self, from_id: str, to_id: str, rel_type: Optional[RelType] = None) -> int:
        pattern = f"[r:{self.validate_type(rel_type)}]" if rel_type else "[r]"
        records = await self.store.execute_write(
            f"MATCH (a {{id: $from_id}})-{pattern}->(b {{id: $to_id}}) "
            "WITH r, r.id AS rel_id DELETE r RETURN count(rel_id) AS deleted",
            {"from_id": from_id, "to_id": to_id},
        )
        return records[0]["deleted"] if records else 0

    async def between(self, from_id: str, to_id: str) -> List[Relationship]:
        records = await self.store.execute_read(
            f"MATCH (a {{id: $from_id}})-[r]->(b {{id: $to_id}}) {_RETURN_REL} ORDER BY r.created_at",
            {"from_id": from_id, "to_id": to_id},
        )
        return [self._to_relationship(record) for record in records]

    async def outgoing(self, node_id: str, rel_type: Optional[RelType] = None) -> List[Relationship]:
        pattern = f"[r:{self.validate_type(rel_type)}]" if rel_type else "[r]"
        records = await self.store.execute_read(
            f"MATCH (a {{id: $node_id}})-{pattern}->(b) {_RETURN_REL} ORDER BY r.created_at",
            {"node_id": node_id},
        )
        return [self._to_relationship(record) for record in records]

    async def incoming(self, node_id: str, rel_type: Optional[RelType] = None) -> List[Relationship]:
        pattern = f"[r:{self.validate_type(rel_type)}]" if rel_type else "[r]"
        records = await self.store.execute_read(
            f"MATCH (a)-{pattern}->(b {{id: $node_id}}) {_RETURN_REL} ORDER BY r.created_at",
            {"node_id": node_id},
        )
        return [self._to_relationship(record) for record in records]

    async def traverse(
        self,
        start_id: str,
        rel_types: Iterable[RelType],
        min_depth: int = 1,
        max_depth: int = 1,
        direction: str = "out",
        target_label: Optional[str] = None,
        start_label: Optional[str] = None,
    ) -> List[GraphNode]:
        """Distinct nodes reachable from ``start_id`` over the given types within the depth bounds."""
        validate_depth(min_depth, max_depth)
        types = "|".join(self.validate_type(t) for t in rel_types)
        if not types:
            raise InvalidInputError("at least one relationship type is required")
        hop = f"[:{types}*{min_depth}..{max_depth}]"
        if direction == "out":
            path = f"-{hop}->"
        elif direction == "in":
            path = f"<-{hop}-"
        elif direction == "both":
            path = f"-{hop}-"
        else:
            raise InvalidInputError(f"unknown direction: {direction}", {"direction": direction})
        target = f"(node:{target_label})" if target_label else "(node)"

        records = await self.store.execute_read(
            f"MATCH {_node('start', 'start_id', start_label)}{path}{target} "
            "RETURN DISTINCT node, labels(node) AS labels",
            {"start_id": start_id},
        )
        nodes: List[GraphNode] = []
        for record in records:
            node = node_from_record(record["node"], record["labels"])
            if node is None:
                app_logger.warning(f"Skipping node with unmapped labels {record['labels']}")
                continue
            nodes.append(node)
        return nodes

    async def get_dependencies(self, node_id: str, min_depth: int = 1, max_depth: int = 3) -> List[GraphNode]:
        return await self.traverse(node_id, DEPENDENCY_TYPES, min_depth, max_depth, direction="out")

    async def get_related(self, node_id: str, depth: int = 2) -> List[GraphNode]:
        return await self.traverse(node_id, RELATED_TYPES, 1, depth, direction="both")
