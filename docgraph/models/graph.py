"""Knowledge graph node and relationship models.

Every node label has its own pydantic model. Attribute schemas are fixed per
label; anything else goes into ``additional_attributes``, which is stored as a
JSON string property because Neo4j properties cannot hold maps.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, List, NamedTuple, Optional, Tuple, Type

from pydantic import BaseModel, Field


class ParentLink(NamedTuple):
    """Declares that a node is created under a parent: (parent)-[rel_type]->(node)."""

    label: str
    field: str
    rel_type: str


class GraphNode(BaseModel):
    LABEL: ClassVar[str] = ""
    PARENT: ClassVar[Optional[ParentLink]] = None
    SORT_KEY: ClassVar[str] = "id"
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("additional_attributes",)

    id: str = Field(..., min_length=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    additional_attributes: Dict[str, Any] = Field(default_factory=dict)

    def to_properties(self) -> Dict[str, Any]:
        """Flatten the node into Neo4j-storable properties."""
        data = self.model_dump(mode="json")
        for name in self.JSON_FIELDS:
            data[name] = json.dumps(data.get(name) or {})
        return data

    @classmethod
    def from_properties(cls, props: Dict[str, Any]) -> "GraphNode":
        data = dict(props)
        for name in cls.JSON_FIELDS:
            raw = data.get(name)
            if isinstance(raw, str):
                data[name] = json.loads(raw) if raw else {}
        for name in ("created_at", "updated_at"):
            value = data.get(name)
            if hasattr(value, "to_native"):
                data[name] = value.to_native()
        return cls.model_validate(data)

    def touch_created(self) -> None:
        if self.created_at is None:
            self.created_at = datetime.now(timezone.utc)


# ---- Core document schema ----

class DocumentNode(GraphNode):
    LABEL: ClassVar[str] = "Document"
    SORT_KEY: ClassVar[str] = "doc_name"

    doc_name: str = Field(..., min_length=1)
    doc_hash: str = ""
    file_path: str = Field(..., min_length=1)
    file_type: str = ""


class EntityNode(GraphNode):
    LABEL: ClassVar[str] = "Entity"
    SORT_KEY: ClassVar[str] = "entity_name"

    doc_id: Optional[str] = None
    entity_type: str = Field(..., min_length=1)
    entity_name: str = Field(..., min_length=1)
    entity_value: str = ""


# ---- Novel schema ----

class NovelNode(GraphNode):
    LABEL: ClassVar[str] = "Novel"
    SORT_KEY: ClassVar[str] = "title"

    title: str = Field(..., min_length=1)
    author: str = ""
    genre: str = ""
    description: str = ""


class WorldSettingNode(GraphNode):
    LABEL: ClassVar[str] = "WorldSetting"
    PARENT: ClassVar[Optional[ParentLink]] = ParentLink("Novel", "novel_id", "HAS_WORLD_SETTING")
    SORT_KEY: ClassVar[str] = "name"
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("additional_attributes", "rules")

    novel_id: str
    name: str = Field(..., min_length=1)
    type: str = ""  # magic_system, technology, culture
    description: str = ""
    rules: Dict[str, Any] = Field(default_factory=dict)


class LocationNode(GraphNode):
    LABEL: ClassVar[str] = "Location"
    PARENT: ClassVar[Optional[ParentLink]] = ParentLink("Novel", "novel_id", "HAS_LOCATION")
    SORT_KEY: ClassVar[str] = "name"

    novel_id: str
    name: str = Field(..., min_length=1)
    type: str = ""  # city, kingdom, dungeon
    description: str = ""
    coordinates: str = ""


class CharacterNode(GraphNode):
    LABEL: ClassVar[str] = "Character"
    PARENT: ClassVar[Optional[ParentLink]] = ParentLink("Novel", "novel_id", "HAS_CHARACTER")
    SORT_KEY: ClassVar[str] = "name"
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("additional_attributes", "attributes")

    novel_id: str
    name: str = Field(..., min_length=1)
    age: Optional[int] = None
    gender: str = ""
    role: str = ""  # protagonist, antagonist, supporting
    personality: str = ""
    backstory: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)


class FactionNode(GraphNode):
    LABEL: ClassVar[str] = "Faction"
    PARENT: ClassVar[Optional[ParentLink]] = ParentLink("Novel", "novel_id", "HAS_FACTION")
    SORT_KEY: ClassVar[str] = "name"

    novel_id: str
    name: str = Field(..., min_length=1)
    type: str = ""  # guild, kingdom, sect
    description: str = ""
    power: int = 0


# ---- Code schema ----

class CodeFileNode(GraphNode):
    LABEL: ClassVar[str] = "CodeFile"
    SORT_KEY: ClassVar[str] = "file_path"

    project_id: str = ""
    file_path: str = Field(..., min_length=1)
    language: str = ""
    description: str = ""


class ClassNode(GraphNode):
    LABEL: ClassVar[str] = "Class"
    PARENT: ClassVar[Optional[ParentLink]] = ParentLink("CodeFile", "file_id", "CONTAINS_CLASS")
    SORT_KEY: ClassVar[str] = "name"

    file_id: str
    name: str = Field(..., min_length=1)
    type: str = ""  # class, struct, interface
    description: str = ""
    modifiers: List[str] = Field(default_factory=list)


class FunctionNode(GraphNode):
    LABEL: ClassVar[str] = "Function"
    PARENT: ClassVar[Optional[ParentLink]] = ParentLink("CodeFile", "file_id", "CONTAINS_FUNCTION")
    SORT_KEY: ClassVar[str] = "name"
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("additional_attributes", "parameters")

    file_id: str
    class_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    parameters: Dict[str, Any] = Field(default_factory=dict)
    return_type: str = ""
    description: str = ""
    complexity: int = 0


class PackageNode(GraphNode):
    LABEL: ClassVar[str] = "Package"
    SORT_KEY: ClassVar[str] = "name"

    name: str = Field(..., min_length=1)
    version: str = ""
    description: str = ""
    repository: str = ""


# ---- Knowledge schema ----

class KnowledgeDocumentNode(GraphNode):
    LABEL: ClassVar[str] = "KnowledgeDocument"
    SORT_KEY: ClassVar[str] = "title"

    title: str = Field(..., min_length=1)
    category: str = ""
    content: str = ""
    tags: List[str] = Field(default_factory=list)


class TopicNode(GraphNode):
    LABEL: ClassVar[str] = "Topic"
    SORT_KEY: ClassVar[str] = "name"

    name: str = Field(..., min_length=1)
    description: str = ""
    level: int = 0


class ConceptNode(GraphNode):
    LABEL: ClassVar[str] = "Concept"
    SORT_KEY: ClassVar[str] = "name"

    name: str = Field(..., min_length=1)
    definition: str = ""
    examples: List[str] = Field(default_factory=list)


class KnowledgeEntityNode(GraphNode):
    LABEL: ClassVar[str] = "KnowledgeEntity"
    SORT_KEY: ClassVar[str] = "name"
    JSON_FIELDS: ClassVar[Tuple[str, ...]] = ("additional_attributes", "attributes")

    name: str = Field(..., min_length=1)
    type: str = ""  # person, organization, event
    description: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)


NODE_TYPES: Tuple[Type[GraphNode], ...] = (
    DocumentNode,
    EntityNode,
    NovelNode,
    WorldSettingNode,
    LocationNode,
    CharacterNode,
    FactionNode,
    CodeFileNode,
    ClassNode,
    FunctionNode,
    PackageNode,
    KnowledgeDocumentNode,
    TopicNode,
    ConceptNode,
    KnowledgeEntityNode,
)

NODE_LABELS: Dict[str, Type[GraphNode]] = {node_type.LABEL: node_type for node_type in NODE_TYPES}


# ---- Relationship vocabulary ----

class DocumentRelationship(str, Enum):
    CONTAINS = "CONTAINS"
    REFERENCES = "REFERENCES"
    SIMILAR_TO = "SIMILAR_TO"
    MENTIONED_IN = "MENTIONED_IN"
    RELATED_TO = "RELATED_TO"
    DERIVED_FROM = "DERIVED_FROM"
    PART_OF = "PART_OF"


class NovelRelationship(str, Enum):
    HAS_WORLD_SETTING = "HAS_WORLD_SETTING"
    HAS_LOCATION = "HAS_LOCATION"
    HAS_CHARACTER = "HAS_CHARACTER"
    HAS_FACTION = "HAS_FACTION"
    LOCATED_IN = "LOCATED_IN"
    KNOWS = "KNOWS"
    ENEMY_OF = "ENEMY_OF"
    MEMBER_OF = "MEMBER_OF"
    CONTAINS = "CONTAINS"
    CONTROLS = "CONTROLS"


class CodeRelationship(str, Enum):
    CONTAINS_CLASS = "CONTAINS_CLASS"
    CONTAINS_FUNCTION = "CONTAINS_FUNCTION"
    INHERITS = "INHERITS"
    IMPLEMENTS = "IMPLEMENTS"
    CALLS = "CALLS"
    IMPORTS = "IMPORTS"
    DEPENDS_ON = "DEPENDS_ON"


class KnowledgeRelationship(str, Enum):
    COVERS = "COVERS"
    REFERENCES = "REFERENCES"
    CONTAINS = "CONTAINS"
    RELATED_TO = "RELATED_TO"
    BELONGS_TO = "BELONGS_TO"
    DERIVED_FROM = "DERIVED_FROM"
    MENTIONED_IN = "MENTIONED_IN"


RELATIONSHIP_TYPES: frozenset = frozenset(
    member.value
    for vocabulary in (DocumentRelationship, NovelRelationship, CodeRelationship, KnowledgeRelationship)
    for member in vocabulary
)


class Relationship(BaseModel):
    """A typed, directed edge between two nodes identified by their ``id`` property."""

    id: str
    type: str
    from_id: str
    to_id: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
