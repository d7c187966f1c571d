"""Novel world graph: novels and the characters, places, factions and settings under them."""

from typing import Any, Dict, List, Optional

from docgraph.db.graph import GraphStore
from docgraph.models.graph import (
    CharacterNode,
    FactionNode,
    LocationNode,
    NovelNode,
    NovelRelationship,
    Relationship,
    WorldSettingNode,
)
from docgraph.repositories.graph.nodes import NodeRepository
from docgraph.repositories.graph.relationships import RelationshipRepository, RelType


class NovelGraphRepository:
    """Child nodes are linked to their Novel on create (HAS_CHARACTER, HAS_LOCATION, ...)."""

    def __init__(self, store: GraphStore, relationships: Optional[RelationshipRepository] = None):
        self.store = store
        self.novels = NodeRepository(store, NovelNode)
        self.world_settings = NodeRepository(store, WorldSettingNode)
        self.locations = NodeRepository(store, LocationNode)
        self.characters = NodeRepository(store, CharacterNode)
        self.factions = NodeRepository(store, FactionNode)
        self.relationships = relationships or RelationshipRepository(store)

    async def list_characters(self, novel_id: str, limit: int = 100, offset: int = 0) -> List[CharacterNode]:
        return await self.characters.list(limit=limit, offset=offset, novel_id=novel_id)

    async def list_locations(self, novel_id: str, limit: int = 100, offset: int = 0) -> List[LocationNode]:
        return await self.locations.list(limit=limit, offset=offset, novel_id=novel_id)

    async def relate_characters(
        self,
        from_id: str,
        to_id: str,
        rel_type: RelType = NovelRelationship.KNOWS,
        properties: Optional[Dict[str, Any]] = None,
    ) -> Relationship:
        return await self.relationships.create(
            rel_type, from_id, to_id, properties,
            from_label=CharacterNode.LABEL, to_label=CharacterNode.LABEL,
        )

    async def place_character(self, character_id: str, location_id: str) -> Relationship:
        return await self.relationships.create(
            NovelRelationship.LOCATED_IN, character_id, location_id,
            from_label=CharacterNode.LABEL, to_label=LocationNode.LABEL,
        )

    async def add_member(self, character_id: str, faction_id: str, properties: Optional[Dict[str, Any]] = None) -> Relationship:
        return await self.relationships.create(
            NovelRelationship.MEMBER_OF, character_id, faction_id, properties,
            from_label=CharacterNode.LABEL, to_label=FactionNode.LABEL,
        )

    async def get_character_relationships(self, character_id: str) -> List[Relationship]:
        """Outgoing edges from a character, of every type."""
        return await self.relationships.outgoing(character_id)

    async def delete_relationship(self, rel_id: str) -> None:
        await self.relationships.delete(rel_id)
