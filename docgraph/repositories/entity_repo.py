"""Relational entity persistence."""

from typing import List, Sequence, Tuple

from sqlalchemy import delete, func
from sqlmodel import select

from docgraph.models.document import Entity
from docgraph.repositories.base import SQLRepository


class EntityRepository(SQLRepository):

    async def create(self, entity: Entity) -> Entity:
        async with self.session() as session:
            session.add(entity)
            await session.commit()
            await session.refresh(entity)
            return entity

    async def batch_create(self, entities: Sequence[Entity]) -> List[Entity]:
        if not entities:
            return []
        async with self.session() as session:
            session.add_all(entities)
            await session.commit()
            for entity in entities:
                await session.refresh(entity)
        return list(entities)

    async def get_by_doc_id(self, doc_id: str) -> List[Entity]:
        async with self.session() as session:
            result = await session.execute(
                select(Entity).where(Entity.doc_id == doc_id).order_by(Entity.id)
            )
            return list(result.scalars().all())

    async def get_by_type(self, entity_type: str, offset: int, limit: int) -> Tuple[List[Entity], int]:
        async with self.session() as session:
            total = (
                await session.execute(
                    select(func.count()).select_from(Entity).where(Entity.entity_type == entity_type)
                )
            ).scalar_one()
            result = await session.execute(
                select(Entity)
                .where(Entity.entity_type == entity_type)
                .order_by(Entity.created_at.desc(), Entity.id.desc())
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all()), total

    async def search_by_name(self, name: str, offset: int, limit: int) -> List[Entity]:
        """Case-insensitive substring match on entity_name."""
        async with self.session() as session:
            result = await session.execute(
                select(Entity)
                .where(Entity.entity_name.icontains(name, autoescape=True))
                .order_by(Entity.entity_name, Entity.id)
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all())

    async def delete_by_doc_id(self, doc_id: str) -> int:
        async with self.session() as session:
            result = await session.execute(delete(Entity).where(Entity.doc_id == doc_id))
            await session.commit()
            return result.rowcount or 0
