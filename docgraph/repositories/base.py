"""Shared session handling and paging rules for the SQL repositories."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docgraph.config.logger import app_logger
from docgraph.utils.errors import ConflictError, InvalidInputError, UpstreamError

DEFAULT_LIMIT = 20
MAX_LIMIT = 100


def normalize_page(limit: Optional[int], offset: Optional[int]) -> Tuple[int, int]:
    """Apply the default limit and reject negative or oversized windows."""
    if limit is None or limit == 0:
        limit = DEFAULT_LIMIT
    offset = offset or 0
    if limit < 0 or offset < 0:
        raise InvalidInputError("limit and offset must not be negative", {"limit": limit, "offset": offset})
    if limit > MAX_LIMIT:
        raise InvalidInputError(f"limit must not exceed {MAX_LIMIT}", {"limit": limit})
    return limit, offset


class SQLRepository:
    """Base class holding the session maker; translates driver errors."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_maker() as session:
            try:
                yield session
            except IntegrityError as e:
                await session.rollback()
                app_logger.warning(f"Integrity violation: {e.orig}")
                raise ConflictError("unique constraint violated", {"error": str(e.orig)}) from e
            except SQLAlchemyError as e:
                await session.rollback()
                app_logger.error(f"Database operation failed: {e}")
                raise UpstreamError("database operation failed", {"error": str(e)}) from e

    @staticmethod
    def dialect_name(session: AsyncSession) -> str:
        return session.bind.dialect.name if session.bind is not None else ""
