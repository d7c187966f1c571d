"""Relational database connection management using SQLModel with asyncpg / aiosqlite."""

import ssl
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from docgraph.config.logger import app_logger
from docgraph.config.settings import settings


def get_db_url(db_url: Optional[str] = None) -> str:
    """Normalize a database URL for SQLAlchemy's async drivers."""
    db_url = db_url if db_url is not None else settings.effective_database_url
    if not db_url:
        raise ValueError("DATABASE_URL not configured")
    if db_url.startswith("sqlite"):
        return db_url

    # asyncpg takes SSL through connect_args, not the URL
    parsed = urlparse(db_url)
    query = urlencode([(k, v) for k, v in parse_qsl(parsed.query) if k != "sslmode"])
    clean_url = urlunparse(
        (parsed.scheme, parsed.netloc, parsed.path, parsed.params, query, parsed.fragment)
    )

    if clean_url.startswith("postgresql://"):
        clean_url = clean_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif clean_url.startswith("postgres://"):
        clean_url = clean_url.replace("postgres://", "postgresql+asyncpg://", 1)

    return clean_url


def _wants_ssl(db_url: str) -> bool:
    return "sslmode=require" in db_url


class Database:
    """Owns the async engine and session maker for one process."""

    def __init__(self, url: Optional[str] = None, pool_size: Optional[int] = None, echo: bool = False):
        raw_url = url if url is not None else settings.effective_database_url
        self.url = get_db_url(raw_url)
        self.is_postgres = self.url.startswith("postgresql+asyncpg://")

        engine_kwargs = {"echo": echo}
        if self.is_postgres:
            engine_kwargs["pool_size"] = pool_size or settings.DB_POOL_SIZE
            engine_kwargs["max_overflow"] = 0
            if _wants_ssl(raw_url):
                ssl_context = ssl.create_default_context()
                ssl_context.check_hostname = False
                ssl_context.verify_mode = ssl.CERT_NONE
                engine_kwargs["connect_args"] = {"ssl": ssl_context}

        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        self.session_maker: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init(self) -> None:
        """Create the vector extension (Postgres) and all tables."""
        # Registers the table models on SQLModel.metadata
        import docgraph.models  # noqa: F401

        app_logger.info("Initializing database connection")
        async with self.engine.begin() as conn:
            if self.is_postgres:
                await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.run_sync(SQLModel.metadata.create_all)
        app_logger.info("Database initialized successfully")

    async def close(self) -> None:
        await self.engine.dispose()
        app_logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_maker() as session:
            yield session

    async def ping(self) -> tuple[bool, str]:
        """Run a lightweight health query against the database."""
        try:
            async with self.session_maker() as session:
                result = await session.execute(text("SELECT 1"))
                row = result.scalar()
                if row == 1:
                    return True, "Database connection healthy"
                return False, f"Unexpected response: {row}"
        except (SQLAlchemyError, OSError) as e:
            return False, f"Database query failed: {e}"
