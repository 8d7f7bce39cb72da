"""Engine and per-request sessions for the directory store."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from app.core.config import Settings, get_settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine; SQLite gets no connection pool sizing."""
    options: dict[str, Any] = {"echo": settings.database_echo}
    if not settings.database_is_sqlite:
        options["pool_size"] = settings.database_pool_size
        options["max_overflow"] = settings.database_max_overflow
        options["pool_pre_ping"] = True
    return create_async_engine(settings.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    # Records stay readable after commit; the service re-reads them to shape responses.
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(get_settings())
async_session_factory = build_session_factory(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields one session per request."""
    async with async_session_factory() as session:
        yield session


async def init_db(bind: AsyncEngine = engine) -> None:
    """Create the ``users`` table if it does not exist."""
    async with bind.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
