"""Async engine and session factory."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from xenon_gatekeeper.config import settings
from xenon_gatekeeper.storage.filters import TenantSession

engine = create_async_engine(settings.database_url, pool_pre_ping=True)

async_session = async_sessionmaker(
    engine,
    expire_on_commit=False,
    sync_session_class=TenantSession,
)


async def get_session() -> AsyncGenerator[AsyncSession]:
    """FastAPI dependency yielding a tenant-filtered session."""
    async with async_session() as session:
        yield session
