"""Database engine and session factory."""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings


def build_engine(url: str) -> AsyncEngine:
    """Async engine for ``url`` using the configured pool limits."""
    connect_args: dict[str, Any] = {}
    # Transaction-mode poolers (Supavisor) cannot share asyncpg's
    # prepared statements between clients
    if "pooler.supabase.com" in url:
        connect_args["statement_cache_size"] = 0

    return create_async_engine(
        url,
        echo=settings.debug,
        pool_pre_ping=True,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        pool_recycle=settings.database_pool_recycle_seconds,
        connect_args=connect_args,
    )


engine = build_engine(settings.async_database_url)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Session for request handlers that query the database directly (health checks)."""
    async with async_session_factory() as session:
        yield session
