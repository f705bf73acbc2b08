"""
Database Engine and Sessions.

The async engine is built on first use, so importing this module never
needs config/.env. One request maps to one session and one transaction.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from snack.backend.core.logging import get_logger

logger = get_logger(__name__)


class _EngineState:
    engine: AsyncEngine | None = None
    sessions: async_sessionmaker[AsyncSession] | None = None


def _build_engine() -> AsyncEngine:
    from snack.backend.core.config import get_app_config, get_database_url

    db = get_app_config().database
    url = get_database_url()
    options = {"echo": db.echo, "echo_pool": db.echo_pool}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )

    engine = create_async_engine(url, **options)
    logger.debug("Database engine created", extra={"dialect": engine.dialect.name})
    return engine


def get_engine() -> AsyncEngine:
    if _EngineState.engine is None:
        _EngineState.engine = _build_engine()
    return _EngineState.engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _EngineState.sessions is None:
        _EngineState.sessions = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _EngineState.sessions


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: commit when the handler returns, roll back if it raises."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        else:
            await session.commit()


async def dispose_engine() -> None:
    engine, _EngineState.engine, _EngineState.sessions = _EngineState.engine, None, None
    if engine is not None:
        await engine.dispose()
        logger.debug("Database engine disposed")
