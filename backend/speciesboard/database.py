"""
SpeciesBoard Backend — Database Handle & Session Management
===========================================================

What:  Async SQLAlchemy engine wrapper, declarative base, and FastAPI dependency.
How:   A `Database` object owns the engine (and therefore the connection pool)
       and a session factory. It is constructed explicitly by the application
       lifespan, or handed to create_app() by tests, and stored on
       `app.state.database`. Route handlers receive a session per request
       through `get_db_session`, which commits on success and rolls back on
       error.
Who:   Used by route handlers via FastAPI's dependency injection system.

Connection Pooling (Postgres):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    See Settings.engine_options().
"""

from typing import Any, AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from speciesboard.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    The tables themselves are owned by the store; `Base.metadata` is only
    used to create throwaway schemas in tests.
    """
    pass


class Database:
    """
    Process-scoped handle around one async engine and its session factory.

    Lifecycle:
        1. Created once at startup (Database.from_settings()) or by a test
        2. Stored on app.state.database
        3. session() opens one AsyncSession per request
        4. dispose() closes every pooled connection at shutdown

    expire_on_commit=False keeps returned attributes readable after the
    dependency commits.
    """

    def __init__(self, url: str, **engine_options: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, **engine_options)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Database":
        config = config or default_settings
        return cls(config.database_url, **config.engine_options())

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def ping(self) -> None:
        """Executes SELECT 1; raises whatever the driver raises."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """Creates every mapped table. Used by tests against SQLite."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Looks up the Database handle on request.app.state
        2. Opens a session and yields it to the route handler
        3. On success: commits whatever is still pending
        4. On error: rolls back and re-raises for the exception handlers
        5. Always: closes the session (returns the connection to the pool)

    Service writes commit themselves before returning. Teardown of a yield
    dependency can run after the response has been sent, so a failure in
    step 3 would never reach the client.

    Example usage in a route:
        @router.get("/top3")
        async def top3(db: AsyncSession = Depends(get_db_session)):
            return await player_service.top_players(db)
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
