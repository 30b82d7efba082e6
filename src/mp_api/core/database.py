"""Async database handle and dialect helpers.

Provides an explicitly constructed ``Database`` handle owning the async
engine and session factory. The application lifespan builds one and keeps
it on ``app.state``; CLI commands build their own. Nothing here is held in
module-level state.
"""

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool


class Database:
    """Owner of one async engine and its session factory.

    Args:
        database_url: Async connection string (asyncpg or aiosqlite).
        schema: Optional PostgreSQL schema for isolated environments.
        **kwargs: Additional arguments passed to create_async_engine.
    """

    def __init__(self, database_url: str, *, schema: str | None = None, **kwargs: Any) -> None:
        if schema is not None:
            connect_args = kwargs.pop("connect_args", {})
            if not isinstance(connect_args, dict):
                msg = "connect_args must be a dict"
                raise TypeError(msg)
            connect_args["server_settings"] = {"search_path": f"{schema},public"}
            kwargs["connect_args"] = connect_args
        # Only set pool defaults for connection-pooled engines (not SQLite/StaticPool)
        uses_static_pool = kwargs.get("poolclass") is StaticPool or "sqlite" in database_url
        if not uses_static_pool:
            kwargs.setdefault("pool_size", 10)
            kwargs.setdefault("max_overflow", 5)
        self._engine = create_async_engine(database_url, **kwargs)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "Database":
        """Wrap an existing engine (used by tests with an in-memory database)."""
        database = cls.__new__(cls)
        database._engine = engine
        database._session_factory = async_sessionmaker(engine, expire_on_commit=False)
        return database

    @property
    def engine(self) -> AsyncEngine:
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        return self._session_factory

    def session(self) -> AsyncSession:
        """Open a new session; use as ``async with database.session() as session``."""
        return self._session_factory()

    async def dispose(self) -> None:
        """Dispose of the async engine and release connections."""
        await self._engine.dispose()


def dialect_insert(session: AsyncSession, model: Any) -> Any:
    """Return a dialect-specific INSERT supporting ``ON CONFLICT`` clauses.

    Args:
        session: Session whose bound engine decides the dialect.
        model: ORM model class or table to insert into.

    Returns:
        A PostgreSQL or SQLite ``Insert`` construct.
    """
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "sqlite":
        return sqlite.insert(model)
    return postgresql.insert(model)
