"""
Rent The Moment Backend — Database Handle & Session Management
==============================================================

What:  Async SQLAlchemy engine + session factory wrapped in an explicit
       `Database` object, the declarative Base, and the FastAPI session dependency.
Why:   The handle is constructed at startup and injected (via app.state)
       instead of living as an import-time global, so tests and workers can
       build their own and its lifecycle is visible: connect → serve → dispose.
How:   `Database(url)` builds the engine; `connect()` verifies connectivity
       (and optionally creates tables); `dispose()` closes the pool.
       `get_db_session` hands each request its own AsyncSession that
       commits on success and rolls back on error.

Connection Pooling Strategy (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite URLs skip the pool options; in-memory SQLite uses StaticPool so
    every session sees the same database.
"""

import logging
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy import DateTime, text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.pool import StaticPool

from rentmoment.config import settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Registers every model with a single metadata object (used by Alembic
    and by `Database.create_all`).
    """
    pass


class TimestampMixin:
    """Adds created_at / updated_at columns (UTC, timezone aware)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )


# ── Database Handle ───────────────────────────────────────────────────────
class Database:
    """
    Owns the engine and session factory for one database.

    Lifecycle:
        db = Database(settings.database_url)   # no I/O yet
        await db.connect()                     # startup: SELECT 1 (+ create_all)
        async with db.session() as session: ...
        await db.dispose()                     # shutdown: close pooled connections
    """

    def __init__(
        self,
        url: str,
        *,
        pool_size: int = 20,
        max_overflow: int = 10,
        pool_pre_ping: bool = True,
        echo: bool = False,
    ):
        self.url = url
        engine_kwargs: Dict[str, Any] = {"echo": echo}

        if url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if make_url(url).database in (None, "", ":memory:"):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_pre_ping=pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        # expire_on_commit=False: attributes stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls) -> "Database":
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            echo=settings.log_level == "DEBUG",
        )

    async def connect(self, create_tables: bool = False) -> None:
        """Verify connectivity; optionally create missing tables."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            if create_tables:
                # Model modules must be imported so their tables are registered
                import rentmoment.models  # noqa: F401
                await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connected (%s)", self.engine.url.render_as_string(hide_password=True))

    async def create_all(self) -> None:
        import rentmoment.models  # noqa: F401
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        """Lightweight connectivity probe used by the health check."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def dispose(self) -> None:
        """Gracefully close all connections in the pool."""
        await self.engine.dispose()
        logger.info("Database connections closed")


# ── Session Dependency ────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    """Returns the Database handle attached to the app during startup."""
    database: Optional[Database] = getattr(request.app.state, "database", None)
    if database is None:
        raise RuntimeError("Database handle is not initialised on app.state")
    return database


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the app's Database handle
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)
    """
    database = get_database(request)
    async with database.session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
