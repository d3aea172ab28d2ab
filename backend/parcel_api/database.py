"""
Parcel Delivery Backend — Document Store
==========================================

What:  The DocumentStore context (async engine + session factory), the
       object-id helpers, and the per-request session dependency.
How:   One DocumentStore is built in the application lifespan and kept on
       `app.state.store` for the life of the process. Route handlers receive a
       fresh AsyncSession through `get_db_session`, which rolls back on any
       error. Write paths commit with `commit_or_raise` before the response
       is built, so a failed commit is a 500 rather than a sent success.
Who:   Route handlers (via Depends), the lifespan, Alembic, and the tests.

Collections:
    users, riders, parcels, payments, tracking. Each is a table whose rows are
    rendered as JSON documents with a 24-hex-digit `_id` (see models/documents.py).

Transactions:
    Everything a handler writes shares one session and is committed once,
    by the service, after its last write. The rider-acceptance cascade and
    the parcel-paid + payment-insert pair therefore either both land or
    neither does.
"""

import logging
import re
import secrets
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from parcel_api.exceptions import DatabaseError, ValidationError

logger = logging.getLogger(__name__)

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


class Base(DeclarativeBase):
    """Base class for all document tables (shared metadata for Alembic)."""
    pass


# ── Object IDs ────────────────────────────────────────────────────────────

def new_object_id() -> str:
    """
    Generate a 24-character hex identifier.

    Layout: 8 hex digits of the Unix timestamp + 16 random hex digits, so ids
    sort roughly by creation time.
    """
    return f"{int(time.time()):08x}{secrets.token_hex(8)}"


def is_valid_object_id(value: Any) -> bool:
    """True if `value` is a 24-character hexadecimal string."""
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))


def parse_object_id(value: str, resource: str = "document") -> str:
    """
    Validate and normalize an id taken from a path or body.

    Raises ValidationError (→ 400) before any query is issued.
    """
    if not is_valid_object_id(value):
        raise ValidationError(
            message=f"Invalid {resource} ID",
            field="id",
            context={"value": str(value)[:64]},
        )
    return value.lower()


# ── Store Context ─────────────────────────────────────────────────────────

class DocumentStore:
    """
    Owns the async engine and session factory for the process lifetime.

    Args:
        database_url: Async SQLAlchemy URL
        **engine_kwargs: Extra create_async_engine arguments. Pool sizing is
            dropped for SQLite, whose async pool does not take it.
    """

    def __init__(self, database_url: str, **engine_kwargs: Any):
        url = make_url(database_url)
        if url.get_backend_name() == "sqlite":
            for key in ("pool_size", "max_overflow", "pool_recycle"):
                engine_kwargs.pop(key, None)

        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("DocumentStore initialized for backend=%s", url.get_backend_name())

    @classmethod
    def from_settings(cls, settings) -> "DocumentStore":
        """Build the store with the pool configuration from Settings."""
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
            echo=settings.log_level == "DEBUG",
        )

    async def create_all(self) -> None:
        """Create any missing tables (development and tests only)."""
        # Registers the tables on Base.metadata
        from parcel_api.models import documents  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Run SELECT 1; used by the health check."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Close all pooled connections (application shutdown)."""
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self, commit_on_exit: bool = True) -> AsyncGenerator[AsyncSession, None]:
        """
        Open one unit-of-work session.

        On success: commit, unless `commit_on_exit` is False (the caller
        commits itself). On any error: roll back and re-raise, so the global
        handlers still produce the response.
        """
        async with self.session_factory() as session:
            try:
                yield session
                if commit_on_exit:
                    await session.commit()
            except Exception:
                await session.rollback()
                raise


async def commit_or_raise(db: AsyncSession, operation: str) -> None:
    """
    Commit the request's writes before its response is built.

    Raises DatabaseError (→ 500) when the commit fails.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("Commit failed during %s: %s", operation, str(e))
        raise DatabaseError(context={"operation": operation, "step": "commit"})


# ── Dependencies ──────────────────────────────────────────────────────────

def get_store(request: Request) -> DocumentStore:
    """FastAPI dependency returning the DocumentStore attached at startup."""
    return request.app.state.store


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The dependency's exit can run after the response has been sent, so it
    never commits: services call `commit_or_raise` after their last write,
    and anything left uncommitted is discarded when the session closes.

    Example usage in a route:
        @router.get("/parcels/{parcel_id}")
        async def get_parcel(parcel_id: str, db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with get_store(request).session(commit_on_exit=False) as session:
        yield session
