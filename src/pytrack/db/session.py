"""
Database session management for PyTrack.

The engine is created on first use from ``settings.database_url``. Services
never open sessions themselves; callers pass an ``AsyncSession`` in, usually
one obtained from ``get_db_context()``.
"""

import ssl
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from pytrack.core.config import settings

# libpq parameters that asyncpg doesn't accept
LIBPQ_PARAMS = frozenset(
    {
        "sslmode",
        "channel_binding",
        "sslcert",
        "sslkey",
        "sslrootcert",
        "sslcrl",
        "requirepeer",
        "krbsrvname",
        "gsslib",
        "service",
        "target_session_attrs",
        "options",
        "application_name",
    }
)


def _prepare_asyncpg_url(database_url: str) -> tuple[str, dict[str, Any]]:
    """
    Split a libpq-style URL into an asyncpg URL and ``connect_args``.

    ``sslmode`` is translated into asyncpg's ``ssl`` argument; every other
    libpq-only query parameter is dropped.
    """
    parsed = urlparse(database_url)
    query_params = parse_qs(parsed.query)
    sslmode = query_params.get("sslmode", [None])[0]
    for param in LIBPQ_PARAMS:
        query_params.pop(param, None)

    connect_args: dict[str, Any] = {}
    if sslmode in ("require", "verify-ca", "verify-full"):
        ssl_context = ssl.create_default_context()
        if sslmode == "require":
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = ssl_context
    elif sslmode == "prefer":
        connect_args["ssl"] = "prefer"

    clean_url = urlunparse(parsed._replace(query=urlencode(query_params, doseq=True)))
    return clean_url, connect_args


def create_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create an async engine.

    Pooled outside the test environment, NullPool inside it.
    """
    url, connect_args = _prepare_asyncpg_url(database_url or settings.database_url)

    engine_kwargs: dict[str, Any] = {
        "echo": settings.debug and settings.environment == "development",
    }
    if connect_args:
        engine_kwargs["connect_args"] = connect_args

    if settings.environment == "test":
        engine_kwargs["poolclass"] = NullPool
    else:
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )

    return create_async_engine(url, **engine_kwargs)


@lru_cache
def get_engine() -> AsyncEngine:
    return create_engine()


@lru_cache
def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the shared engine."""
    return async_sessionmaker(
        get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Session scope for one comment operation.

    The comment services commit on success; anything left pending when an
    exception escapes is rolled back here.

    Usage:
        async with get_db_context() as db:
            await CommentService().create_comment(db, data, user_id=user_id)
    """
    async with get_sessionmaker()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

