# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

Engine async de SQLAlchemy y fábrica de sesiones.

Provee:
- build_engine(url): engine async (asyncpg en producción, aiosqlite en tests)
- build_session_factory(engine): async_sessionmaker configurado
- get_engine() / get_session_factory(): singletons perezosos desde BillingSettings
- session_scope(): context manager reutilizable en scripts/tests

Notas:
- expire_on_commit=False: los resultados devueltos tras commit siguen legibles.
- autoflush=False: los repositorios hacen flush explícito tras cada escritura.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.shared.config import get_billing_settings

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def build_engine(url: str, *, echo: bool = False) -> AsyncEngine:
    """
    Crea un engine async.

    En PostgreSQL se usa NullPool (el pooling lo hace PgBouncer) y se
    desactiva el statement cache de asyncpg.
    """
    if url.startswith("postgresql+asyncpg"):
        return create_async_engine(
            url,
            poolclass=NullPool,
            echo=echo,
            connect_args={"statement_cache_size": 0},
        )
    return create_async_engine(url, echo=echo)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_billing_settings()
        _engine = build_engine(settings.db_url, echo=settings.db_echo_sql)
        logger.info("[DB] engine created dialect=%s", _engine.dialect.name)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory


# ── Context manager reutilizable en scripts/tests
@asynccontextmanager
async def session_scope(
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> AsyncGenerator[AsyncSession, None]:
    factory = session_factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
            # Dejo el commit al que use el scope; esto es solo un helper
        finally:
            if session.in_transaction():
                await session.rollback()


__all__ = [
    "build_engine",
    "build_session_factory",
    "get_engine",
    "get_session_factory",
    "session_scope",
]
# Fin del archivo backend/app/shared/database/database.py
