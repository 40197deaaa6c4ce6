# -*- coding: utf-8 -*-
"""
backend/app/shared/database/repository.py

Repositorio base para operaciones async con SQLAlchemy.

La sesión (transacción) se recibe siempre como primer argumento; los
repositorios no guardan estado de conexión.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Generic, Mapping, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")  # modelo ORM


class BaseRepository(Generic[T]):
    """Repositorio asincrónico base para CRUD común."""

    #: Nombre legible para errores NotFound
    entity_name: str = "record"

    def __init__(self, model: Type[T]):
        self.model = model

    # -------------------------------------------------------------
    # Lecturas
    # -------------------------------------------------------------
    async def get(self, session: AsyncSession, obj_id: Any) -> Optional[T]:
        if obj_id is None:
            return None
        return await session.get(self.model, obj_id)

    async def get_or_raise(self, session: AsyncSession, obj_id: Any) -> T:
        from app.modules.bookkeeping.errors import NotFoundError

        obj = await self.get(session, obj_id)
        if obj is None:
            raise NotFoundError(self.entity_name, obj_id)
        return obj

    async def select_where(self, session: AsyncSession, *criteria: Any, **filters: Any) -> Sequence[T]:
        stmt = select(self.model).where(*criteria).filter_by(**filters)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def first_where(self, session: AsyncSession, *criteria: Any, **filters: Any) -> Optional[T]:
        stmt = select(self.model).where(*criteria).filter_by(**filters).limit(1)
        result = await session.execute(stmt)
        return result.scalars().first()

    # -------------------------------------------------------------
    # Escrituras
    # -------------------------------------------------------------
    async def create(self, session: AsyncSession, **kwargs: Any) -> T:
        obj = self.model(**kwargs)
        session.add(obj)
        await session.flush()
        return obj

    async def update(self, session: AsyncSession, obj: T, **fields: Any) -> T:
        for key, value in fields.items():
            if not hasattr(obj, key):
                raise AttributeError(f"{type(obj).__name__} has no attribute {key!r}")
            setattr(obj, key, value)
        await session.flush()
        return obj

    async def update_by_id(self, session: AsyncSession, obj_id: Any, **fields: Any) -> T:
        obj = await self.get_or_raise(session, obj_id)
        return await self.update(session, obj, **fields)

    async def insert_on_conflict_do_nothing(
        self,
        session: AsyncSession,
        *,
        natural_key: Sequence[str],
        values: Mapping[str, Any],
    ) -> bool:
        """
        INSERT ... ON CONFLICT (natural_key) DO NOTHING.

        Returns:
            True si se insertó una fila nueva, False si ya existía.
        """
        connection = await session.connection()
        dialect = connection.dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(self.model)
        elif dialect == "sqlite":
            stmt = sqlite_insert(self.model)
        else:
            raise NotImplementedError(f"upsert not supported for dialect {dialect!r}")

        # Los defaults de columna (ids, timestamps) los aplica Core
        stmt = stmt.values(**dict(values)).on_conflict_do_nothing(index_elements=list(natural_key))
        # Core sobre la conexión de la sesión (misma transacción)
        result = await connection.execute(stmt)
        return bool(result.rowcount)

# Fin del archivo backend/app/shared/database/repository.py
