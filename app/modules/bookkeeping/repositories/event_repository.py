# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/event_repository.py

Repositorio para events con inserción idempotente por hash.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import Event


class EventRepository(BaseRepository[Event]):
    entity_name = "event"

    def __init__(self) -> None:
        super().__init__(Event)

    async def insert_if_absent(self, session: AsyncSession, **values: Any) -> bool:
        """
        Inserta el evento salvo que ya exista uno con el mismo hash.

        Returns:
            True si se insertó.
        """
        return await self.insert_on_conflict_do_nothing(
            session,
            natural_key=("hash",),
            values=values,
        )


__all__ = ["EventRepository"]
