# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/purchase_repository.py

Repositorio para purchases.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import Purchase


class PurchaseRepository(BaseRepository[Purchase]):
    entity_name = "purchase"

    def __init__(self) -> None:
        super().__init__(Purchase)

    async def upsert_by_id(
        self,
        session: AsyncSession,
        purchase_id: str | None,
        **fields: Any,
    ) -> tuple[Purchase, bool]:
        """
        Actualiza el purchase `purchase_id` si existe; si no, lo inserta.

        Returns:
            Tuple de (Purchase, created: bool)
        """
        existing = await self.get(session, purchase_id)
        if existing is not None:
            return await self.update(session, existing, **fields), False
        if purchase_id is not None:
            fields["id"] = purchase_id
        return await self.create(session, **fields), True


__all__ = ["PurchaseRepository"]
