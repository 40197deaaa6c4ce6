# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/discount_redemption_repository.py

Repositorio para discount_redemptions con upsert por clave natural
(purchase_id, discount_id).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import DiscountRedemption

logger = logging.getLogger(__name__)


class DiscountRedemptionRepository(BaseRepository[DiscountRedemption]):
    entity_name = "discount_redemption"

    def __init__(self) -> None:
        super().__init__(DiscountRedemption)

    async def get_for_purchase_and_discount(
        self,
        session: AsyncSession,
        purchase_id: str,
        discount_id: str,
    ) -> Optional[DiscountRedemption]:
        return await self.first_where(session, purchase_id=purchase_id, discount_id=discount_id)

    async def get_for_subscription(
        self,
        session: AsyncSession,
        subscription_id: str,
    ) -> Optional[DiscountRedemption]:
        return await self.first_where(session, subscription_id=subscription_id)

    async def get_for_purchase(
        self,
        session: AsyncSession,
        purchase_id: str,
    ) -> Optional[DiscountRedemption]:
        return await self.first_where(session, purchase_id=purchase_id)

    async def upsert_for_purchase_and_discount(
        self,
        session: AsyncSession,
        **values: Any,
    ) -> Optional[DiscountRedemption]:
        """
        INSERT ... ON CONFLICT (purchase_id, discount_id) DO NOTHING.

        Returns:
            La redención recién insertada, o None si ya existía (el llamador
            resuelve con get_for_purchase_and_discount).
        """
        inserted = await self.insert_on_conflict_do_nothing(
            session,
            natural_key=("purchase_id", "discount_id"),
            values=values,
        )
        if not inserted:
            logger.info(
                "discount_redemption_exists purchase_id=%s discount_id=%s",
                values.get("purchase_id"),
                values.get("discount_id"),
            )
            return None
        return await self.get_for_purchase_and_discount(
            session, values["purchase_id"], values["discount_id"]
        )


__all__ = ["DiscountRedemptionRepository"]
