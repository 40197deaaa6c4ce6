# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/fee_calculation_repository.py

Repositorio para fee_calculations.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import FeeCalculation


class FeeCalculationRepository(BaseRepository[FeeCalculation]):
    entity_name = "fee_calculation"

    def __init__(self) -> None:
        super().__init__(FeeCalculation)

    async def get_latest_for_checkout_session(
        self,
        session: AsyncSession,
        checkout_session_id: str,
    ) -> Optional[FeeCalculation]:
        """Snapshot más reciente (por created_at) de la sesión."""
        stmt = (
            select(FeeCalculation)
            .where(FeeCalculation.checkout_session_id == checkout_session_id)
            .order_by(FeeCalculation.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()


__all__ = ["FeeCalculationRepository"]
