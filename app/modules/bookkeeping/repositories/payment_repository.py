# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/payment_repository.py

Repositorio para la tabla payments.

Responsabilidades:
- Pagos exitosos por invoice (decisión de estado de invoice)
- Conteo de pagos exitosos por alcance purchase/subscription (descuentos)

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..enums import PaymentStatus
from ..models import Payment


class PaymentRepository(BaseRepository[Payment]):
    entity_name = "payment"

    def __init__(self) -> None:
        super().__init__(Payment)

    async def list_for_invoice(self, session: AsyncSession, invoice_id: str) -> Sequence[Payment]:
        return await self.select_where(session, invoice_id=invoice_id)

    async def list_succeeded_for_invoice(
        self,
        session: AsyncSession,
        invoice_id: str,
    ) -> Sequence[Payment]:
        return await self.select_where(
            session,
            invoice_id=invoice_id,
            status=PaymentStatus.SUCCEEDED,
        )

    async def count_succeeded_in_scope(
        self,
        session: AsyncSession,
        *,
        purchase_id: str,
        subscription_id: Optional[str],
    ) -> int:
        """
        Cuenta pagos exitosos del purchase; si hay subscription_id, además
        filtra por esa suscripción. Pagos de otros purchases nunca cuentan.
        """
        stmt = (
            select(func.count())
            .select_from(Payment)
            .where(
                Payment.purchase_id == purchase_id,
                Payment.status == PaymentStatus.SUCCEEDED,
            )
        )
        if subscription_id is not None:
            stmt = stmt.where(Payment.subscription_id == subscription_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())


__all__ = ["PaymentRepository"]
