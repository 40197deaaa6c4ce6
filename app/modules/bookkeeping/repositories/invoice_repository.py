# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/invoice_repository.py

Repositorios para invoices e invoice_line_items.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import Invoice, InvoiceLineItem


class InvoiceRepository(BaseRepository[Invoice]):
    entity_name = "invoice"

    def __init__(self) -> None:
        super().__init__(Invoice)

    async def get_by_purchase_id(self, session: AsyncSession, purchase_id: str) -> Optional[Invoice]:
        return await self.first_where(session, purchase_id=purchase_id)

    async def count_for_customer(self, session: AsyncSession, customer_id: str) -> int:
        stmt = select(func.count()).select_from(Invoice).where(Invoice.customer_id == customer_id)
        result = await session.execute(stmt)
        return int(result.scalar_one())


class InvoiceLineItemRepository(BaseRepository[InvoiceLineItem]):
    entity_name = "invoice_line_item"

    def __init__(self) -> None:
        super().__init__(InvoiceLineItem)

    async def list_for_invoice(self, session: AsyncSession, invoice_id: str) -> Sequence[InvoiceLineItem]:
        stmt = (
            select(InvoiceLineItem)
            .where(InvoiceLineItem.invoice_id == invoice_id)
            .order_by(InvoiceLineItem.created_at.asc(), InvoiceLineItem.id.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["InvoiceRepository", "InvoiceLineItemRepository"]
