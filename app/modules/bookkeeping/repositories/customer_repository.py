# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/customer_repository.py

Repositorios para customers y payment_methods.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import Customer, PaymentMethod


class CustomerRepository(BaseRepository[Customer]):
    entity_name = "customer"

    def __init__(self) -> None:
        super().__init__(Customer)

    async def get_by_stripe_customer_id(
        self,
        session: AsyncSession,
        *,
        organization_id: str,
        stripe_customer_id: str,
        livemode: bool,
    ) -> Optional[Customer]:
        """Customer de la organización ya vinculado a un customer de Stripe."""
        stmt = (
            select(Customer)
            .where(
                Customer.organization_id == organization_id,
                Customer.stripe_customer_id == stripe_customer_id,
                Customer.livemode == livemode,
            )
            .order_by(Customer.created_at.asc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()


class PaymentMethodRepository(BaseRepository[PaymentMethod]):
    entity_name = "payment_method"

    def __init__(self) -> None:
        super().__init__(PaymentMethod)

    async def get_by_stripe_payment_method_id(
        self,
        session: AsyncSession,
        stripe_payment_method_id: str,
    ) -> Optional[PaymentMethod]:
        return await self.first_where(session, stripe_payment_method_id=stripe_payment_method_id)

    async def list_for_customer(self, session: AsyncSession, customer_id: str) -> Sequence[PaymentMethod]:
        return await self.select_where(session, customer_id=customer_id)


__all__ = ["CustomerRepository", "PaymentMethodRepository"]
