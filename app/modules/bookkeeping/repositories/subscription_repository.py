# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/subscription_repository.py

Repositorios para subscriptions y billing_periods.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import BillingPeriod, Subscription


class SubscriptionRepository(BaseRepository[Subscription]):
    entity_name = "subscription"

    def __init__(self) -> None:
        super().__init__(Subscription)

    async def get_by_setup_intent_id(
        self,
        session: AsyncSession,
        stripe_setup_intent_id: str,
    ) -> Optional[Subscription]:
        return await self.first_where(session, stripe_setup_intent_id=stripe_setup_intent_id)

    async def list_for_customer(self, session: AsyncSession, customer_id: str) -> Sequence[Subscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.customer_id == customer_id)
            .order_by(Subscription.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def list_current_for_customer(
        self,
        session: AsyncSession,
        customer_id: str,
    ) -> list[Subscription]:
        subscriptions = await self.list_for_customer(session, customer_id)
        return [s for s in subscriptions if s.status.is_current]


class BillingPeriodRepository(BaseRepository[BillingPeriod]):
    entity_name = "billing_period"

    def __init__(self) -> None:
        super().__init__(BillingPeriod)

    async def list_for_subscription(
        self,
        session: AsyncSession,
        subscription_id: str,
    ) -> Sequence[BillingPeriod]:
        stmt = (
            select(BillingPeriod)
            .where(BillingPeriod.subscription_id == subscription_id)
            .order_by(BillingPeriod.start_date.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()


__all__ = ["SubscriptionRepository", "BillingPeriodRepository"]
