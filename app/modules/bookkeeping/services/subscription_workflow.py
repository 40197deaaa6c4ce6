# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/subscription_workflow.py

Colaborador de creación/activación de suscripciones.

La reconciliación de setup intents solo depende del contrato
SubscriptionWorkflow; DefaultSubscriptionWorkflow es la implementación
usada por defecto: crea la suscripción con su primer billing period y es
idempotente por stripe_setup_intent_id.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import BillingPeriodStatus, IntervalUnit, SubscriptionStatus
from ..errors import ValidationError
from ..models import BillingPeriod, Customer, PaymentMethod, Price, Product, Subscription
from ..repositories import BillingPeriodRepository, SubscriptionRepository
from ..utils.datetime_helpers import add_days, utcnow

logger = logging.getLogger(__name__)


def calculate_trial_end(*, has_had_trial: bool, trial_period_days: Optional[int]) -> Optional[datetime]:
    """None si el customer ya tuvo trial o el precio no ofrece días de trial."""
    if has_had_trial or not trial_period_days:
        return None
    return add_days(utcnow(), trial_period_days)


def add_interval(start: datetime, unit: IntervalUnit, count: int = 1) -> datetime:
    """
    Suma `count` intervalos a `start`. Meses y años respetan el fin de mes
    (31-ene + 1 mes = 28/29-feb).
    """
    unit = IntervalUnit(unit)
    if unit == IntervalUnit.DAY:
        return add_days(start, count)
    if unit == IntervalUnit.WEEK:
        return add_days(start, 7 * count)
    months = count if unit == IntervalUnit.MONTH else 12 * count
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return start.replace(year=year, month=month, day=day)


@dataclass
class CreateSubscriptionParams:
    customer: Customer
    price: Price
    product: Product
    payment_method: Optional[PaymentMethod]
    interval: Optional[IntervalUnit]
    interval_count: Optional[int]
    quantity: int
    name: Optional[str]
    livemode: bool
    stripe_setup_intent_id: Optional[str]
    purchase_id: Optional[str] = None
    trial_end: Optional[datetime] = None
    metadata: Optional[dict[str, Any]] = None
    preserve_billing_cycle_anchor: bool = False


@dataclass
class CreateSubscriptionResult:
    subscription: Subscription
    billing_period: Optional[BillingPeriod] = None
    billing_run: Optional[dict[str, Any]] = None
    created: bool = True
    extra: dict[str, Any] = field(default_factory=dict)


class SubscriptionWorkflow(Protocol):
    async def create_subscription(
        self,
        session: AsyncSession,
        params: CreateSubscriptionParams,
    ) -> CreateSubscriptionResult: ...

    async def activate_subscription(
        self,
        session: AsyncSession,
        subscription: Subscription,
        *,
        payment_method: Optional[PaymentMethod],
        stripe_setup_intent_id: Optional[str],
    ) -> CreateSubscriptionResult: ...


class DefaultSubscriptionWorkflow:
    """
    Implementación por defecto del workflow de suscripciones.

    No genera billing runs (el motor de cobro recurrente es externo);
    billing_run siempre es None.
    """

    def __init__(
        self,
        subscriptions: Optional[SubscriptionRepository] = None,
        billing_periods: Optional[BillingPeriodRepository] = None,
    ) -> None:
        self.subscriptions = subscriptions or SubscriptionRepository()
        self.billing_periods = billing_periods or BillingPeriodRepository()

    async def create_subscription(
        self,
        session: AsyncSession,
        params: CreateSubscriptionParams,
    ) -> CreateSubscriptionResult:
        if params.stripe_setup_intent_id:
            existing = await self.subscriptions.get_by_setup_intent_id(session, params.stripe_setup_intent_id)
            if existing is not None:
                logger.info(
                    "create_subscription result=already_processed subscription_id=%s setup_intent_id=%s",
                    existing.id,
                    params.stripe_setup_intent_id,
                )
                return CreateSubscriptionResult(subscription=existing, created=False)

        if params.interval is None:
            raise ValidationError(f"Price {params.price.id} has no billing interval")

        now = utcnow()
        period_start = now
        if params.trial_end is not None:
            period_end = params.trial_end
        else:
            period_end = add_interval(period_start, params.interval, params.interval_count or 1)

        subscription = await self.subscriptions.create(
            session,
            organization_id=params.customer.organization_id,
            customer_id=params.customer.id,
            price_id=params.price.id,
            purchase_id=params.purchase_id,
            name=params.name or params.product.name,
            status=SubscriptionStatus.TRIALING if params.trial_end else SubscriptionStatus.ACTIVE,
            is_free_plan=params.price.unit_price == 0,
            default_payment_method_id=params.payment_method.id if params.payment_method else None,
            stripe_setup_intent_id=params.stripe_setup_intent_id,
            interval=params.interval,
            interval_count=params.interval_count or 1,
            quantity=params.quantity,
            trial_end=params.trial_end,
            billing_cycle_anchor_date=now,
            current_billing_period_start=period_start,
            current_billing_period_end=period_end,
            subscription_metadata=params.metadata,
            livemode=params.livemode,
        )
        billing_period = await self.billing_periods.create(
            session,
            subscription_id=subscription.id,
            start_date=period_start,
            end_date=period_end,
            status=BillingPeriodStatus.ACTIVE,
            trial_period=params.trial_end is not None,
            livemode=params.livemode,
        )
        logger.info(
            "subscription_created subscription_id=%s customer_id=%s trial_end=%s",
            subscription.id,
            params.customer.id,
            params.trial_end,
        )
        return CreateSubscriptionResult(subscription=subscription, billing_period=billing_period)

    async def activate_subscription(
        self,
        session: AsyncSession,
        subscription: Subscription,
        *,
        payment_method: Optional[PaymentMethod],
        stripe_setup_intent_id: Optional[str],
    ) -> CreateSubscriptionResult:
        """Activa una suscripción existente con su nuevo método de pago por defecto."""
        if subscription.status == SubscriptionStatus.ACTIVE and (
            stripe_setup_intent_id is None
            or subscription.stripe_setup_intent_id == stripe_setup_intent_id
        ):
            return CreateSubscriptionResult(subscription=subscription, created=False)

        subscription = await self.subscriptions.update(
            session,
            subscription,
            status=SubscriptionStatus.ACTIVE,
            default_payment_method_id=payment_method.id if payment_method else subscription.default_payment_method_id,
            stripe_setup_intent_id=stripe_setup_intent_id or subscription.stripe_setup_intent_id,
        )
        logger.info("subscription_activated subscription_id=%s", subscription.id)
        return CreateSubscriptionResult(subscription=subscription, created=False)


__all__ = [
    "calculate_trial_end",
    "add_interval",
    "CreateSubscriptionParams",
    "CreateSubscriptionResult",
    "SubscriptionWorkflow",
    "DefaultSubscriptionWorkflow",
]
