# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/subscription.py

Modelos ORM para subscriptions y billing_periods.

`stripe_setup_intent_id` es la clave de idempotencia del flujo
setup-intent: una suscripción ya creada para ese setup intent se
devuelve, nunca se recrea.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType, enum_column_type

from ..enums import BillingPeriodStatus, IntervalUnit, SubscriptionStatus
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Subscription(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "subscriptions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("sub"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    customer_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("customers.id"), nullable=False, index=True
    )

    price_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("prices.id"), nullable=True)

    purchase_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("purchases.id"), nullable=True
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    status: Mapped[SubscriptionStatus] = mapped_column(
        enum_column_type(SubscriptionStatus), nullable=False, default=SubscriptionStatus.INCOMPLETE
    )

    is_free_plan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    default_payment_method_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("payment_methods.id"), nullable=True
    )

    stripe_setup_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    interval: Mapped[Optional[IntervalUnit]] = mapped_column(enum_column_type(IntervalUnit), nullable=True)
    interval_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    trial_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    billing_cycle_anchor_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    current_billing_period_start: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    current_billing_period_end: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    canceled_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    subscription_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", JSONType, nullable=True
    )

    __table_args__ = (
        UniqueConstraint("stripe_setup_intent_id", name="uq_subscriptions_stripe_setup_intent_id"),
    )

    def __repr__(self) -> str:
        return f"<Subscription id={self.id} status={self.status} customer={self.customer_id}>"


class BillingPeriod(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "billing_periods"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("billing_period"))

    subscription_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("subscriptions.id"), nullable=False, index=True
    )

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    status: Mapped[BillingPeriodStatus] = mapped_column(
        enum_column_type(BillingPeriodStatus), nullable=False, default=BillingPeriodStatus.ACTIVE
    )

    trial_period: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<BillingPeriod id={self.id} sub={self.subscription_id} {self.start_date}..{self.end_date}>"


__all__ = ["Subscription", "BillingPeriod"]
