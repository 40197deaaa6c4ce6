# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/payment.py

Modelo ORM para la tabla payments (un charge de Stripe).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, enum_column_type

from ..enums import PaymentMethodType, PaymentStatus
from ..utils.datetime_helpers import utcnow
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Payment(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "payments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("pymt"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    customer_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("customers.id"), nullable=False, index=True
    )

    invoice_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("invoices.id"), nullable=True, index=True
    )

    purchase_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("purchases.id"), nullable=True, index=True
    )

    subscription_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("subscriptions.id"), nullable=True, index=True
    )

    amount: Mapped[int] = mapped_column(Integer, nullable=False)

    refunded_amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        doc="Monto reembolsado acumulado; el neto es amount - refunded_amount.",
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")

    status: Mapped[PaymentStatus] = mapped_column(
        enum_column_type(PaymentStatus), nullable=False, default=PaymentStatus.PROCESSING
    )

    payment_method: Mapped[Optional[PaymentMethodType]] = mapped_column(
        enum_column_type(PaymentMethodType), nullable=True
    )

    stripe_charge_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    charge_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("ix_payments_stripe_charge_id", "stripe_charge_id"),
    )

    @property
    def net_amount(self) -> int:
        return self.amount - (self.refunded_amount or 0)

    def __repr__(self) -> str:
        return f"<Payment id={self.id} amount={self.amount} status={self.status}>"


__all__ = ["Payment"]
