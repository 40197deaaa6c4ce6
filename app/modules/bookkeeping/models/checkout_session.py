# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/checkout_session.py

Modelo ORM para la tabla checkout_sessions.

Una checkout session es un intento acotado de pagar (o preparar pagos
futuros) por un precio o una invoice. Solo la reconciliación la muta; una
vez fuera de OPEN es inmutable.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType, enum_column_type

from ..enums import CheckoutSessionStatus, CheckoutSessionType, PaymentMethodType
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class CheckoutSession(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "checkout_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("chckt_session"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    type: Mapped[CheckoutSessionType] = mapped_column(
        enum_column_type(CheckoutSessionType),
        nullable=False,
        default=CheckoutSessionType.PRODUCT,
    )

    status: Mapped[CheckoutSessionStatus] = mapped_column(
        enum_column_type(CheckoutSessionStatus),
        nullable=False,
        default=CheckoutSessionStatus.OPEN,
        doc="open es el único estado editable; el resto son terminales.",
    )

    price_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("prices.id"), nullable=True)

    invoice_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("invoices.id"),
        nullable=True,
        doc="Solo para sesiones tipo invoice.",
    )

    purchase_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("purchases.id"),
        nullable=True,
        doc="Clave de idempotencia del purchase materializado.",
    )

    customer_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("customers.id"), nullable=True
    )

    customer_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)

    customer_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    billing_address: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    payment_method_type: Mapped[Optional[PaymentMethodType]] = mapped_column(
        enum_column_type(PaymentMethodType), nullable=True
    )

    discount_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("discounts.id"), nullable=True
    )

    stripe_payment_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    stripe_setup_intent_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    output_name: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
        doc="Nombre a aplicar al purchase al materializarlo.",
    )

    output_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    preserve_billing_cycle_anchor: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    target_subscription_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("subscriptions.id"),
        nullable=True,
        doc="Suscripción objetivo en flujos add_payment_method / activate_subscription.",
    )

    automatically_update_subscriptions: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Propaga el nuevo método de pago a todas las suscripciones del customer.",
    )

    __table_args__ = (
        Index("ix_checkout_sessions_payment_intent", "stripe_payment_intent_id"),
        Index("ix_checkout_sessions_setup_intent", "stripe_setup_intent_id"),
    )

    def __repr__(self) -> str:
        return f"<CheckoutSession id={self.id} type={self.type} status={self.status}>"


__all__ = ["CheckoutSession"]
