# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/customer.py

Modelos ORM para customers y payment_methods.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import Boolean, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType, enum_column_type

from ..enums import PaymentMethodType
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Customer(LivemodeMixin, TimestampMixin, Base):
    """
    Identidad de facturación dentro de una organización.

    `stripe_customer_id` es el vínculo con Stripe; una vez fijado, la
    reconciliación nunca lo reasigna en silencio (ConflictError).
    """

    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("cust"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    pricing_model_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("pricing_models.id"), nullable=True
    )

    email: Mapped[str] = mapped_column(String(320), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    external_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        doc="Id del customer en el sistema de la organización.",
    )

    stripe_customer_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    billing_address: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    invoice_number_base: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        doc="Prefijo de numeración de invoices del customer (BASE-00001).",
    )

    __table_args__ = (
        UniqueConstraint("organization_id", "external_id", "livemode", name="uq_customers_org_external_livemode"),
        Index("ix_customers_stripe_customer_id", "stripe_customer_id"),
    )

    def __repr__(self) -> str:
        return f"<Customer id={self.id} email={self.email} stripe={self.stripe_customer_id}>"


class PaymentMethod(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "payment_methods"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("pmeth"))

    customer_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("customers.id"), nullable=False, index=True
    )

    type: Mapped[PaymentMethodType] = mapped_column(
        enum_column_type(PaymentMethodType), nullable=False, default=PaymentMethodType.CARD
    )

    stripe_payment_method_id: Mapped[str] = mapped_column(String(255), nullable=False)

    default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    billing_details: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    __table_args__ = (
        UniqueConstraint("stripe_payment_method_id", name="uq_payment_methods_stripe_pm"),
    )

    def __repr__(self) -> str:
        return f"<PaymentMethod id={self.id} customer={self.customer_id}>"


__all__ = ["Customer", "PaymentMethod"]
