# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/fee_calculation.py

Modelo ORM para la tabla fee_calculations.

Snapshot de totales (base, descuento, impuesto, fees) calculado para una
checkout session; se vincula al purchase cuando éste existe. El total que
se cobra debe coincidir con el cotizado, por eso se reutiliza el snapshot
mientras los parámetros que afectan fees no cambien.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType, enum_column_type

from ..enums import FeeCalculationType, PaymentMethodType
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class FeeCalculation(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "fee_calculations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("feec"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    type: Mapped[FeeCalculationType] = mapped_column(
        enum_column_type(FeeCalculationType),
        nullable=False,
        default=FeeCalculationType.CHECKOUT_SESSION_PAYMENT,
    )

    checkout_session_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("checkout_sessions.id"), nullable=True
    )

    purchase_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("purchases.id"), nullable=True, index=True
    )

    invoice_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("invoices.id"), nullable=True
    )

    price_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("prices.id"), nullable=True)

    discount_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("discounts.id"), nullable=True
    )

    billing_address: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    payment_method_type: Mapped[Optional[PaymentMethodType]] = mapped_column(
        enum_column_type(PaymentMethodType), nullable=True
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")

    base_amount: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    discount_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    tax_amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    platform_fee_percentage: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="0",
        doc="Fee de plataforma (porcentaje decimal como texto).",
    )

    payment_method_fee_fixed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    morsurcharge_percentage: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="0",
        doc="Recargo merchant-of-record (solo organizaciones MoR).",
    )

    international_fee_percentage: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default="0",
        doc="Fee cross-border (card/SEPA con país distinto al de la organización).",
    )

    internal_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_fee_calculations_session_created", "checkout_session_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<FeeCalculation id={self.id} session={self.checkout_session_id} base={self.base_amount}>"


__all__ = ["FeeCalculation"]
