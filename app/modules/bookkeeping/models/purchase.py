# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/purchase.py

Modelo ORM para la tabla purchases.

Un purchase es el registro durable de la intención de compra de un precio
por un customer, independiente de cuántos intentos de pago tomó.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType, enum_column_type

from ..enums import IntervalUnit, PriceType, PurchaseStatus
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Purchase(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "purchases"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("prch"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    customer_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("customers.id"), nullable=False, index=True
    )

    price_id: Mapped[str] = mapped_column(String(64), ForeignKey("prices.id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[PurchaseStatus] = mapped_column(
        enum_column_type(PurchaseStatus),
        nullable=False,
        default=PurchaseStatus.OPEN,
    )

    price_type: Mapped[PriceType] = mapped_column(
        enum_column_type(PriceType),
        nullable=False,
        doc="Espejo de Price.type al momento de materializar.",
    )

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    # Campos de suscripción
    interval_unit: Mapped[Optional[IntervalUnit]] = mapped_column(
        enum_column_type(IntervalUnit), nullable=True
    )
    interval_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    trial_period_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price_per_billing_cycle: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # Campos de pago único / uso
    first_invoice_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    total_purchase_value: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    billing_address: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    purchase_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Se fija solo en la transición a paid.",
    )

    # "metadata" está reservado por DeclarativeBase
    purchase_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata", JSONType, nullable=True
    )

    def __repr__(self) -> str:
        return f"<Purchase id={self.id} status={self.status} price_type={self.price_type}>"


__all__ = ["Purchase"]
