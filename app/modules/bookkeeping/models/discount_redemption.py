# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/discount_redemption.py

Modelo ORM para la tabla discount_redemptions.

Registra el consumo de un descuento contra un purchase (opcionalmente
acotado a una suscripción). `fully_redeemed` es un latch monotónico:
pasa de False a True y nunca regresa.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, enum_column_type

from ..enums import DiscountAmountType, DiscountDuration
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class DiscountRedemption(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "discount_redemptions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("discount_redemption"))

    discount_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("discounts.id"), nullable=False
    )

    purchase_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("purchases.id"), nullable=False, index=True
    )

    subscription_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        ForeignKey("subscriptions.id"),
        nullable=True,
        index=True,
        doc="Si es null, el conteo de pagos se acota solo por purchase.",
    )

    # Snapshot del descuento al redimir
    discount_name: Mapped[str] = mapped_column(String(255), nullable=False)
    discount_code: Mapped[str] = mapped_column(String(64), nullable=False)
    discount_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_amount_type: Mapped[DiscountAmountType] = mapped_column(
        enum_column_type(DiscountAmountType), nullable=False
    )
    duration: Mapped[DiscountDuration] = mapped_column(
        enum_column_type(DiscountDuration), nullable=False
    )
    number_of_payments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    fully_redeemed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("purchase_id", "discount_id", name="uq_discount_redemptions_purchase_discount"),
    )

    def __repr__(self) -> str:
        return (
            f"<DiscountRedemption id={self.id} purchase={self.purchase_id} "
            f"duration={self.duration} fully_redeemed={self.fully_redeemed}>"
        )


__all__ = ["DiscountRedemption"]
