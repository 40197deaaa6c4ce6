# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/catalog.py

Modelos ORM del catálogo: products, prices y discounts.

Montos en unidades mínimas de la moneda (centavos).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, enum_column_type

from ..enums import DiscountAmountType, DiscountDuration, IntervalUnit, PriceType
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Product(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("prod"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    pricing_model_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("pricing_models.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_default: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Producto gratuito por defecto del pricing model (plan free).",
    )

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"


class Price(LivemodeMixin, TimestampMixin, Base):
    """
    Precio de un producto. `type` determina la forma del Purchase que se
    materializa (ver services/purchase_materializer.py).
    """

    __tablename__ = "prices"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("price"))

    product_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("products.id"), nullable=False, index=True
    )

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    type: Mapped[PriceType] = mapped_column(enum_column_type(PriceType), nullable=False)

    unit_price: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")

    interval_unit: Mapped[Optional[IntervalUnit]] = mapped_column(
        enum_column_type(IntervalUnit), nullable=True
    )

    interval_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    trial_period_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Price id={self.id} type={self.type} unit_price={self.unit_price}>"


class Discount(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "discounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("discount"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    code: Mapped[str] = mapped_column(String(64), nullable=False)

    amount_type: Mapped[DiscountAmountType] = mapped_column(
        enum_column_type(DiscountAmountType), nullable=False
    )

    amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Centavos si amount_type=fixed; porcentaje entero si percent.",
    )

    duration: Mapped[DiscountDuration] = mapped_column(
        enum_column_type(DiscountDuration), nullable=False
    )

    number_of_payments: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "code", "livemode", name="uq_discounts_org_code_livemode"),
    )

    def __repr__(self) -> str:
        return f"<Discount id={self.id} code={self.code} duration={self.duration}>"


__all__ = ["Product", "Price", "Discount"]
