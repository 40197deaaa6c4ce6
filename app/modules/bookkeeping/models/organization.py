# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/organization.py

Modelos ORM para organizations y pricing_models.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.config import get_billing_settings
from app.shared.database.base import Base, enum_column_type

from ..enums import StripeConnectContractType
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


def _default_fee_percentage() -> str:
    return get_billing_settings().default_fee_percentage


def _default_currency() -> str:
    return get_billing_settings().default_currency


class Organization(TimestampMixin, Base):
    """
    Organización (merchant) dueña del catálogo y de los customers.
    """

    __tablename__ = "organizations"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("org"))

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    fee_percentage: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=_default_fee_percentage,
        doc="Porcentaje de fee de plataforma como texto decimal (p.ej. '0.65').",
    )

    stripe_account_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    country_code: Mapped[str] = mapped_column(
        String(2),
        nullable=False,
        default="US",
        doc="País ISO alpha-2 de la organización (fee internacional).",
    )

    stripe_connect_contract_type: Mapped[StripeConnectContractType] = mapped_column(
        enum_column_type(StripeConnectContractType),
        nullable=False,
        default=StripeConnectContractType.PLATFORM,
    )

    allow_multiple_subscriptions_per_customer: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    default_currency: Mapped[str] = mapped_column(String(3), nullable=False, default=_default_currency)

    @property
    def is_merchant_of_record(self) -> bool:
        return self.stripe_connect_contract_type == StripeConnectContractType.MERCHANT_OF_RECORD

    def __repr__(self) -> str:
        return f"<Organization id={self.id} name={self.name!r}>"


class PricingModel(LivemodeMixin, TimestampMixin, Base):
    """Conjunto de productos/precios; cada customer pertenece a uno."""

    __tablename__ = "pricing_models"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("pricing_model"))

    organization_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("organizations.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<PricingModel id={self.id} org={self.organization_id}>"


__all__ = ["Organization", "PricingModel"]
