# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/schemas/checkout_session_schemas.py

Esquemas Pydantic para edición de checkout sessions y parámetros de fees.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..enums import PaymentMethodType
from .processor_events import Address


class BillingAddress(BaseModel):
    """Dirección de facturación tal como se guarda en JSON."""

    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    address: Address = Field(default_factory=Address)

    @classmethod
    def from_json(cls, value: Optional[dict[str, Any]]) -> Optional["BillingAddress"]:
        if not value:
            return None
        return cls.model_validate(value)

    @property
    def country(self) -> Optional[str]:
        return self.address.country

    @property
    def region(self) -> Optional[str]:
        return self.address.state


class EditCheckoutSessionInput(BaseModel):
    """
    Cambios parciales a una checkout session OPEN.

    Solo los campos enviados (exclude_unset) se aplican.
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    billing_address: Optional[dict[str, Any]] = None
    price_id: Optional[str] = None
    discount_id: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    payment_method_type: Optional[PaymentMethodType] = None
    output_name: Optional[str] = None
    output_metadata: Optional[dict[str, Any]] = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class FeeParameters(BaseModel):
    """Campos que afectan el cálculo de fees (comparados por igualdad)."""

    model_config = ConfigDict(frozen=True)

    price_id: Optional[str] = None
    invoice_id: Optional[str] = None
    discount_id: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    quantity: int = 1


__all__ = ["BillingAddress", "EditCheckoutSessionInput", "FeeParameters"]
