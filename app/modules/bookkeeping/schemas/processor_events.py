# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/schemas/processor_events.py

DTOs de los objetos de Stripe que consume la reconciliación.

Solo se modelan los campos que usa bookkeeping; el resto del payload de
Stripe se ignora (extra="ignore"). Los campos que Stripe puede expandir
(customer, payment_method, payment_intent) se aceptan como id o como
objeto y se leen con stripe_id_from_object_or_id().

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..enums import IntentMetadataType
from ..errors import InvalidStateError
from ..utils.id_helpers import stripe_id_from_object_or_id


class _StripeSnapshot(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_stripe(cls, obj: Any):
        """Construye el DTO desde un StripeObject, dict o DTO ya validado."""
        if isinstance(obj, cls):
            return obj
        to_dict = getattr(obj, "to_dict", None)
        data = to_dict() if callable(to_dict) else dict(obj)
        return cls.model_validate(data)


class Address(BaseModel):
    model_config = ConfigDict(extra="ignore")

    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class BillingDetails(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    address: Optional[Address] = None


class ChargeSnapshot(_StripeSnapshot):
    """Charge de Stripe (pago completado o en proceso)."""

    id: Optional[str] = None
    status: str = Field(description="succeeded | pending | failed")
    amount: int = Field(default=0, ge=0, description="Monto en centavos")
    customer: Optional[Any] = Field(default=None, description="cus_... u objeto Customer")
    billing_details: Optional[BillingDetails] = None
    payment_intent: Optional[Any] = None
    created: Optional[int] = Field(default=None, description="Epoch (segundos)")

    @property
    def stripe_customer_id(self) -> Optional[str]:
        return stripe_id_from_object_or_id(self.customer)

    @property
    def stripe_payment_intent_id(self) -> Optional[str]:
        return stripe_id_from_object_or_id(self.payment_intent)


class SetupIntentSnapshot(_StripeSnapshot):
    """SetupIntent de Stripe (autorización de pagos futuros)."""

    id: str
    status: str = Field(description="succeeded | processing | canceled | requires_payment_method ...")
    customer: Optional[Any] = None
    payment_method: Optional[Any] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def stripe_customer_id(self) -> Optional[str]:
        return stripe_id_from_object_or_id(self.customer)

    @property
    def stripe_payment_method_id(self) -> Optional[str]:
        return stripe_id_from_object_or_id(self.payment_method)


# ---------------------------------------------------------------------------
# Metadata de intents (unión discriminada por "type")
# ---------------------------------------------------------------------------

class CheckoutSessionIntentMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Literal[IntentMetadataType.CHECKOUT_SESSION]
    checkout_session_id: str = Field(alias="checkoutSessionId")


class BillingRunIntentMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Literal[IntentMetadataType.BILLING_RUN]
    billing_run_id: str = Field(alias="billingRunId")


class InvoiceIntentMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Literal[IntentMetadataType.INVOICE]
    invoice_id: str = Field(alias="invoiceId")


IntentMetadata = Annotated[
    Union[CheckoutSessionIntentMetadata, BillingRunIntentMetadata, InvoiceIntentMetadata],
    Field(discriminator="type"),
]

_intent_metadata_adapter: TypeAdapter[IntentMetadata] = TypeAdapter(IntentMetadata)


def parse_intent_metadata(metadata: Optional[dict[str, Any]]) -> IntentMetadata:
    """
    Valida la metadata de un intent.

    Raises:
        InvalidStateError: metadata ausente o de un tipo desconocido
    """
    try:
        return _intent_metadata_adapter.validate_python(metadata or {})
    except PydanticValidationError as exc:
        raise InvalidStateError(f"Unrecognized intent metadata: {metadata!r}") from exc


__all__ = [
    "Address",
    "BillingDetails",
    "ChargeSnapshot",
    "SetupIntentSnapshot",
    "CheckoutSessionIntentMetadata",
    "BillingRunIntentMetadata",
    "InvoiceIntentMetadata",
    "IntentMetadata",
    "parse_intent_metadata",
]
