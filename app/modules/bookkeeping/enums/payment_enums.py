# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/payment_enums.py

Enums de pagos, métodos de pago y metadata de intents de Stripe.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from enum import StrEnum


class PaymentStatus(StrEnum):
    """Estado del pago (espejo del estado del charge en Stripe)."""

    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    REFUNDED = "refunded"

    __pg_enum_name__ = "payment_status_enum"


class PaymentMethodType(StrEnum):
    CARD = "card"
    US_BANK_ACCOUNT = "us_bank_account"
    SEPA_DEBIT = "sepa_debit"
    LINK = "link"

    __pg_enum_name__ = "payment_method_type_enum"


class IntentMetadataType(StrEnum):
    """Valor de metadata["type"] que adjuntamos a payment/setup intents."""

    CHECKOUT_SESSION = "checkout_session"
    BILLING_RUN = "billing_run"
    INVOICE = "invoice"


__all__ = ["PaymentStatus", "PaymentMethodType", "IntentMetadataType"]
