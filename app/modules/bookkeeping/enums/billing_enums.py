# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/billing_enums.py

Enums de documentos de cobro: purchases, invoices, fee calculations y
tipo de contrato Stripe Connect de la organización.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from enum import StrEnum


class PurchaseStatus(StrEnum):
    """Open -> Pending -> Paid, o Failed terminal."""

    OPEN = "open"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"

    __pg_enum_name__ = "purchase_status_enum"


class InvoiceStatus(StrEnum):
    DRAFT = "draft"
    OPEN = "open"
    AWAITING_PAYMENT_CONFIRMATION = "awaiting_payment_confirmation"
    PAID = "paid"
    VOID = "void"

    __pg_enum_name__ = "invoice_status_enum"


class InvoiceType(StrEnum):
    PURCHASE = "purchase"
    STANDALONE = "standalone"
    SUBSCRIPTION = "subscription"

    __pg_enum_name__ = "invoice_type_enum"


class FeeCalculationType(StrEnum):
    CHECKOUT_SESSION_PAYMENT = "checkout_session_payment"
    SUBSCRIPTION_PAYMENT = "subscription_payment"

    __pg_enum_name__ = "fee_calculation_type_enum"


class StripeConnectContractType(StrEnum):
    """
    PLATFORM: la organización es el merchant; no se calculan fees de MoR.
    MERCHANT_OF_RECORD: la plataforma cobra y calcula impuestos/fees.
    """

    PLATFORM = "platform"
    MERCHANT_OF_RECORD = "merchant_of_record"

    __pg_enum_name__ = "stripe_connect_contract_type_enum"


__all__ = [
    "PurchaseStatus",
    "InvoiceStatus",
    "InvoiceType",
    "FeeCalculationType",
    "StripeConnectContractType",
]
