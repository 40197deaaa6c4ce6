# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/__init__.py

Superficie de exportación de enums del módulo Bookkeeping.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from .billing_enums import (
    FeeCalculationType,
    InvoiceStatus,
    InvoiceType,
    PurchaseStatus,
    StripeConnectContractType,
)
from .catalog_enums import DiscountAmountType, DiscountDuration, IntervalUnit, PriceType
from .checkout_session_enums import CheckoutSessionStatus, CheckoutSessionType
from .event_enums import EventType
from .payment_enums import IntentMetadataType, PaymentMethodType, PaymentStatus
from .subscription_enums import BillingPeriodStatus, SubscriptionStatus

__all__ = [
    "BillingPeriodStatus",
    "CheckoutSessionStatus",
    "CheckoutSessionType",
    "DiscountAmountType",
    "DiscountDuration",
    "EventType",
    "FeeCalculationType",
    "IntentMetadataType",
    "IntervalUnit",
    "InvoiceStatus",
    "InvoiceType",
    "PaymentMethodType",
    "PaymentStatus",
    "PriceType",
    "PurchaseStatus",
    "StripeConnectContractType",
    "SubscriptionStatus",
]

# Fin del archivo backend/app/modules/bookkeeping/enums/__init__.py
