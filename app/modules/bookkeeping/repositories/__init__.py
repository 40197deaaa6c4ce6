# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/__init__.py

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from .catalog_repository import (
    DiscountRepository,
    OrganizationRepository,
    PriceRepository,
    PricingModelRepository,
    ProductRepository,
)
from .checkout_session_repository import CheckoutSessionRepository
from .customer_repository import CustomerRepository, PaymentMethodRepository
from .discount_redemption_repository import DiscountRedemptionRepository
from .event_repository import EventRepository
from .fee_calculation_repository import FeeCalculationRepository
from .invoice_repository import InvoiceLineItemRepository, InvoiceRepository
from .payment_repository import PaymentRepository
from .purchase_repository import PurchaseRepository
from .subscription_repository import BillingPeriodRepository, SubscriptionRepository

__all__ = [
    "BillingPeriodRepository",
    "CheckoutSessionRepository",
    "CustomerRepository",
    "DiscountRedemptionRepository",
    "DiscountRepository",
    "EventRepository",
    "FeeCalculationRepository",
    "InvoiceLineItemRepository",
    "InvoiceRepository",
    "OrganizationRepository",
    "PaymentMethodRepository",
    "PaymentRepository",
    "PriceRepository",
    "PricingModelRepository",
    "ProductRepository",
    "PurchaseRepository",
    "SubscriptionRepository",
]
