# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/__init__.py

Modelos ORM del módulo Bookkeeping.

Importar este paquete registra todas las tablas en Base.metadata.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from .catalog import Discount, Price, Product
from .checkout_session import CheckoutSession
from .customer import Customer, PaymentMethod
from .discount_redemption import DiscountRedemption
from .event import Event
from .fee_calculation import FeeCalculation
from .invoice import Invoice, InvoiceLineItem
from .organization import Organization, PricingModel
from .payment import Payment
from .purchase import Purchase
from .subscription import BillingPeriod, Subscription

__all__ = [
    "BillingPeriod",
    "CheckoutSession",
    "Customer",
    "Discount",
    "DiscountRedemption",
    "Event",
    "FeeCalculation",
    "Invoice",
    "InvoiceLineItem",
    "Organization",
    "Payment",
    "PaymentMethod",
    "Price",
    "PricingModel",
    "Product",
    "Purchase",
    "Subscription",
]
