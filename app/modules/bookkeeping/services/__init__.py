# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/__init__.py

Superficie de exportación de servicios del módulo Bookkeeping.

Incluye:
- FeeCalculationService (gate de fees)
- CustomerResolver
- PurchaseMaterializer
- DiscountRedemptionService
- InvoiceService
- PaymentMethodService
- DefaultSubscriptionWorkflow

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from .customer_resolver import CREATE_DEFAULT_SUBSCRIPTION_TASK, CustomerResolver, ResolvedCustomer
from .discount_redemption_service import DiscountRedemptionService
from .fee_calculation_service import (
    FeeCalculationService,
    NoTaxCalculator,
    TaxCalculator,
    calculate_discount_amount,
    calculate_international_fee_percentage,
    calculate_payment_method_fee_amount,
    calculate_percentage_fee,
    calculate_total_due_amount,
    calculate_total_fee_amount,
    fee_calculation_parameters_changed,
    fee_parameters_for,
    is_fee_ready,
)
from .invoice_service import InvoiceService
from .payment_method_service import PaymentMethodService
from .purchase_materializer import PurchaseMaterializer, build_purchase_insert
from .subscription_workflow import (
    CreateSubscriptionParams,
    CreateSubscriptionResult,
    DefaultSubscriptionWorkflow,
    SubscriptionWorkflow,
    calculate_trial_end,
)

__all__ = [
    "CREATE_DEFAULT_SUBSCRIPTION_TASK",
    "CustomerResolver",
    "ResolvedCustomer",
    "DiscountRedemptionService",
    "FeeCalculationService",
    "NoTaxCalculator",
    "TaxCalculator",
    "calculate_discount_amount",
    "calculate_international_fee_percentage",
    "calculate_payment_method_fee_amount",
    "calculate_percentage_fee",
    "calculate_total_due_amount",
    "calculate_total_fee_amount",
    "fee_calculation_parameters_changed",
    "fee_parameters_for",
    "is_fee_ready",
    "InvoiceService",
    "PaymentMethodService",
    "PurchaseMaterializer",
    "build_purchase_insert",
    "CreateSubscriptionParams",
    "CreateSubscriptionResult",
    "DefaultSubscriptionWorkflow",
    "SubscriptionWorkflow",
    "calculate_trial_end",
]

# Fin del archivo backend/app/modules/bookkeeping/services/__init__.py
