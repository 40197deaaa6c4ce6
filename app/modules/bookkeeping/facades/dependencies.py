# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/dependencies.py

Colaboradores que consumen las fachadas de reconciliación.

Las fachadas reciben un BookkeepingDependencies explícito (o construyen
el de por defecto), de modo que los tests sustituyen el procesador de
pagos o el workflow de suscripciones sin parches globales.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..providers import ProcessorClient, StripeProvider
from ..repositories import (
    CheckoutSessionRepository,
    CustomerRepository,
    FeeCalculationRepository,
    InvoiceRepository,
    OrganizationRepository,
    PaymentMethodRepository,
    PriceRepository,
    ProductRepository,
    PurchaseRepository,
    SubscriptionRepository,
)
from ..services import (
    CustomerResolver,
    DefaultSubscriptionWorkflow,
    DiscountRedemptionService,
    FeeCalculationService,
    InvoiceService,
    PaymentMethodService,
    PurchaseMaterializer,
    SubscriptionWorkflow,
    TaxCalculator,
)


@dataclass
class BookkeepingDependencies:
    processor: ProcessorClient
    fee_calculations: FeeCalculationService
    customer_resolver: CustomerResolver
    purchase_materializer: PurchaseMaterializer
    discount_redemptions: DiscountRedemptionService
    invoices: InvoiceService
    payment_methods: PaymentMethodService
    subscription_workflow: SubscriptionWorkflow
    checkout_session_repo: CheckoutSessionRepository = field(default_factory=CheckoutSessionRepository)
    customer_repo: CustomerRepository = field(default_factory=CustomerRepository)
    organization_repo: OrganizationRepository = field(default_factory=OrganizationRepository)
    price_repo: PriceRepository = field(default_factory=PriceRepository)
    product_repo: ProductRepository = field(default_factory=ProductRepository)
    purchase_repo: PurchaseRepository = field(default_factory=PurchaseRepository)
    invoice_repo: InvoiceRepository = field(default_factory=InvoiceRepository)
    fee_calculation_repo: FeeCalculationRepository = field(default_factory=FeeCalculationRepository)
    subscription_repo: SubscriptionRepository = field(default_factory=SubscriptionRepository)
    payment_method_repo: PaymentMethodRepository = field(default_factory=PaymentMethodRepository)

    @classmethod
    def build(
        cls,
        *,
        processor: Optional[ProcessorClient] = None,
        subscription_workflow: Optional[SubscriptionWorkflow] = None,
        tax_calculator: Optional[TaxCalculator] = None,
    ) -> "BookkeepingDependencies":
        processor = processor or StripeProvider()
        return cls(
            processor=processor,
            fee_calculations=FeeCalculationService(tax_calculator=tax_calculator),
            customer_resolver=CustomerResolver(processor=processor),
            purchase_materializer=PurchaseMaterializer(),
            discount_redemptions=DiscountRedemptionService(),
            invoices=InvoiceService(),
            payment_methods=PaymentMethodService(processor=processor),
            subscription_workflow=subscription_workflow or DefaultSubscriptionWorkflow(),
        )


_default_dependencies: Optional[BookkeepingDependencies] = None


def get_bookkeeping_dependencies() -> BookkeepingDependencies:
    """Dependencias por defecto (Stripe real), creadas una sola vez."""
    global _default_dependencies
    if _default_dependencies is None:
        _default_dependencies = BookkeepingDependencies.build()
    return _default_dependencies


__all__ = ["BookkeepingDependencies", "get_bookkeeping_dependencies"]
