# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/invoice_service.py

Invoice Materializer y reflejo de pagos en invoices/purchases.

- create_initial_invoice_for_purchase: idempotente por purchase_id; si la
  invoice ya existe se devuelve con sus line items sin cambios.
- apply_charge_to_invoice: estado de una invoice pagada vía checkout
  session tipo invoice (pagos previos netos de reembolsos).
- update_purchase_status_to_reflect_latest_payment /
  update_invoice_status_to_reflect_latest_payment.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.config import get_billing_settings

from ..enums import CheckoutSessionStatus, InvoiceStatus, InvoiceType, PaymentStatus, PurchaseStatus
from ..models import Invoice, InvoiceLineItem, Payment, Purchase
from ..repositories import (
    CustomerRepository,
    InvoiceLineItemRepository,
    InvoiceRepository,
    PaymentRepository,
    PriceRepository,
    PurchaseRepository,
)
from ..schemas import BillingAddress
from ..state_machine import invoice_status_for_charge, purchase_status_from_payment_status

logger = logging.getLogger(__name__)


def invoice_number_for(invoice_number_base: str, prior_invoice_count: int, padding: int) -> str:
    """
    >>> invoice_number_for("AB12CD34", 0, 5)
    'AB12CD34-00001'
    """
    return f"{invoice_number_base}-{prior_invoice_count + 1:0{padding}d}"


def invoice_subtotal(line_items: Sequence[InvoiceLineItem]) -> int:
    return sum(item.price * item.quantity for item in line_items)


def net_payments_total(payments: Sequence[Payment]) -> int:
    """Suma de pagos exitosos, neta de reembolsos y sin duplicados."""
    seen: dict[str, Payment] = {}
    for payment in payments:
        seen[payment.id] = payment
    return sum(
        p.net_amount for p in seen.values() if p.status == PaymentStatus.SUCCEEDED
    )


class InvoiceService:
    def __init__(
        self,
        invoices: Optional[InvoiceRepository] = None,
        line_items: Optional[InvoiceLineItemRepository] = None,
        customers: Optional[CustomerRepository] = None,
        prices: Optional[PriceRepository] = None,
        payments: Optional[PaymentRepository] = None,
        purchases: Optional[PurchaseRepository] = None,
    ) -> None:
        self.invoices = invoices or InvoiceRepository()
        self.line_items = line_items or InvoiceLineItemRepository()
        self.customers = customers or CustomerRepository()
        self.prices = prices or PriceRepository()
        self.payments = payments or PaymentRepository()
        self.purchases = purchases or PurchaseRepository()

    async def create_initial_invoice_for_purchase(
        self,
        session: AsyncSession,
        purchase: Purchase,
    ) -> tuple[Invoice, list[InvoiceLineItem], bool]:
        """
        Crea la invoice inicial del purchase (una sola línea).

        Returns:
            Tuple de (invoice, line_items, created: bool)
        """
        existing = await self.invoices.get_by_purchase_id(session, purchase.id)
        if existing is not None:
            line_items = list(await self.line_items.list_for_invoice(session, existing.id))
            logger.info(
                "initial_invoice result=already_processed invoice_id=%s purchase_id=%s",
                existing.id,
                purchase.id,
            )
            return existing, line_items, False

        customer = await self.customers.get_or_raise(session, purchase.customer_id)
        price = await self.prices.get_or_raise(session, purchase.price_id)

        # El trial del purchase, si está definido, manda sobre el del precio
        trial_period_days = (
            purchase.trial_period_days
            if purchase.trial_period_days is not None
            else price.trial_period_days
        )
        has_trial = bool(trial_period_days)
        description = f"{purchase.name} - Trial Period" if has_trial else purchase.name
        line_price = 0 if has_trial else (purchase.first_invoice_value or 0)

        prior_count = await self.invoices.count_for_customer(session, customer.id)
        address = BillingAddress.from_json(purchase.billing_address)
        settings = get_billing_settings()

        invoice = await self.invoices.create(
            session,
            organization_id=purchase.organization_id,
            customer_id=customer.id,
            purchase_id=purchase.id,
            invoice_number=invoice_number_for(
                customer.invoice_number_base, prior_count, settings.invoice_number_padding
            ),
            type=InvoiceType.PURCHASE,
            status=InvoiceStatus.DRAFT,
            currency=price.currency,
            subtotal=line_price,
            tax_country=address.country if address else None,
            livemode=purchase.livemode,
        )
        line_item = await self.line_items.create(
            session,
            invoice_id=invoice.id,
            price_id=price.id,
            description=description,
            quantity=1,
            price=line_price,
            livemode=purchase.livemode,
        )
        logger.info(
            "initial_invoice_created invoice_id=%s number=%s purchase_id=%s subtotal=%d",
            invoice.id,
            invoice.invoice_number,
            purchase.id,
            line_price,
        )
        return invoice, [line_item], True

    async def apply_charge_to_invoice(
        self,
        session: AsyncSession,
        invoice: Invoice,
        *,
        checkout_session_status: CheckoutSessionStatus,
        charge_amount: int,
    ) -> Invoice:
        """Recalcula y persiste el estado de la invoice tras un charge."""
        line_items = await self.line_items.list_for_invoice(session, invoice.id)
        invoice_total = invoice_subtotal(line_items)
        prior_payments = await self.payments.list_succeeded_for_invoice(session, invoice.id)
        prior_total = net_payments_total(prior_payments)

        status = invoice_status_for_charge(
            current=invoice.status,
            invoice_total=invoice_total,
            prior_payments_total=prior_total,
            checkout_session_status=checkout_session_status,
            charge_amount=charge_amount,
        )
        logger.info(
            "invoice_status_for_charge invoice_id=%s total=%d prior=%d charge=%d status=%s",
            invoice.id,
            invoice_total,
            prior_total,
            charge_amount,
            status,
        )
        if status != invoice.status:
            invoice = await self.invoices.update(session, invoice, status=status)
        return invoice

    async def update_invoice_status_to_reflect_latest_payment(
        self,
        session: AsyncSession,
        payment: Payment,
    ) -> Optional[Invoice]:
        """Marca la invoice como pagada cuando los pagos netos cubren el total."""
        if payment.status != PaymentStatus.SUCCEEDED or not payment.invoice_id:
            return None
        invoice = await self.invoices.get_or_raise(session, payment.invoice_id)
        if invoice.status == InvoiceStatus.PAID:
            return invoice

        line_items = await self.line_items.list_for_invoice(session, invoice.id)
        payments = list(await self.payments.list_succeeded_for_invoice(session, invoice.id))
        payments.append(payment)
        if net_payments_total(payments) >= invoice_subtotal(line_items):
            invoice = await self.invoices.update(session, invoice, status=InvoiceStatus.PAID)
        return invoice

    async def update_purchase_status_to_reflect_latest_payment(
        self,
        session: AsyncSession,
        payment: Payment,
    ) -> Optional[Purchase]:
        """succeeded -> paid (purchase_date = charge_date), canceled -> failed, processing -> pending."""
        if not payment.purchase_id:
            return None
        purchase = await self.purchases.get_or_raise(session, payment.purchase_id)
        status = purchase_status_from_payment_status(payment.status)
        fields = {"status": status}
        if status == PurchaseStatus.PAID:
            fields["purchase_date"] = payment.charge_date
        return await self.purchases.update(session, purchase, **fields)


__all__ = [
    "invoice_number_for",
    "invoice_subtotal",
    "net_payments_total",
    "InvoiceService",
]
