# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/non_payment.py

Cierre de checkout sessions sin pago (total a pagar exactamente 0, p.ej.
descuento del 100%).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..effects import DomainEventInsert, TransactionEffects, TransactionOutput
from ..enums import CheckoutSessionStatus, CheckoutSessionType, EventType, PriceType, PurchaseStatus
from ..errors import InvalidStateError, ValidationError
from ..metrics import observe_reconciliation, reconciliation_timer
from ..models import CheckoutSession, Invoice, Purchase
from ..services import calculate_total_due_amount
from ..state_machine import assert_checkout_session_open, next_checkout_session_status
from ..utils.datetime_helpers import utcnow
from .dependencies import BookkeepingDependencies, get_bookkeeping_dependencies
from .purchase_bookkeeping import process_purchase_bookkeeping_for_checkout_session

logger = logging.getLogger(__name__)

ENTRY_POINT_NON_PAYMENT = "non_payment"


@dataclass
class NonPaymentResult:
    checkout_session: CheckoutSession
    purchase: Purchase
    invoice: Invoice


async def process_non_payment_checkout_session(
    session: AsyncSession,
    *,
    checkout_session_id: str,
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[NonPaymentResult]:
    """
    Completa una checkout session cuyo total a pagar es 0.

    Raises:
        InvalidStateError: sesión add_payment_method, precio de suscripción
            o sesión fuera de OPEN
        NotFoundError: la sesión no tiene fee calculation
        ValidationError: el total a pagar es desconocido o distinto de 0
    """
    deps = deps or get_bookkeeping_dependencies()

    with reconciliation_timer(ENTRY_POINT_NON_PAYMENT):
        checkout_session = await deps.checkout_session_repo.get_or_raise(session, checkout_session_id)
        logger.info(
            "process_non_payment checkout_session_id=%s status=%s",
            checkout_session.id,
            checkout_session.status,
        )
        if checkout_session.type == CheckoutSessionType.ADD_PAYMENT_METHOD:
            raise InvalidStateError(
                f"Non-payment completion is not supported for add payment method sessions ({checkout_session.id})"
            )
        assert_checkout_session_open(checkout_session)

        if checkout_session.price_id:
            price = await deps.price_repo.get_or_raise(session, checkout_session.price_id)
            if price.type == PriceType.SUBSCRIPTION:
                raise InvalidStateError(
                    f"Non-payment completion is not supported for subscription prices ({price.id})"
                )

        fee_calculation = await deps.fee_calculations.get_latest_or_raise(session, checkout_session.id)
        total_due = calculate_total_due_amount(fee_calculation)
        if total_due != 0:
            if checkout_session.stripe_payment_intent_id:
                await deps.processor.cancel_payment_intent(
                    checkout_session.stripe_payment_intent_id,
                    livemode=checkout_session.livemode,
                )
            raise ValidationError(
                f"Total due for checkout session {checkout_session.id} is {total_due}, expected 0 "
                f"(fee calculation {fee_calculation.id})"
            )

        effects = TransactionEffects()
        checkout_session = await deps.checkout_session_repo.update(
            session,
            checkout_session,
            status=next_checkout_session_status(checkout_session.status, CheckoutSessionStatus.SUCCEEDED),
        )
        bookkeeping = await process_purchase_bookkeeping_for_checkout_session(
            session,
            checkout_session=checkout_session,
            stripe_customer_id=None,
            deps=deps,
        )
        effects.merge(bookkeeping.effects)

        purchase = await deps.purchase_repo.update(
            session,
            bookkeeping.result.purchase,
            status=PurchaseStatus.PAID,
            purchase_date=utcnow(),
        )
        invoice, _, _ = await deps.invoices.create_initial_invoice_for_purchase(session, purchase)

        effects.emit(
            DomainEventInsert(
                type=EventType.PURCHASE_COMPLETED,
                organization_id=purchase.organization_id,
                object_id=purchase.id,
                payload={
                    "customer_id": purchase.customer_id,
                    "checkout_session_id": checkout_session.id,
                },
                livemode=purchase.livemode,
            )
        )
        logger.info(
            "process_non_payment checkout_session_id=%s purchase_id=%s invoice_id=%s",
            checkout_session.id,
            purchase.id,
            invoice.id,
        )
        observe_reconciliation(ENTRY_POINT_NON_PAYMENT, "processed")
        return TransactionOutput(
            result=NonPaymentResult(checkout_session=checkout_session, purchase=purchase, invoice=invoice),
            effects=effects,
        )


__all__ = ["NonPaymentResult", "process_non_payment_checkout_session"]
