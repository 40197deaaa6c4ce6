# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/charges.py

Reconciliación de charges de Stripe contra checkout sessions.

- process_stripe_charge_for_checkout_session: sesiones de producto. Con
  charge succeeded/pending corre el bookkeeping de purchase y crea la
  invoice inicial; con charge fallido solo persiste el estado.
- process_stripe_charge_for_invoice_checkout_session: sesiones tipo
  invoice; decide el estado de la invoice con los pagos previos netos.

Una sesión ya terminal es un replay del webhook: se devuelve el estado
actual sin reprocesar (no es error).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..effects import TransactionEffects, TransactionOutput
from ..enums import CheckoutSessionStatus, CheckoutSessionType
from ..metrics import observe_reconciliation, reconciliation_timer
from ..models import CheckoutSession, Invoice, Purchase
from ..schemas import ChargeSnapshot
from ..state_machine import (
    checkout_session_status_from_charge_status,
    is_terminal,
    next_checkout_session_status,
)
from .dependencies import BookkeepingDependencies, get_bookkeeping_dependencies
from .purchase_bookkeeping import process_purchase_bookkeeping_for_checkout_session

logger = logging.getLogger(__name__)

ENTRY_POINT_CHARGE = "charge"
ENTRY_POINT_INVOICE_CHARGE = "invoice_charge"


@dataclass
class ChargeProcessingResult:
    checkout_session: CheckoutSession
    purchase: Optional[Purchase]
    invoice: Optional[Invoice]
    already_processed: bool = False


def _outcome_for(status: CheckoutSessionStatus) -> str:
    return "failed_status" if status == CheckoutSessionStatus.FAILED else "processed"


async def _current_state(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    deps: BookkeepingDependencies,
) -> ChargeProcessingResult:
    purchase = await deps.purchase_repo.get(session, checkout_session.purchase_id)
    invoice: Optional[Invoice] = None
    if checkout_session.invoice_id:
        invoice = await deps.invoice_repo.get(session, checkout_session.invoice_id)
    elif purchase is not None:
        invoice = await deps.invoice_repo.get_by_purchase_id(session, purchase.id)
    return ChargeProcessingResult(
        checkout_session=checkout_session,
        purchase=purchase,
        invoice=invoice,
        already_processed=True,
    )


async def process_stripe_charge_for_checkout_session(
    session: AsyncSession,
    *,
    checkout_session_id: str,
    charge: Any,
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[ChargeProcessingResult]:
    """
    Procesa un charge de Stripe para una checkout session.

    Las sesiones tipo invoice se delegan a
    process_stripe_charge_for_invoice_checkout_session.

    Args:
        session: Sesión de DB (transacción del llamador)
        checkout_session_id: ID de la checkout session
        charge: charge de Stripe (StripeObject, dict o ChargeSnapshot)

    Returns:
        TransactionOutput con checkout session, purchase e invoice
    """
    deps = deps or get_bookkeeping_dependencies()
    charge = ChargeSnapshot.from_stripe(charge)
    checkout_session = await deps.checkout_session_repo.get_or_raise(session, checkout_session_id)

    if checkout_session.type == CheckoutSessionType.INVOICE:
        return await process_stripe_charge_for_invoice_checkout_session(
            session,
            checkout_session=checkout_session,
            charge=charge,
            deps=deps,
        )

    with reconciliation_timer(ENTRY_POINT_CHARGE):
        logger.info(
            "process_charge checkout_session_id=%s charge_id=%s charge_status=%s",
            checkout_session.id,
            charge.id,
            charge.status,
        )
        if is_terminal(checkout_session.status):
            logger.info(
                "process_charge result=already_processed checkout_session_id=%s status=%s",
                checkout_session.id,
                checkout_session.status,
            )
            observe_reconciliation(ENTRY_POINT_CHARGE, "already_processed")
            return TransactionOutput(result=await _current_state(session, checkout_session, deps))

        effects = TransactionEffects()
        status = next_checkout_session_status(
            checkout_session.status,
            checkout_session_status_from_charge_status(charge.status),
        )

        purchase: Optional[Purchase] = None
        invoice: Optional[Invoice] = None
        if status in (CheckoutSessionStatus.SUCCEEDED, CheckoutSessionStatus.PENDING):
            bookkeeping = await process_purchase_bookkeeping_for_checkout_session(
                session,
                checkout_session=checkout_session,
                stripe_customer_id=charge.stripe_customer_id,
                deps=deps,
            )
            effects.merge(bookkeeping.effects)
            purchase = bookkeeping.result.purchase
            invoice, _, _ = await deps.invoices.create_initial_invoice_for_purchase(session, purchase)

        updates: dict[str, Any] = {"status": status}
        if purchase is not None:
            updates["purchase_id"] = purchase.id
        if charge.billing_details is not None:
            if charge.billing_details.name:
                updates["customer_name"] = charge.billing_details.name
            if charge.billing_details.email:
                updates["customer_email"] = charge.billing_details.email
        checkout_session = await deps.checkout_session_repo.update(session, checkout_session, **updates)

        logger.info(
            "process_charge checkout_session_id=%s status=%s purchase_id=%s invoice_id=%s invoice_status=%s",
            checkout_session.id,
            checkout_session.status,
            purchase.id if purchase else None,
            invoice.id if invoice else None,
            invoice.status if invoice else None,
        )
        observe_reconciliation(ENTRY_POINT_CHARGE, _outcome_for(status))
        return TransactionOutput(
            result=ChargeProcessingResult(
                checkout_session=checkout_session,
                purchase=purchase,
                invoice=invoice,
            ),
            effects=effects,
        )


async def process_stripe_charge_for_invoice_checkout_session(
    session: AsyncSession,
    *,
    checkout_session: CheckoutSession,
    charge: Any,
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[ChargeProcessingResult]:
    """
    Procesa un charge para una sesión tipo invoice.

    El estado de la invoice se decide con invoice_status_for_charge: los
    pagos previos que ya cubren el total ganan sobre un charge pending.
    """
    deps = deps or get_bookkeeping_dependencies()
    charge = ChargeSnapshot.from_stripe(charge)

    with reconciliation_timer(ENTRY_POINT_INVOICE_CHARGE):
        logger.info(
            "process_invoice_charge checkout_session_id=%s invoice_id=%s charge_status=%s amount=%d",
            checkout_session.id,
            checkout_session.invoice_id,
            charge.status,
            charge.amount,
        )
        if is_terminal(checkout_session.status):
            logger.info(
                "process_invoice_charge result=already_processed checkout_session_id=%s status=%s",
                checkout_session.id,
                checkout_session.status,
            )
            observe_reconciliation(ENTRY_POINT_INVOICE_CHARGE, "already_processed")
            return TransactionOutput(result=await _current_state(session, checkout_session, deps))

        status = next_checkout_session_status(
            checkout_session.status,
            checkout_session_status_from_charge_status(charge.status),
        )
        checkout_session = await deps.checkout_session_repo.update(session, checkout_session, status=status)

        invoice = await deps.invoice_repo.get_or_raise(session, checkout_session.invoice_id)
        invoice = await deps.invoices.apply_charge_to_invoice(
            session,
            invoice,
            checkout_session_status=status,
            charge_amount=charge.amount,
        )

        observe_reconciliation(ENTRY_POINT_INVOICE_CHARGE, _outcome_for(status))
        return TransactionOutput(
            result=ChargeProcessingResult(
                checkout_session=checkout_session,
                purchase=None,
                invoice=invoice,
            )
        )


__all__ = [
    "ChargeProcessingResult",
    "process_stripe_charge_for_checkout_session",
    "process_stripe_charge_for_invoice_checkout_session",
]
