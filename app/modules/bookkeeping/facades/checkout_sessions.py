# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/checkout_sessions.py

Operaciones de usuario sobre checkout sessions OPEN:
- edit_checkout_session
- edit_checkout_session_billing_address
- confirm_checkout_session

A diferencia de los webhooks, editar una sesión que ya no está OPEN es un
error del cliente (CheckoutSessionNotOpenError).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..effects import TransactionEffects, TransactionOutput
from ..enums import CheckoutSessionType, PurchaseStatus
from ..errors import InvalidStateError, ValidationError
from ..models import CheckoutSession, Customer, FeeCalculation
from ..schemas import EditCheckoutSessionInput
from ..services import (
    calculate_total_due_amount,
    calculate_total_fee_amount,
    fee_parameters_for,
    is_fee_ready,
)
from ..state_machine import assert_checkout_session_open
from ..utils.id_helpers import stripe_id_from_object_or_id
from .dependencies import BookkeepingDependencies, get_bookkeeping_dependencies

logger = logging.getLogger(__name__)


@dataclass
class EditCheckoutSessionResult:
    checkout_session: CheckoutSession
    fee_calculation: Optional[FeeCalculation]


@dataclass
class ConfirmCheckoutSessionResult:
    checkout_session: CheckoutSession
    customer: Customer
    fee_calculation: Optional[FeeCalculation]


async def _sync_payment_intent_amount(
    checkout_session: CheckoutSession,
    fee_calculation: Optional[FeeCalculation],
    deps: BookkeepingDependencies,
) -> None:
    if not checkout_session.stripe_payment_intent_id or fee_calculation is None:
        return
    total_due = calculate_total_due_amount(fee_calculation)
    if not total_due or total_due <= 0:
        return
    await deps.processor.update_payment_intent(
        checkout_session.stripe_payment_intent_id,
        livemode=checkout_session.livemode,
        amount=total_due,
        application_fee_amount=(
            calculate_total_fee_amount(fee_calculation) if checkout_session.livemode else None
        ),
    )


async def edit_checkout_session(
    session: AsyncSession,
    *,
    checkout_session_id: str,
    changes: Union[EditCheckoutSessionInput, dict[str, Any]],
    purchase_id: Optional[str] = None,
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[EditCheckoutSessionResult]:
    """
    Aplica una edición parcial a una sesión OPEN.

    Si la sesión es fee-ready se recalcula el fee calculation solo cuando
    cambiaron precio, descuento, país/región o cantidad; en otro caso se
    reutiliza el último snapshot.

    Raises:
        CheckoutSessionNotOpenError: la sesión no está OPEN
        InvalidStateError: el purchase indicado no está pending
    """
    deps = deps or get_bookkeeping_dependencies()
    if not isinstance(changes, EditCheckoutSessionInput):
        changes = EditCheckoutSessionInput.model_validate(changes)
    updates = changes.changes()

    checkout_session = await deps.checkout_session_repo.get_or_raise(session, checkout_session_id)
    assert_checkout_session_open(checkout_session)

    previous_parameters = fee_parameters_for(checkout_session)
    if updates:
        checkout_session = await deps.checkout_session_repo.update(session, checkout_session, **updates)

    fee_calculation: Optional[FeeCalculation] = None
    if is_fee_ready(checkout_session):
        fee_calculation = await deps.fee_calculations.recompute_or_reuse(
            session, checkout_session, previous_parameters
        )

    if purchase_id:
        purchase = await deps.purchase_repo.get_or_raise(session, purchase_id)
        if purchase.status != PurchaseStatus.PENDING:
            raise InvalidStateError(f"Purchase is not pending: {purchase.id} (status={purchase.status})")
        if "billing_address" in updates:
            await deps.purchase_repo.update(session, purchase, billing_address=updates["billing_address"])

    await _sync_payment_intent_amount(checkout_session, fee_calculation, deps)

    logger.info(
        "edit_checkout_session checkout_session_id=%s fields=%s fee_calculation_id=%s",
        checkout_session.id,
        sorted(updates),
        fee_calculation.id if fee_calculation else None,
    )
    return TransactionOutput(
        result=EditCheckoutSessionResult(checkout_session=checkout_session, fee_calculation=fee_calculation)
    )


async def edit_checkout_session_billing_address(
    session: AsyncSession,
    *,
    checkout_session_id: str,
    billing_address: dict[str, Any],
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[EditCheckoutSessionResult]:
    """
    Actualiza solo la dirección de facturación.

    Los fees se recalculan únicamente para organizaciones merchant-of-record
    (la dirección solo afecta impuestos en ese caso).
    """
    deps = deps or get_bookkeeping_dependencies()
    checkout_session = await deps.checkout_session_repo.get_or_raise(session, checkout_session_id)
    assert_checkout_session_open(checkout_session)

    previous_parameters = fee_parameters_for(checkout_session)
    checkout_session = await deps.checkout_session_repo.update(
        session, checkout_session, billing_address=billing_address
    )

    organization = await deps.organization_repo.get_or_raise(session, checkout_session.organization_id)
    fee_calculation: Optional[FeeCalculation] = None
    if organization.is_merchant_of_record:
        fee_calculation = await deps.fee_calculations.recompute_or_reuse(
            session, checkout_session, previous_parameters
        )

    logger.info(
        "edit_checkout_session_billing_address checkout_session_id=%s mor=%s fee_calculation_id=%s",
        checkout_session.id,
        organization.is_merchant_of_record,
        fee_calculation.id if fee_calculation else None,
    )
    return TransactionOutput(
        result=EditCheckoutSessionResult(checkout_session=checkout_session, fee_calculation=fee_calculation)
    )


async def confirm_checkout_session(
    session: AsyncSession,
    *,
    checkout_session_id: str,
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[ConfirmCheckoutSessionResult]:
    """
    Prepara una sesión OPEN para que el cliente confirme el pago en Stripe.

    Pasos:
      1. Fee calculation vigente (salvo add_payment_method)
      2. Customer: customer_id, luego purchase, luego alta por email
      3. Customer de Stripe garantizado
      4. Setup intent sin customer -> se le vincula
      5. Payment intent -> customer, monto y (livemode) application fee

    Raises:
        CheckoutSessionNotOpenError: la sesión no está OPEN
        NotFoundError: sesión de pago sin fee calculation ni datos para crearla
        ValidationError: no hay customer resoluble ni email
    """
    deps = deps or get_bookkeeping_dependencies()
    effects = TransactionEffects()
    checkout_session = await deps.checkout_session_repo.get_or_raise(session, checkout_session_id)
    assert_checkout_session_open(checkout_session)

    fee_calculation: Optional[FeeCalculation] = None
    if checkout_session.type != CheckoutSessionType.ADD_PAYMENT_METHOD:
        fee_calculation = await deps.fee_calculations.get_latest(session, checkout_session.id)
        if fee_calculation is None and is_fee_ready(checkout_session):
            fee_calculation = await deps.fee_calculations.create_for_checkout_session(
                session, checkout_session
            )
        if fee_calculation is None:
            fee_calculation = await deps.fee_calculations.get_latest_or_raise(session, checkout_session.id)

    customer: Optional[Customer] = None
    if checkout_session.customer_id:
        customer = await deps.customer_repo.get_or_raise(session, checkout_session.customer_id)
    elif checkout_session.purchase_id:
        purchase = await deps.purchase_repo.get_or_raise(session, checkout_session.purchase_id)
        customer = await deps.customer_repo.get_or_raise(session, purchase.customer_id)
    else:
        if not checkout_session.customer_email:
            raise ValidationError(f"Checkout session has no customer email: {checkout_session.id}")
        customer = await deps.customer_resolver.create_customer_bookkeeping(
            session,
            checkout_session=checkout_session,
            email=checkout_session.customer_email,
            name=checkout_session.customer_name or checkout_session.customer_email,
            stripe_customer_id=None,
            effects=effects,
        )

    stripe_customer_id = await deps.customer_resolver.ensure_stripe_customer(session, customer)
    if checkout_session.customer_id != customer.id:
        checkout_session = await deps.checkout_session_repo.update(
            session, checkout_session, customer_id=customer.id
        )

    if checkout_session.stripe_setup_intent_id:
        setup_intent = await deps.processor.get_setup_intent(
            checkout_session.stripe_setup_intent_id, livemode=checkout_session.livemode
        )
        current_customer = getattr(setup_intent, "customer", None)
        if current_customer is None and isinstance(setup_intent, dict):
            current_customer = setup_intent.get("customer")
        if not stripe_id_from_object_or_id(current_customer):
            await deps.processor.update_setup_intent(
                checkout_session.stripe_setup_intent_id,
                customer=stripe_customer_id,
                livemode=checkout_session.livemode,
            )

    if checkout_session.stripe_payment_intent_id and fee_calculation is not None:
        total_due = calculate_total_due_amount(fee_calculation)
        await deps.processor.update_payment_intent(
            checkout_session.stripe_payment_intent_id,
            livemode=checkout_session.livemode,
            customer=stripe_customer_id,
            amount=total_due if total_due else None,
            application_fee_amount=(
                calculate_total_fee_amount(fee_calculation)
                if checkout_session.livemode and total_due
                else None
            ),
        )

    logger.info(
        "confirm_checkout_session checkout_session_id=%s customer_id=%s fee_calculation_id=%s",
        checkout_session.id,
        customer.id,
        fee_calculation.id if fee_calculation else None,
    )
    return TransactionOutput(
        result=ConfirmCheckoutSessionResult(
            checkout_session=checkout_session,
            customer=customer,
            fee_calculation=fee_calculation,
        ),
        effects=effects,
    )


__all__ = [
    "EditCheckoutSessionResult",
    "ConfirmCheckoutSessionResult",
    "edit_checkout_session",
    "edit_checkout_session_billing_address",
    "confirm_checkout_session",
]
