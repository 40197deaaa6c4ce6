# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/setup_intents.py

Reconciliación de setup intents exitosos.

Flujos según el tipo de checkout session:
- add_payment_method: solo vincula el nuevo método de pago (opcionalmente
  a la suscripción objetivo o a todas las del customer).
- activate_subscription: activa la suscripción objetivo con el método.
- product: bookkeeping de purchase + creación de la suscripción vía
  SubscriptionWorkflow; el purchase queda PAID.
- invoice: no soportado (InvalidStateError).

Replays: si ya existe una suscripción con este stripe_setup_intent_id se
devuelve tal cual; una sesión terminal se devuelve sin reprocesar.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..effects import DomainEventInsert, TransactionEffects, TransactionOutput
from ..enums import (
    CheckoutSessionStatus,
    CheckoutSessionType,
    EventType,
    PurchaseStatus,
    SubscriptionStatus,
)
from ..errors import InvalidStateError, ValidationError
from ..metrics import observe_reconciliation, reconciliation_timer
from ..models import (
    CheckoutSession,
    Customer,
    Organization,
    PaymentMethod,
    Purchase,
    Subscription,
)
from ..schemas import CheckoutSessionIntentMetadata, SetupIntentSnapshot, parse_intent_metadata
from ..services import CreateSubscriptionParams, calculate_trial_end
from ..state_machine import (
    checkout_session_status_from_setup_intent_status,
    is_terminal,
    next_checkout_session_status,
)
from ..utils.datetime_helpers import utcnow
from .dependencies import BookkeepingDependencies, get_bookkeeping_dependencies
from .purchase_bookkeeping import process_purchase_bookkeeping_for_checkout_session

logger = logging.getLogger(__name__)

ENTRY_POINT_SETUP_INTENT = "setup_intent"


@dataclass
class SetupIntentProcessingResult:
    checkout_session: CheckoutSession
    organization: Organization
    customer: Optional[Customer]
    purchase: Optional[Purchase] = None
    subscription: Optional[Subscription] = None
    payment_method: Optional[PaymentMethod] = None
    billing_run: Optional[dict[str, Any]] = None
    already_processed: bool = False


async def checkout_session_from_setup_intent(
    session: AsyncSession,
    setup_intent: SetupIntentSnapshot,
    deps: BookkeepingDependencies,
) -> CheckoutSession:
    """
    Carga la checkout session referenciada por la metadata del setup intent.

    Raises:
        InvalidStateError: el setup intent no está succeeded o su metadata
            no es de tipo checkout_session
        NotFoundError: la sesión no existe
    """
    if setup_intent.status != "succeeded":
        raise InvalidStateError(
            f"Setup intent {setup_intent.id} is not succeeded (status={setup_intent.status})"
        )
    metadata = parse_intent_metadata(setup_intent.metadata)
    if not isinstance(metadata, CheckoutSessionIntentMetadata):
        raise InvalidStateError(
            f"Setup intent {setup_intent.id} metadata type {metadata.type} is not checkout_session"
        )
    return await deps.checkout_session_repo.get_or_raise(session, metadata.checkout_session_id)


async def _mark_session_status(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    setup_intent: SetupIntentSnapshot,
    deps: BookkeepingDependencies,
) -> CheckoutSession:
    status = next_checkout_session_status(
        checkout_session.status,
        checkout_session_status_from_setup_intent_status(setup_intent.status),
    )
    return await deps.checkout_session_repo.update(
        session,
        checkout_session,
        status=status,
        stripe_setup_intent_id=checkout_session.stripe_setup_intent_id or setup_intent.id,
    )


async def _replay_result(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    deps: BookkeepingDependencies,
    *,
    subscription: Optional[Subscription] = None,
) -> SetupIntentProcessingResult:
    organization = await deps.organization_repo.get_or_raise(session, checkout_session.organization_id)
    customer_id = checkout_session.customer_id or (subscription.customer_id if subscription else None)
    purchase = await deps.purchase_repo.get(session, checkout_session.purchase_id)
    if customer_id is None and purchase is not None:
        customer_id = purchase.customer_id
    customer = await deps.customer_repo.get(session, customer_id)
    return SetupIntentProcessingResult(
        checkout_session=checkout_session,
        organization=organization,
        customer=customer,
        purchase=purchase,
        subscription=subscription,
        already_processed=True,
    )


async def process_setup_intent_succeeded(
    session: AsyncSession,
    *,
    setup_intent: Any,
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[SetupIntentProcessingResult]:
    """
    Reconcilia un setup intent exitoso con su checkout session.

    Args:
        session: Sesión de DB (transacción del llamador)
        setup_intent: setup intent de Stripe (StripeObject, dict o snapshot)

    Returns:
        TransactionOutput con sesión, organización, customer y, según el
        flujo, purchase, suscripción y método de pago.

    Raises:
        InvalidStateError: sesión tipo invoice, metadata inválida, setup
            intent no succeeded, suscripción credit_trial o regla de una
            sola suscripción de pago
        ValidationError: precio sin intervalo o setup intent sin método de pago
    """
    deps = deps or get_bookkeeping_dependencies()
    setup_intent = SetupIntentSnapshot.from_stripe(setup_intent)

    with reconciliation_timer(ENTRY_POINT_SETUP_INTENT):
        logger.info(
            "process_setup_intent setup_intent_id=%s status=%s",
            setup_intent.id,
            setup_intent.status,
        )
        checkout_session = await checkout_session_from_setup_intent(session, setup_intent, deps)

        if checkout_session.type == CheckoutSessionType.INVOICE:
            raise InvalidStateError(
                f"Setup intents are not supported for invoice checkout sessions ({checkout_session.id})"
            )

        existing = await deps.subscription_repo.get_by_setup_intent_id(session, setup_intent.id)
        if existing is not None or is_terminal(checkout_session.status):
            logger.info(
                "process_setup_intent result=already_processed checkout_session_id=%s "
                "status=%s subscription_id=%s",
                checkout_session.id,
                checkout_session.status,
                existing.id if existing else None,
            )
            observe_reconciliation(ENTRY_POINT_SETUP_INTENT, "already_processed")
            return TransactionOutput(
                result=await _replay_result(session, checkout_session, deps, subscription=existing)
            )

        if checkout_session.type == CheckoutSessionType.ADD_PAYMENT_METHOD:
            output = await _process_add_payment_method(session, checkout_session, setup_intent, deps)
        elif checkout_session.type == CheckoutSessionType.ACTIVATE_SUBSCRIPTION:
            output = await _process_activate_subscription(session, checkout_session, setup_intent, deps)
        else:
            output = await _process_subscription_creation(session, checkout_session, setup_intent, deps)

        observe_reconciliation(ENTRY_POINT_SETUP_INTENT, "processed")
        return output


async def _customer_and_payment_method(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    setup_intent: SetupIntentSnapshot,
    deps: BookkeepingDependencies,
    effects: TransactionEffects,
) -> tuple[Customer, PaymentMethod]:
    resolved = await deps.customer_resolver.resolve(
        session,
        checkout_session,
        stripe_customer_id=setup_intent.stripe_customer_id,
        effects=effects,
    )
    payment_method = await deps.payment_methods.payment_method_from_setup_intent(
        session, setup_intent, resolved.customer
    )
    return resolved.customer, payment_method


async def _process_add_payment_method(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    setup_intent: SetupIntentSnapshot,
    deps: BookkeepingDependencies,
) -> TransactionOutput[SetupIntentProcessingResult]:
    effects = TransactionEffects()
    checkout_session = await _mark_session_status(session, checkout_session, setup_intent, deps)
    customer, payment_method = await _customer_and_payment_method(
        session, checkout_session, setup_intent, deps, effects
    )

    target_subscription: Optional[Subscription] = None
    if checkout_session.target_subscription_id:
        target_subscription = await deps.subscription_repo.get_or_raise(
            session, checkout_session.target_subscription_id
        )
        if target_subscription.status == SubscriptionStatus.CREDIT_TRIAL:
            raise InvalidStateError(
                f"Cannot add a payment method to credit trial subscription {target_subscription.id}"
            )

    await deps.payment_methods.attach_to_subscriptions(
        session,
        payment_method,
        customer=customer,
        target_subscription=target_subscription,
        automatically_update_subscriptions=checkout_session.automatically_update_subscriptions,
    )
    organization = await deps.organization_repo.get_or_raise(session, checkout_session.organization_id)
    logger.info(
        "process_setup_intent flow=add_payment_method checkout_session_id=%s customer_id=%s payment_method_id=%s",
        checkout_session.id,
        customer.id,
        payment_method.id,
    )
    return TransactionOutput(
        result=SetupIntentProcessingResult(
            checkout_session=checkout_session,
            organization=organization,
            customer=customer,
            subscription=target_subscription,
            payment_method=payment_method,
        ),
        effects=effects,
    )


async def _process_activate_subscription(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    setup_intent: SetupIntentSnapshot,
    deps: BookkeepingDependencies,
) -> TransactionOutput[SetupIntentProcessingResult]:
    effects = TransactionEffects()
    if not checkout_session.target_subscription_id:
        raise InvalidStateError(
            f"Activate subscription checkout session {checkout_session.id} has no target subscription"
        )
    checkout_session = await _mark_session_status(session, checkout_session, setup_intent, deps)
    customer, payment_method = await _customer_and_payment_method(
        session, checkout_session, setup_intent, deps, effects
    )
    subscription = await deps.subscription_repo.get_or_raise(session, checkout_session.target_subscription_id)
    activated = await deps.subscription_workflow.activate_subscription(
        session,
        subscription,
        payment_method=payment_method,
        stripe_setup_intent_id=setup_intent.id,
    )
    organization = await deps.organization_repo.get_or_raise(session, checkout_session.organization_id)
    logger.info(
        "process_setup_intent flow=activate_subscription checkout_session_id=%s subscription_id=%s",
        checkout_session.id,
        activated.subscription.id,
    )
    return TransactionOutput(
        result=SetupIntentProcessingResult(
            checkout_session=checkout_session,
            organization=organization,
            customer=customer,
            subscription=activated.subscription,
            payment_method=payment_method,
            billing_run=activated.billing_run,
        ),
        effects=effects,
    )


async def _process_subscription_creation(
    session: AsyncSession,
    checkout_session: CheckoutSession,
    setup_intent: SetupIntentSnapshot,
    deps: BookkeepingDependencies,
) -> TransactionOutput[SetupIntentProcessingResult]:
    effects = TransactionEffects()
    checkout_session = await _mark_session_status(session, checkout_session, setup_intent, deps)

    bookkeeping = await process_purchase_bookkeeping_for_checkout_session(
        session,
        checkout_session=checkout_session,
        stripe_customer_id=setup_intent.stripe_customer_id,
        deps=deps,
    )
    effects.merge(bookkeeping.effects)
    customer = bookkeeping.result.customer
    price = bookkeeping.result.price
    product = bookkeeping.result.product
    purchase = bookkeeping.result.purchase

    payment_method = await deps.payment_methods.payment_method_from_setup_intent(
        session, setup_intent, customer
    )

    if not price.interval_unit:
        raise ValidationError(f"Price {price.id} has no interval")

    organization = await deps.organization_repo.get_or_raise(session, checkout_session.organization_id)
    subscriptions = await deps.subscription_repo.list_for_customer(session, customer.id)
    if not organization.allow_multiple_subscriptions_per_customer:
        active_paid = [
            s for s in subscriptions if s.status == SubscriptionStatus.ACTIVE and not s.is_free_plan
        ]
        if active_paid:
            raise InvalidStateError(
                f"Customer {customer.id} already has an active paid subscription "
                f"({active_paid[0].id}); multiple subscriptions are not allowed"
            )

    has_had_trial = any(s.trial_end is not None for s in subscriptions)
    trial_period_days = (
        purchase.trial_period_days if purchase.trial_period_days is not None else price.trial_period_days
    )
    trial_end = calculate_trial_end(has_had_trial=has_had_trial, trial_period_days=trial_period_days)

    created = await deps.subscription_workflow.create_subscription(
        session,
        CreateSubscriptionParams(
            customer=customer,
            price=price,
            product=product,
            payment_method=payment_method,
            interval=price.interval_unit,
            interval_count=price.interval_count,
            quantity=checkout_session.quantity or 1,
            name=checkout_session.output_name,
            livemode=checkout_session.livemode,
            stripe_setup_intent_id=setup_intent.id,
            purchase_id=purchase.id,
            trial_end=trial_end,
            metadata=checkout_session.output_metadata,
            preserve_billing_cycle_anchor=checkout_session.preserve_billing_cycle_anchor,
        ),
    )
    subscription = created.subscription

    await deps.discount_redemptions.attach_subscription(
        session, purchase_id=purchase.id, subscription_id=subscription.id
    )

    purchase = await deps.purchase_repo.update(
        session,
        purchase,
        status=PurchaseStatus.PAID,
        purchase_date=utcnow(),
    )

    if created.created:
        effects.emit(
            DomainEventInsert(
                type=EventType.SUBSCRIPTION_CREATED,
                organization_id=organization.id,
                object_id=subscription.id,
                payload={"customer_id": customer.id, "price_id": price.id},
                livemode=checkout_session.livemode,
            )
        )
    effects.emit(
        DomainEventInsert(
            type=EventType.PURCHASE_COMPLETED,
            organization_id=organization.id,
            object_id=purchase.id,
            payload={"customer_id": customer.id, "checkout_session_id": checkout_session.id},
            livemode=checkout_session.livemode,
        )
    )

    logger.info(
        "process_setup_intent flow=create_subscription checkout_session_id=%s purchase_id=%s "
        "subscription_id=%s trial_end=%s",
        checkout_session.id,
        purchase.id,
        subscription.id,
        trial_end,
    )
    return TransactionOutput(
        result=SetupIntentProcessingResult(
            checkout_session=checkout_session,
            organization=organization,
            customer=customer,
            purchase=purchase,
            subscription=subscription,
            payment_method=payment_method,
            billing_run=created.billing_run,
        ),
        effects=effects,
    )


__all__ = [
    "SetupIntentProcessingResult",
    "checkout_session_from_setup_intent",
    "process_setup_intent_succeeded",
]
