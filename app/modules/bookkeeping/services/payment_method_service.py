# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/payment_method_service.py

Métodos de pago obtenidos de setup intents exitosos.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import PaymentMethodType
from ..errors import ValidationError
from ..models import Customer, PaymentMethod, Subscription
from ..providers import ProcessorClient
from ..repositories import PaymentMethodRepository, SubscriptionRepository
from ..schemas import SetupIntentSnapshot

logger = logging.getLogger(__name__)


def _payment_method_type(stripe_payment_method: Any) -> PaymentMethodType:
    raw = getattr(stripe_payment_method, "type", None)
    if raw is None and isinstance(stripe_payment_method, dict):
        raw = stripe_payment_method.get("type")
    try:
        return PaymentMethodType(raw)
    except ValueError:
        return PaymentMethodType.CARD


def _billing_details(stripe_payment_method: Any) -> Optional[dict[str, Any]]:
    details = getattr(stripe_payment_method, "billing_details", None)
    if details is None and isinstance(stripe_payment_method, dict):
        details = stripe_payment_method.get("billing_details")
    if details is None:
        return None
    to_dict = getattr(details, "to_dict", None)
    return to_dict() if callable(to_dict) else dict(details)


class PaymentMethodService:
    def __init__(
        self,
        processor: ProcessorClient,
        payment_methods: Optional[PaymentMethodRepository] = None,
        subscriptions: Optional[SubscriptionRepository] = None,
    ) -> None:
        self.processor = processor
        self.payment_methods = payment_methods or PaymentMethodRepository()
        self.subscriptions = subscriptions or SubscriptionRepository()

    async def payment_method_from_setup_intent(
        self,
        session: AsyncSession,
        setup_intent: SetupIntentSnapshot,
        customer: Customer,
    ) -> PaymentMethod:
        """
        Encuentra o crea el PaymentMethod del setup intent para el customer.

        Raises:
            ValidationError: el setup intent no trae payment_method
        """
        stripe_payment_method_id = setup_intent.stripe_payment_method_id
        if not stripe_payment_method_id:
            raise ValidationError(f"Setup intent {setup_intent.id} has no payment method")

        existing = await self.payment_methods.get_by_stripe_payment_method_id(
            session, stripe_payment_method_id
        )
        if existing is not None:
            return existing

        stripe_payment_method = await self.processor.get_payment_method(
            stripe_payment_method_id, livemode=customer.livemode
        )
        is_first = not await self.payment_methods.list_for_customer(session, customer.id)
        payment_method = await self.payment_methods.create(
            session,
            customer_id=customer.id,
            type=_payment_method_type(stripe_payment_method),
            stripe_payment_method_id=stripe_payment_method_id,
            default=is_first,
            billing_details=_billing_details(stripe_payment_method),
            livemode=customer.livemode,
        )
        logger.info(
            "payment_method_created payment_method_id=%s customer_id=%s default=%s",
            payment_method.id,
            customer.id,
            is_first,
        )
        return payment_method

    async def attach_to_subscriptions(
        self,
        session: AsyncSession,
        payment_method: PaymentMethod,
        *,
        customer: Customer,
        target_subscription: Optional[Subscription],
        automatically_update_subscriptions: bool,
    ) -> list[Subscription]:
        """
        Propaga el método de pago como default: a la suscripción objetivo, o
        a todas las suscripciones vigentes del customer.
        """
        if target_subscription is not None:
            targets = [target_subscription]
        elif automatically_update_subscriptions:
            targets = await self.subscriptions.list_current_for_customer(session, customer.id)
        else:
            return []

        updated = []
        for subscription in targets:
            updated.append(
                await self.subscriptions.update(
                    session, subscription, default_payment_method_id=payment_method.id
                )
            )
        logger.info(
            "payment_method_attached payment_method_id=%s subscriptions=%d",
            payment_method.id,
            len(updated),
        )
        return updated


__all__ = ["PaymentMethodService"]
