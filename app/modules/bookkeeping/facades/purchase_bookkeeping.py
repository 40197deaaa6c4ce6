# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/purchase_bookkeeping.py

Bookkeeping de purchase para una checkout session: customer, purchase,
fee calculation y redención de descuento.

Pasos:
  1. Customer Resolver (purchase -> customer_id -> stripe id -> alta)
  2. Purchase Materializer (idempotente por checkout_session.purchase_id)
  3. Fee calculation vigente de la sesión, vinculada al purchase
     (purchase, tipo, precio y descuento de la sesión)
  4. Redención del descuento (upsert por (purchase_id, discount_id))

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..effects import TransactionEffects, TransactionOutput
from ..enums import FeeCalculationType
from ..errors import InvalidStateError
from ..models import (
    CheckoutSession,
    Customer,
    DiscountRedemption,
    FeeCalculation,
    Price,
    Product,
    Purchase,
)
from ..services import is_fee_ready
from .dependencies import BookkeepingDependencies, get_bookkeeping_dependencies

logger = logging.getLogger(__name__)


@dataclass
class PurchaseBookkeepingResult:
    purchase: Purchase
    customer: Customer
    price: Price
    product: Product
    fee_calculation: FeeCalculation
    discount_redemption: Optional[DiscountRedemption]
    customer_created: bool


async def process_purchase_bookkeeping_for_checkout_session(
    session: AsyncSession,
    *,
    checkout_session: CheckoutSession,
    stripe_customer_id: Optional[str],
    deps: Optional[BookkeepingDependencies] = None,
) -> TransactionOutput[PurchaseBookkeepingResult]:
    """
    Materializa customer + purchase + redención para la sesión.

    Args:
        session: Sesión de DB (transacción del llamador)
        checkout_session: sesión a procesar (se le fija purchase_id)
        stripe_customer_id: customer de Stripe del evento, si lo trae

    Raises:
        InvalidStateError: la sesión no tiene precio
        ConflictError: el customer de Stripe no coincide con el vinculado
        NotFoundError: no hay fee calculation y la sesión no es fee-ready
    """
    deps = deps or get_bookkeeping_dependencies()
    effects = TransactionEffects()

    if not checkout_session.price_id:
        raise InvalidStateError(
            f"Purchase bookkeeping requires a price (checkout session {checkout_session.id})"
        )
    price = await deps.price_repo.get_or_raise(session, checkout_session.price_id)
    product = await deps.product_repo.get_or_raise(session, price.product_id)

    resolved = await deps.customer_resolver.resolve(
        session,
        checkout_session,
        stripe_customer_id=stripe_customer_id,
        effects=effects,
    )
    customer = resolved.customer

    purchase = await deps.purchase_materializer.materialize(
        session,
        customer=customer,
        price=price,
        product=product,
        checkout_session=checkout_session,
    )

    fee_calculation = await deps.fee_calculations.get_latest(session, checkout_session.id)
    if fee_calculation is None and is_fee_ready(checkout_session):
        fee_calculation = await deps.fee_calculations.create_for_checkout_session(
            session, checkout_session
        )
    if fee_calculation is None:
        fee_calculation = await deps.fee_calculations.get_latest_or_raise(session, checkout_session.id)

    # El snapshot queda ligado al purchase con el precio y descuento de la sesión
    fee_calculation = await deps.fee_calculation_repo.update(
        session,
        fee_calculation,
        purchase_id=purchase.id,
        type=FeeCalculationType.CHECKOUT_SESSION_PAYMENT,
        price_id=price.id,
        discount_id=checkout_session.discount_id,
    )

    discount_redemption = await deps.discount_redemptions.recompute_fee_calculation_discount(
        session, fee_calculation, purchase
    )

    logger.info(
        "purchase_bookkeeping checkout_session_id=%s customer_id=%s purchase_id=%s "
        "fee_calculation_id=%s discount_redemption_id=%s",
        checkout_session.id,
        customer.id,
        purchase.id,
        fee_calculation.id,
        discount_redemption.id if discount_redemption else None,
    )
    return TransactionOutput(
        result=PurchaseBookkeepingResult(
            purchase=purchase,
            customer=customer,
            price=price,
            product=product,
            fee_calculation=fee_calculation,
            discount_redemption=discount_redemption,
            customer_created=resolved.created,
        ),
        effects=effects,
    )


__all__ = ["PurchaseBookkeepingResult", "process_purchase_bookkeeping_for_checkout_session"]
