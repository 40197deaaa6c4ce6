# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/purchase_materializer.py

Purchase Materializer: encuentra o crea exactamente un Purchase por
checkout session.

La forma del insert depende del modelo de cobro del precio:
- subscription: campos de intervalo, trial y precio por ciclo; la primera
  invoice vale 0 (la cobra el workflow de suscripciones).
- single_payment / usage: sin intervalo; primera invoice = total = precio.

checkout_session.purchase_id es la clave de idempotencia: una vez fijado,
se devuelve el purchase existente sin tocarlo.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Any, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import IntervalUnit, PriceType, PurchaseStatus
from ..errors import UnsupportedPriceTypeError
from ..models import CheckoutSession, Customer, Price, Product, Purchase
from ..repositories import CheckoutSessionRepository, PurchaseRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SubscriptionPurchaseInsert:
    organization_id: str
    customer_id: str
    price_id: str
    name: str
    interval_unit: Optional[IntervalUnit]
    interval_count: Optional[int]
    trial_period_days: int
    price_per_billing_cycle: int
    billing_address: Optional[dict[str, Any]]
    purchase_metadata: Optional[dict[str, Any]]
    livemode: bool
    price_type: PriceType = PriceType.SUBSCRIPTION
    first_invoice_value: int = 0
    total_purchase_value: Optional[int] = None
    quantity: int = 1
    status: PurchaseStatus = PurchaseStatus.OPEN


@dataclass(frozen=True, slots=True)
class SinglePaymentPurchaseInsert:
    """Compartido por single_payment y usage; price_type distingue."""

    organization_id: str
    customer_id: str
    price_id: str
    name: str
    price_type: PriceType
    first_invoice_value: int
    total_purchase_value: int
    billing_address: Optional[dict[str, Any]]
    purchase_metadata: Optional[dict[str, Any]]
    livemode: bool
    interval_unit: Optional[IntervalUnit] = None
    interval_count: Optional[int] = None
    trial_period_days: Optional[int] = None
    price_per_billing_cycle: Optional[int] = None
    quantity: int = 1
    status: PurchaseStatus = PurchaseStatus.OPEN


PurchaseInsert = Union[SubscriptionPurchaseInsert, SinglePaymentPurchaseInsert]


def build_purchase_insert(
    *,
    customer: Customer,
    price: Price,
    product: Product,
    checkout_session: CheckoutSession,
) -> PurchaseInsert:
    """
    Construye el insert del purchase según price.type.

    Raises:
        UnsupportedPriceTypeError: modelo de cobro desconocido
    """
    common = {
        "organization_id": customer.organization_id,
        "customer_id": customer.id,
        "price_id": price.id,
        "name": checkout_session.output_name or product.name,
        "billing_address": checkout_session.billing_address,
        "purchase_metadata": checkout_session.output_metadata,
        "livemode": checkout_session.livemode,
    }
    if price.type == PriceType.SUBSCRIPTION:
        return SubscriptionPurchaseInsert(
            interval_unit=price.interval_unit,
            interval_count=price.interval_count,
            trial_period_days=price.trial_period_days or 0,
            price_per_billing_cycle=price.unit_price,
            **common,
        )
    elif price.type in (PriceType.SINGLE_PAYMENT, PriceType.USAGE):
        value = price.unit_price or 0
        return SinglePaymentPurchaseInsert(
            price_type=PriceType(price.type),
            first_invoice_value=value,
            total_purchase_value=value,
            **common,
        )
    else:
        raise UnsupportedPriceTypeError(price.type)


class PurchaseMaterializer:
    def __init__(
        self,
        purchases: Optional[PurchaseRepository] = None,
        checkout_sessions: Optional[CheckoutSessionRepository] = None,
    ) -> None:
        self.purchases = purchases or PurchaseRepository()
        self.checkout_sessions = checkout_sessions or CheckoutSessionRepository()

    async def materialize(
        self,
        session: AsyncSession,
        *,
        customer: Customer,
        price: Price,
        product: Product,
        checkout_session: CheckoutSession,
    ) -> Purchase:
        """
        Devuelve el purchase de la sesión, creándolo si aún no existe.

        Deja checkout_session.purchase_id apuntando al purchase, de modo que
        una segunda invocación (replay) encuentra el mismo registro.
        """
        if checkout_session.purchase_id:
            existing = await self.purchases.get(session, checkout_session.purchase_id)
            if existing is not None:
                logger.info(
                    "purchase_materialize result=already_processed purchase_id=%s checkout_session_id=%s",
                    existing.id,
                    checkout_session.id,
                )
                return existing

        insert = build_purchase_insert(
            customer=customer,
            price=price,
            product=product,
            checkout_session=checkout_session,
        )
        purchase, created = await self.purchases.upsert_by_id(
            session,
            checkout_session.purchase_id,
            **asdict(insert),
        )
        await self.checkout_sessions.update(session, checkout_session, purchase_id=purchase.id)
        logger.info(
            "purchase_materialized purchase_id=%s created=%s price_type=%s checkout_session_id=%s",
            purchase.id,
            created,
            purchase.price_type,
            checkout_session.id,
        )
        return purchase


__all__ = [
    "SubscriptionPurchaseInsert",
    "SinglePaymentPurchaseInsert",
    "PurchaseInsert",
    "build_purchase_insert",
    "PurchaseMaterializer",
]
