# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/discount_redemption_service.py

Discount Redemption Ledger.

- recompute_fee_calculation_discount: vincula el fee calculation al
  purchase y encuentra o crea la redención (purchase_id, discount_id).
- increment_payment_count: avanza la redención con cada pago exitoso según
  la duración del descuento. fully_redeemed es un latch: una vez True no
  se vuelve a evaluar.

Alcance del conteo: pagos exitosos del mismo purchase y, si la redención
tiene subscription_id, solo de esa suscripción. Con subscription_id nulo
el conteo es por purchase sin filtro de suscripción.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import DiscountDuration, PaymentStatus
from ..models import DiscountRedemption, FeeCalculation, Payment, Purchase
from ..repositories import (
    DiscountRedemptionRepository,
    DiscountRepository,
    FeeCalculationRepository,
    PaymentRepository,
)

logger = logging.getLogger(__name__)


class DiscountRedemptionService:
    def __init__(
        self,
        redemptions: Optional[DiscountRedemptionRepository] = None,
        discounts: Optional[DiscountRepository] = None,
        fee_calculations: Optional[FeeCalculationRepository] = None,
        payments: Optional[PaymentRepository] = None,
    ) -> None:
        self.redemptions = redemptions or DiscountRedemptionRepository()
        self.discounts = discounts or DiscountRepository()
        self.fee_calculations = fee_calculations or FeeCalculationRepository()
        self.payments = payments or PaymentRepository()

    async def recompute_fee_calculation_discount(
        self,
        session: AsyncSession,
        fee_calculation: FeeCalculation,
        purchase: Purchase,
    ) -> Optional[DiscountRedemption]:
        """
        Vincula el snapshot al purchase y registra la redención del descuento.

        Returns:
            La redención (nueva o existente), o None si no hay descuento.
        """
        if fee_calculation.purchase_id != purchase.id:
            await self.fee_calculations.update(session, fee_calculation, purchase_id=purchase.id)

        if not fee_calculation.discount_id:
            return None

        discount = await self.discounts.get_or_raise(session, fee_calculation.discount_id)
        redemption = await self.redemptions.upsert_for_purchase_and_discount(
            session,
            purchase_id=purchase.id,
            discount_id=discount.id,
            discount_name=discount.name,
            discount_code=discount.code,
            discount_amount=discount.amount,
            discount_amount_type=discount.amount_type,
            duration=discount.duration,
            number_of_payments=discount.number_of_payments,
            fully_redeemed=False,
            livemode=purchase.livemode,
        )
        if redemption is None:
            # Otra entrega ya la insertó
            redemption = await self.redemptions.get_for_purchase_and_discount(
                session, purchase.id, discount.id
            )
        return redemption

    async def attach_subscription(
        self,
        session: AsyncSession,
        *,
        purchase_id: str,
        subscription_id: str,
    ) -> Optional[DiscountRedemption]:
        """Acota la redención del purchase a la suscripción recién creada."""
        redemption = await self.redemptions.get_for_purchase(session, purchase_id)
        if redemption is None or redemption.subscription_id is not None:
            return redemption
        return await self.redemptions.update(session, redemption, subscription_id=subscription_id)

    async def increment_payment_count(
        self,
        session: AsyncSession,
        redemption: DiscountRedemption,
        payment: Payment,
    ) -> DiscountRedemption:
        """
        Aplica la política de duración al registrar un pago.

        - forever: nunca se agota
        - once: se agota con el primer pago exitoso
        - number_of_payments: se agota cuando los pagos exitosos en alcance
          alcanzan number_of_payments
        """
        if redemption.fully_redeemed:
            return redemption
        if payment.status != PaymentStatus.SUCCEEDED:
            return redemption

        if redemption.duration == DiscountDuration.FOREVER:
            return redemption

        if redemption.duration == DiscountDuration.ONCE:
            return await self._mark_fully_redeemed(session, redemption, payment)

        if redemption.duration == DiscountDuration.NUMBER_OF_PAYMENTS:
            count = await self.payments.count_succeeded_in_scope(
                session,
                purchase_id=redemption.purchase_id,
                subscription_id=redemption.subscription_id,
            )
            logger.debug(
                "discount_redemption_count redemption_id=%s count=%d threshold=%s",
                redemption.id,
                count,
                redemption.number_of_payments,
            )
            if count >= (redemption.number_of_payments or 0):
                return await self._mark_fully_redeemed(session, redemption, payment)
        return redemption

    async def _mark_fully_redeemed(
        self,
        session: AsyncSession,
        redemption: DiscountRedemption,
        payment: Payment,
    ) -> DiscountRedemption:
        logger.info(
            "discount_fully_redeemed redemption_id=%s payment_id=%s duration=%s",
            redemption.id,
            payment.id,
            redemption.duration,
        )
        return await self.redemptions.update(session, redemption, fully_redeemed=True)

    async def safely_increment_discount_redemption_subscription_payment(
        self,
        session: AsyncSession,
        payment: Payment,
    ) -> Optional[DiscountRedemption]:
        """
        Busca la redención del pago (por suscripción, luego por purchase) y
        la avanza. Sin redención no hay nada que hacer.
        """
        redemption: Optional[DiscountRedemption] = None
        if payment.subscription_id:
            redemption = await self.redemptions.get_for_subscription(session, payment.subscription_id)
        if redemption is None and payment.purchase_id:
            redemption = await self.redemptions.get_for_purchase(session, payment.purchase_id)
        if redemption is None:
            return None
        return await self.increment_payment_count(session, redemption, payment)


__all__ = ["DiscountRedemptionService"]
