# -*- coding: utf-8 -*-
"""
backend/tests/modules/bookkeeping/test_purchase_bookkeeping.py

Tests de process_purchase_bookkeeping_for_checkout_session:
- customer + purchase + fee calculation vinculada
- el snapshot toma tipo, precio y descuento de la sesión
- redención de descuento idempotente
- sesión sin precio

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import pytest

from app.modules.bookkeeping.enums import EventType, FeeCalculationType
from app.modules.bookkeeping.errors import InvalidStateError
from app.modules.bookkeeping.facades.purchase_bookkeeping import (
    process_purchase_bookkeeping_for_checkout_session,
)


class TestPurchaseBookkeeping:

    @pytest.mark.asyncio
    async def test_creates_customer_purchase_and_links_fee_calculation(
        self, db, deps, setup_org, setup_checkout_session
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        output = await process_purchase_bookkeeping_for_checkout_session(
            db, checkout_session=checkout_session, stripe_customer_id="cus_new", deps=deps
        )

        result = output.result
        assert result.customer_created is True
        assert result.customer.stripe_customer_id == "cus_new"
        assert checkout_session.purchase_id == result.purchase.id
        assert result.fee_calculation.purchase_id == result.purchase.id
        assert result.discount_redemption is None
        assert [e.type for e in output.effects.events] == [EventType.CUSTOMER_CREATED]

    @pytest.mark.asyncio
    async def test_replay_reuses_purchase_and_redemption(
        self, db, deps, setup_org, setup_discount, setup_checkout_session
    ):
        data = await setup_org()
        discount = await setup_discount(data["organization"])
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], discount_id=discount.id
        )

        first = await process_purchase_bookkeeping_for_checkout_session(
            db, checkout_session=checkout_session, stripe_customer_id=None, deps=deps
        )
        second = await process_purchase_bookkeeping_for_checkout_session(
            db, checkout_session=checkout_session, stripe_customer_id=None, deps=deps
        )

        assert second.result.purchase.id == first.result.purchase.id
        assert second.result.customer.id == first.result.customer.id
        assert second.result.customer_created is False
        assert first.result.discount_redemption is not None
        assert second.result.discount_redemption.id == first.result.discount_redemption.id
        assert second.effects.is_empty

    @pytest.mark.asyncio
    async def test_session_without_price_is_rejected(self, db, deps, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"])

        with pytest.raises(InvalidStateError, match="requires a price"):
            await process_purchase_bookkeeping_for_checkout_session(
                db, checkout_session=checkout_session, stripe_customer_id=None, deps=deps
            )

    @pytest.mark.asyncio
    async def test_fee_calculation_takes_price_and_discount_of_session(
        self, db, deps, setup_org, setup_discount, setup_checkout_session, setup_fee_calculation
    ):
        data = await setup_org()
        discount = await setup_discount(data["organization"])
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        snapshot = await setup_fee_calculation(checkout_session)
        snapshot.type = FeeCalculationType.SUBSCRIPTION_PAYMENT
        snapshot.price_id = None
        # Descuento aplicado después del snapshot
        checkout_session.discount_id = discount.id
        await db.flush()

        output = await process_purchase_bookkeeping_for_checkout_session(
            db, checkout_session=checkout_session, stripe_customer_id=None, deps=deps
        )

        fee_calculation = output.result.fee_calculation
        assert fee_calculation.id == snapshot.id
        assert fee_calculation.purchase_id == output.result.purchase.id
        assert fee_calculation.type == FeeCalculationType.CHECKOUT_SESSION_PAYMENT
        assert fee_calculation.price_id == data["price"].id
        assert fee_calculation.discount_id == discount.id
        assert output.result.discount_redemption is not None
        assert output.result.discount_redemption.discount_id == discount.id
