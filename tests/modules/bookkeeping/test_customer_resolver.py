# -*- coding: utf-8 -*-
"""
backend/tests/modules/bookkeeping/test_customer_resolver.py

Tests del CustomerResolver:
- Precedencia purchase > customer_id > stripe id > alta nueva
- Conflicto de customer de Stripe (nunca reasigna en silencio)
- Efectos diferidos de alta (CustomerCreated, plan free por defecto)
- ensure_stripe_customer

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import pytest

from app.modules.bookkeeping.effects import TransactionEffects
from app.modules.bookkeeping.enums import EventType
from app.modules.bookkeeping.errors import ConflictError, ValidationError
from app.modules.bookkeeping.metrics import registry
from app.modules.bookkeeping.services import CREATE_DEFAULT_SUBSCRIPTION_TASK, CustomerResolver


def _conflicts_total() -> float:
    return registry.get_sample_value("bookkeeping_customer_conflicts_total") or 0.0


class TestCustomerResolution:

    @pytest.mark.asyncio
    async def test_purchase_customer_wins(
        self, db, fake_stripe, setup_org, setup_customer, setup_purchase, setup_checkout_session
    ):
        data = await setup_org()
        owner = await setup_customer(data["organization"])
        other = await setup_customer(data["organization"])
        purchase = await setup_purchase(owner, data["price"])
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], purchase_id=purchase.id, customer_id=other.id
        )

        resolved = await CustomerResolver(processor=fake_stripe).resolve(
            db, checkout_session, stripe_customer_id=None, effects=TransactionEffects()
        )

        assert resolved.customer.id == owner.id
        assert resolved.created is False

    @pytest.mark.asyncio
    async def test_conflicting_stripe_customer_raises(
        self, db, fake_stripe, setup_org, setup_customer, setup_purchase, setup_checkout_session
    ):
        """Un customer de Stripe distinto al vinculado al purchase es un conflicto."""
        data = await setup_org()
        customer = await setup_customer(data["organization"], stripe_customer_id="cus_linked")
        purchase = await setup_purchase(customer, data["price"])
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], purchase_id=purchase.id
        )
        before = _conflicts_total()

        with pytest.raises(ConflictError) as exc_info:
            await CustomerResolver(processor=fake_stripe).resolve(
                db, checkout_session, stripe_customer_id="cus_other", effects=TransactionEffects()
            )

        assert "cus_other" in str(exc_info.value)
        assert "cus_linked" in str(exc_info.value)
        assert customer.stripe_customer_id == "cus_linked"
        assert _conflicts_total() == before + 1

    @pytest.mark.asyncio
    async def test_unbound_customer_gets_bound(
        self, db, fake_stripe, setup_org, setup_customer, setup_checkout_session
    ):
        data = await setup_org()
        customer = await setup_customer(data["organization"], stripe_customer_id=None)
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], customer_id=customer.id
        )

        resolved = await CustomerResolver(processor=fake_stripe).resolve(
            db, checkout_session, stripe_customer_id="cus_new", effects=TransactionEffects()
        )

        assert resolved.customer.id == customer.id
        assert customer.stripe_customer_id == "cus_new"

    @pytest.mark.asyncio
    async def test_unbound_customer_cannot_take_stripe_id_of_another(
        self, db, fake_stripe, setup_org, setup_customer, setup_checkout_session
    ):
        """Un customer de Stripe queda vinculado a un solo customer."""
        data = await setup_org()
        owner = await setup_customer(data["organization"], stripe_customer_id="cus_owned")
        unbound = await setup_customer(data["organization"], stripe_customer_id=None)
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], customer_id=unbound.id
        )
        before = _conflicts_total()

        with pytest.raises(ConflictError, match="already linked"):
            await CustomerResolver(processor=fake_stripe).resolve(
                db, checkout_session, stripe_customer_id="cus_owned", effects=TransactionEffects()
            )

        assert unbound.stripe_customer_id is None
        assert owner.stripe_customer_id == "cus_owned"
        assert _conflicts_total() == before + 1

    @pytest.mark.asyncio
    async def test_found_by_stripe_customer_id(
        self, db, fake_stripe, setup_org, setup_customer, setup_checkout_session
    ):
        data = await setup_org()
        customer = await setup_customer(data["organization"], stripe_customer_id="cus_known")
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        resolved = await CustomerResolver(processor=fake_stripe).resolve(
            db, checkout_session, stripe_customer_id="cus_known", effects=TransactionEffects()
        )

        assert resolved.customer.id == customer.id
        assert resolved.created is False
        assert fake_stripe.calls_to("create_customer") == []

    @pytest.mark.asyncio
    async def test_creates_customer_from_session_email(
        self, db, fake_stripe, setup_org, setup_checkout_session
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], customer_email="new@example.com"
        )
        effects = TransactionEffects()

        resolved = await CustomerResolver(processor=fake_stripe).resolve(
            db, checkout_session, stripe_customer_id=None, effects=effects
        )

        customer = resolved.customer
        assert resolved.created is True
        assert customer.email == "new@example.com"
        assert customer.stripe_customer_id == "cus_fake_1"
        assert customer.pricing_model_id == data["pricing_model"].id
        assert [e.type for e in effects.events] == [EventType.CUSTOMER_CREATED]
        assert effects.tasks == []

    @pytest.mark.asyncio
    async def test_missing_email_raises(self, db, fake_stripe, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], customer_email=None
        )

        with pytest.raises(ValidationError):
            await CustomerResolver(processor=fake_stripe).resolve(
                db, checkout_session, stripe_customer_id=None, effects=TransactionEffects()
            )

    @pytest.mark.asyncio
    async def test_free_default_plan_enqueues_subscription_task(
        self, db, fake_stripe, setup_org, setup_price, setup_checkout_session
    ):
        data = await setup_org()
        data["product"].is_default = True
        free_price = await setup_price(data["product"], unit_price=0, is_default=True)
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        effects = TransactionEffects()

        resolved = await CustomerResolver(processor=fake_stripe).resolve(
            db, checkout_session, stripe_customer_id="cus_free", effects=effects
        )

        assert len(effects.tasks) == 1
        task = effects.tasks[0]
        assert task.name == CREATE_DEFAULT_SUBSCRIPTION_TASK
        assert task.payload["customer_id"] == resolved.customer.id
        assert task.payload["price_id"] == free_price.id


class TestEnsureStripeCustomer:

    @pytest.mark.asyncio
    async def test_returns_existing_id(self, db, fake_stripe, setup_org, setup_customer):
        data = await setup_org()
        customer = await setup_customer(data["organization"], stripe_customer_id="cus_existing")

        result = await CustomerResolver(processor=fake_stripe).ensure_stripe_customer(db, customer)

        assert result == "cus_existing"
        assert fake_stripe.calls_to("create_customer") == []

    @pytest.mark.asyncio
    async def test_creates_remote_customer_when_missing(self, db, fake_stripe, setup_org, setup_customer):
        data = await setup_org()
        customer = await setup_customer(data["organization"], stripe_customer_id=None)

        result = await CustomerResolver(processor=fake_stripe).ensure_stripe_customer(db, customer)

        assert result == "cus_fake_1"
        assert customer.stripe_customer_id == "cus_fake_1"
