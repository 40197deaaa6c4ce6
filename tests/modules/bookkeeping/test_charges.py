# -*- coding: utf-8 -*-
"""
backend/tests/modules/bookkeeping/test_charges.py

Tests de reconciliación de charges de Stripe:
- Charge succeeded / pending / failed sobre sesiones de producto
- Replays del webhook sobre sesiones terminales (no-op)
- Conflicto de customer de Stripe
- Sesiones tipo invoice (awaiting confirmation, ya pagada)

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from app.modules.bookkeeping.enums import (
    CheckoutSessionStatus,
    CheckoutSessionType,
    EventType,
    InvoiceStatus,
)
from app.modules.bookkeeping.errors import ConflictError
from app.modules.bookkeeping.facades.charges import process_stripe_charge_for_checkout_session
from app.modules.bookkeeping.metrics import registry
from app.modules.bookkeeping.models import Invoice, Purchase


def _charge(status="succeeded", amount=1000, customer="cus_123", **extra):
    charge = {
        "id": "ch_test_1",
        "status": status,
        "amount": amount,
        "customer": customer,
        "billing_details": {"name": "Ada Charge", "email": "ada.charge@example.com"},
    }
    charge.update(extra)
    return charge


def _reconciliations(entry_point: str, outcome: str) -> float:
    return (
        registry.get_sample_value(
            "bookkeeping_reconciliations_total",
            {"entry_point": entry_point, "outcome": outcome},
        )
        or 0.0
    )


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


class TestProductSessionCharges:

    @pytest.mark.asyncio
    async def test_succeeded_charge_materializes_purchase_and_invoice(
        self, db, deps, fake_stripe, setup_org, setup_checkout_session
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        before = _reconciliations("charge", "processed")

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(), deps=deps
        )

        result = output.result
        assert result.already_processed is False
        assert result.checkout_session.status == CheckoutSessionStatus.SUCCEEDED
        assert result.checkout_session.purchase_id == result.purchase.id
        assert result.checkout_session.customer_name == "Ada Charge"
        assert result.checkout_session.customer_email == "ada.charge@example.com"
        assert result.invoice.purchase_id == result.purchase.id
        assert [e.type for e in output.effects.events] == [EventType.CUSTOMER_CREATED]
        # El customer de Stripe del charge se vincula; no se crea uno remoto
        assert fake_stripe.calls_to("create_customer") == []
        assert _reconciliations("charge", "processed") == before + 1

    @pytest.mark.asyncio
    async def test_pending_charge_also_materializes(self, db, deps, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(status="pending"), deps=deps
        )

        assert output.result.checkout_session.status == CheckoutSessionStatus.PENDING
        assert output.result.purchase is not None
        assert output.result.invoice is not None

    @pytest.mark.asyncio
    async def test_failed_charge_only_records_status(self, db, deps, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        before = _reconciliations("charge", "failed_status")

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(status="failed"), deps=deps
        )

        assert output.result.checkout_session.status == CheckoutSessionStatus.FAILED
        assert output.result.purchase is None
        assert output.effects.is_empty
        assert await _count(db, Purchase) == 0
        assert _reconciliations("charge", "failed_status") == before + 1

    @pytest.mark.asyncio
    async def test_replay_on_terminal_session_is_a_no_op(self, db, deps, setup_org, setup_checkout_session):
        """El mismo webhook dos veces: un purchase, una invoice, sin efectos nuevos."""
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        first = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(), deps=deps
        )
        second = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(), deps=deps
        )

        assert second.result.already_processed is True
        assert second.result.purchase.id == first.result.purchase.id
        assert second.result.invoice.id == first.result.invoice.id
        assert second.effects.is_empty
        assert await _count(db, Purchase) == 1
        assert await _count(db, Invoice) == 1

    @pytest.mark.asyncio
    async def test_different_stripe_customer_conflicts(
        self, db, deps, setup_org, setup_customer, setup_purchase, setup_checkout_session
    ):
        data = await setup_org()
        customer = await setup_customer(data["organization"], stripe_customer_id="cus_linked")
        purchase = await setup_purchase(customer, data["price"])
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], purchase_id=purchase.id
        )

        with pytest.raises(ConflictError):
            await process_stripe_charge_for_checkout_session(
                db, checkout_session_id=checkout_session.id, charge=_charge(customer="cus_other"), deps=deps
            )

    @pytest.mark.asyncio
    async def test_charge_reuses_quoted_fee_calculation(
        self, db, deps, setup_org, setup_checkout_session, setup_fee_calculation
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        quoted = await setup_fee_calculation(checkout_session)

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(), deps=deps
        )

        assert quoted.purchase_id == output.result.purchase.id


class TestInvoiceSessionCharges:

    @pytest.fixture
    def invoice_session(self, setup_org, setup_customer, setup_invoice, setup_checkout_session):
        async def _invoice_session():
            data = await setup_org()
            customer = await setup_customer(data["organization"])
            invoice = await setup_invoice(customer, line_items=[("Consulting", 1, 1000)])
            checkout_session = await setup_checkout_session(
                data["organization"],
                type=CheckoutSessionType.INVOICE,
                invoice_id=invoice.id,
                customer_id=customer.id,
            )
            return customer, invoice, checkout_session

        return _invoice_session

    @pytest.mark.asyncio
    async def test_pending_charge_awaits_confirmation(self, db, deps, invoice_session):
        _, invoice, checkout_session = await invoice_session()

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(status="pending"), deps=deps
        )

        assert output.result.checkout_session.status == CheckoutSessionStatus.PENDING
        assert output.result.invoice.id == invoice.id
        assert output.result.invoice.status == InvoiceStatus.AWAITING_PAYMENT_CONFIRMATION
        assert output.result.purchase is None

    @pytest.mark.asyncio
    async def test_invoice_paid_before_pending_charge_stays_paid(
        self, db, deps, invoice_session, setup_payment
    ):
        customer, invoice, checkout_session = await invoice_session()
        await setup_payment(customer, invoice_id=invoice.id, amount=1000)

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(status="pending"), deps=deps
        )

        assert output.result.invoice.status == InvoiceStatus.PAID

    @pytest.mark.asyncio
    async def test_succeeded_charge_pays_invoice(self, db, deps, invoice_session):
        _, _, checkout_session = await invoice_session()

        output = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(), deps=deps
        )

        assert output.result.checkout_session.status == CheckoutSessionStatus.SUCCEEDED
        assert output.result.invoice.status == InvoiceStatus.PAID

    @pytest.mark.asyncio
    async def test_replay_returns_current_invoice(self, db, deps, invoice_session):
        _, invoice, checkout_session = await invoice_session()
        await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(status="pending"), deps=deps
        )

        replay = await process_stripe_charge_for_checkout_session(
            db, checkout_session_id=checkout_session.id, charge=_charge(), deps=deps
        )

        assert replay.result.already_processed is True
        assert replay.result.checkout_session.status == CheckoutSessionStatus.PENDING
        assert replay.result.invoice.id == invoice.id
