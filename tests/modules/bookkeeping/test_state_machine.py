# -*- coding: utf-8 -*-
"""
backend/tests/modules/bookkeeping/test_state_machine.py

Tests de las máquinas de estado de bookkeeping:
- Checkout session: OPEN -> terminal, terminales inmutables
- Mapeo de estados de Stripe (charge / setup intent)
- Invoice: precedencia "ya cubierta" > "pending" > "la completa"
- Purchase desde estado del pago

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.modules.bookkeeping.enums import (
    CheckoutSessionStatus,
    InvoiceStatus,
    PaymentStatus,
    PurchaseStatus,
)
from app.modules.bookkeeping.errors import CheckoutSessionNotOpenError, InvalidStateError
from app.modules.bookkeeping.state_machine import (
    assert_checkout_session_open,
    checkout_session_status_from_charge_status,
    checkout_session_status_from_setup_intent_status,
    invoice_status_for_charge,
    is_terminal,
    next_checkout_session_status,
    purchase_status_from_payment_status,
)


class TestCheckoutSessionTransitions:

    def test_only_open_is_not_terminal(self):
        assert is_terminal(CheckoutSessionStatus.OPEN) is False
        for status in (
            CheckoutSessionStatus.PENDING,
            CheckoutSessionStatus.SUCCEEDED,
            CheckoutSessionStatus.FAILED,
        ):
            assert is_terminal(status) is True

    @pytest.mark.parametrize(
        "target",
        [CheckoutSessionStatus.PENDING, CheckoutSessionStatus.SUCCEEDED, CheckoutSessionStatus.FAILED],
    )
    def test_open_moves_to_any_status(self, target):
        assert next_checkout_session_status(CheckoutSessionStatus.OPEN, target) == target

    def test_terminal_accepts_same_verdict(self):
        """Reaplicar el mismo veredicto no es un error."""
        assert (
            next_checkout_session_status(CheckoutSessionStatus.SUCCEEDED, CheckoutSessionStatus.SUCCEEDED)
            == CheckoutSessionStatus.SUCCEEDED
        )

    def test_terminal_rejects_other_status(self):
        with pytest.raises(InvalidStateError):
            next_checkout_session_status(CheckoutSessionStatus.FAILED, CheckoutSessionStatus.SUCCEEDED)

    def test_assert_open_raises_for_closed_session(self):
        closed = SimpleNamespace(id="chckt_session_1", status=CheckoutSessionStatus.SUCCEEDED)
        with pytest.raises(CheckoutSessionNotOpenError) as exc_info:
            assert_checkout_session_open(closed)
        assert exc_info.value.checkout_session_id == "chckt_session_1"
        assert isinstance(exc_info.value, InvalidStateError)

    def test_assert_open_passes_for_open_session(self):
        assert_checkout_session_open(SimpleNamespace(id="x", status=CheckoutSessionStatus.OPEN))


class TestStripeStatusMapping:

    @pytest.mark.parametrize(
        "charge_status, expected",
        [
            ("succeeded", CheckoutSessionStatus.SUCCEEDED),
            ("pending", CheckoutSessionStatus.PENDING),
            ("failed", CheckoutSessionStatus.FAILED),
            ("something_else", CheckoutSessionStatus.FAILED),
        ],
    )
    def test_charge_status(self, charge_status, expected):
        assert checkout_session_status_from_charge_status(charge_status) == expected

    @pytest.mark.parametrize(
        "intent_status, expected",
        [
            ("succeeded", CheckoutSessionStatus.SUCCEEDED),
            ("processing", CheckoutSessionStatus.PENDING),
            ("requires_payment_method", CheckoutSessionStatus.PENDING),
            ("canceled", CheckoutSessionStatus.FAILED),
        ],
    )
    def test_setup_intent_status(self, intent_status, expected):
        assert checkout_session_status_from_setup_intent_status(intent_status) == expected


class TestInvoiceStatusForCharge:

    def test_already_covered_wins_over_pending_charge(self):
        """Pagos previos que cubren el total -> PAID aunque el charge esté pending."""
        status = invoice_status_for_charge(
            current=InvoiceStatus.OPEN,
            invoice_total=1000,
            prior_payments_total=1000,
            checkout_session_status=CheckoutSessionStatus.PENDING,
            charge_amount=1000,
        )
        assert status == InvoiceStatus.PAID

    def test_pending_charge_awaits_confirmation(self):
        status = invoice_status_for_charge(
            current=InvoiceStatus.OPEN,
            invoice_total=1000,
            prior_payments_total=0,
            checkout_session_status=CheckoutSessionStatus.PENDING,
            charge_amount=1000,
        )
        assert status == InvoiceStatus.AWAITING_PAYMENT_CONFIRMATION

    def test_succeeded_charge_completing_total_pays(self):
        status = invoice_status_for_charge(
            current=InvoiceStatus.OPEN,
            invoice_total=1000,
            prior_payments_total=400,
            checkout_session_status=CheckoutSessionStatus.SUCCEEDED,
            charge_amount=600,
        )
        assert status == InvoiceStatus.PAID

    def test_partial_charge_keeps_current(self):
        status = invoice_status_for_charge(
            current=InvoiceStatus.OPEN,
            invoice_total=1000,
            prior_payments_total=0,
            checkout_session_status=CheckoutSessionStatus.SUCCEEDED,
            charge_amount=300,
        )
        assert status == InvoiceStatus.OPEN

    def test_failed_charge_keeps_current(self):
        status = invoice_status_for_charge(
            current=InvoiceStatus.AWAITING_PAYMENT_CONFIRMATION,
            invoice_total=1000,
            prior_payments_total=0,
            checkout_session_status=CheckoutSessionStatus.FAILED,
            charge_amount=1000,
        )
        assert status == InvoiceStatus.AWAITING_PAYMENT_CONFIRMATION


@pytest.mark.parametrize(
    "payment_status, expected",
    [
        (PaymentStatus.SUCCEEDED, PurchaseStatus.PAID),
        (PaymentStatus.PROCESSING, PurchaseStatus.PENDING),
        (PaymentStatus.FAILED, PurchaseStatus.FAILED),
        (PaymentStatus.CANCELED, PurchaseStatus.FAILED),
    ],
)
def test_purchase_status_from_payment_status(payment_status, expected):
    assert purchase_status_from_payment_status(payment_status) == expected
