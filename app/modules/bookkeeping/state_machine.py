# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/state_machine.py

Máquinas de estado explícitas de checkout sessions, invoices y purchases.

Reglas:
- CheckoutSession: OPEN -> {PENDING, SUCCEEDED, FAILED}. Fuera de OPEN la
  sesión es inmutable. Las ediciones sobre una sesión cerrada fallan con
  CheckoutSessionNotOpenError; los webhooks repetidos sobre una sesión
  terminal son no-ops (el llamador usa is_terminal() para cortocircuitar).
- Invoice (sesiones tipo invoice): "ya cubierta" se evalúa antes que
  "este charge está pendiente" y antes que "este charge la completa".

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from .enums import CheckoutSessionStatus, InvoiceStatus, PaymentStatus, PurchaseStatus
from .errors import CheckoutSessionNotOpenError, InvalidStateError

TERMINAL_CHECKOUT_SESSION_STATUSES = frozenset(
    {
        CheckoutSessionStatus.PENDING,
        CheckoutSessionStatus.SUCCEEDED,
        CheckoutSessionStatus.FAILED,
    }
)


# ---------------------------------------------------------------------------
# Checkout session
# ---------------------------------------------------------------------------

def is_terminal(status: CheckoutSessionStatus) -> bool:
    return CheckoutSessionStatus(status) in TERMINAL_CHECKOUT_SESSION_STATUSES


def assert_checkout_session_open(checkout_session) -> None:
    """Guard de las operaciones de edición."""
    if CheckoutSessionStatus(checkout_session.status) != CheckoutSessionStatus.OPEN:
        raise CheckoutSessionNotOpenError(checkout_session.id, checkout_session.status)


def next_checkout_session_status(
    current: CheckoutSessionStatus,
    target: CheckoutSessionStatus,
) -> CheckoutSessionStatus:
    """
    Transición de estado de una checkout session.

    OPEN puede pasar a cualquier estado; un estado terminal solo admite
    quedarse igual (reaplicar el mismo veredicto).

    Raises:
        InvalidStateError: si se intenta mover una sesión terminal a otro estado
    """
    current = CheckoutSessionStatus(current)
    target = CheckoutSessionStatus(target)
    if current == CheckoutSessionStatus.OPEN or current == target:
        return target
    raise InvalidStateError(
        f"Invalid checkout session transition {current.value} -> {target.value}"
    )


def checkout_session_status_from_charge_status(charge_status: str) -> CheckoutSessionStatus:
    """succeeded -> SUCCEEDED, pending -> PENDING, cualquier otro -> FAILED."""
    if charge_status == "pending":
        return CheckoutSessionStatus.PENDING
    if charge_status == "succeeded":
        return CheckoutSessionStatus.SUCCEEDED
    return CheckoutSessionStatus.FAILED


def checkout_session_status_from_setup_intent_status(setup_intent_status: str) -> CheckoutSessionStatus:
    """
    succeeded -> SUCCEEDED, processing -> PENDING, canceled -> FAILED.
    requires_payment_method y cualquier otro estado quedan en PENDING.
    """
    if setup_intent_status == "succeeded":
        return CheckoutSessionStatus.SUCCEEDED
    if setup_intent_status == "canceled":
        return CheckoutSessionStatus.FAILED
    return CheckoutSessionStatus.PENDING


# ---------------------------------------------------------------------------
# Invoice
# ---------------------------------------------------------------------------

def invoice_status_for_charge(
    *,
    current: InvoiceStatus,
    invoice_total: int,
    prior_payments_total: int,
    checkout_session_status: CheckoutSessionStatus,
    charge_amount: int,
) -> InvoiceStatus:
    """
    Decide el estado de una invoice tras un charge de una sesión tipo invoice.

    Orden de evaluación:
      1. pagos previos >= total            -> PAID (aun si el charge está pending)
      2. charge pending                    -> AWAITING_PAYMENT_CONFIRMATION
      3. charge succeeded y lo completa    -> PAID
      4. en otro caso                      -> sin cambio
    """
    if prior_payments_total >= invoice_total:
        return InvoiceStatus.PAID
    if checkout_session_status == CheckoutSessionStatus.PENDING:
        return InvoiceStatus.AWAITING_PAYMENT_CONFIRMATION
    if (
        checkout_session_status == CheckoutSessionStatus.SUCCEEDED
        and prior_payments_total + charge_amount >= invoice_total
    ):
        return InvoiceStatus.PAID
    return InvoiceStatus(current)


# ---------------------------------------------------------------------------
# Purchase
# ---------------------------------------------------------------------------

def purchase_status_from_payment_status(payment_status: PaymentStatus) -> PurchaseStatus:
    payment_status = PaymentStatus(payment_status)
    if payment_status == PaymentStatus.SUCCEEDED:
        return PurchaseStatus.PAID
    if payment_status in (PaymentStatus.CANCELED, PaymentStatus.FAILED):
        return PurchaseStatus.FAILED
    return PurchaseStatus.PENDING


__all__ = [
    "TERMINAL_CHECKOUT_SESSION_STATUSES",
    "is_terminal",
    "assert_checkout_session_open",
    "next_checkout_session_status",
    "checkout_session_status_from_charge_status",
    "checkout_session_status_from_setup_intent_status",
    "invoice_status_for_charge",
    "purchase_status_from_payment_status",
]
