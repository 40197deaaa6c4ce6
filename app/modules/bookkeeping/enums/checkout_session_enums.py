# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/checkout_session_enums.py

Enums de checkout sessions: tipo de sesión y estado.

Estados: OPEN es el único estado editable; PENDING, SUCCEEDED y FAILED
son terminales (ver state_machine.py).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from enum import StrEnum


class CheckoutSessionStatus(StrEnum):
    """Estado de la sesión de checkout."""

    OPEN = "open"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    __pg_enum_name__ = "checkout_session_status_enum"


class CheckoutSessionType(StrEnum):
    """Qué intenta lograr la sesión."""

    PRODUCT = "product"
    INVOICE = "invoice"
    ADD_PAYMENT_METHOD = "add_payment_method"
    ACTIVATE_SUBSCRIPTION = "activate_subscription"

    __pg_enum_name__ = "checkout_session_type_enum"


__all__ = ["CheckoutSessionStatus", "CheckoutSessionType"]
