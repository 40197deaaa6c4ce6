# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/event_enums.py

Tipos de eventos de dominio emitidos por bookkeeping.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from enum import StrEnum


class EventType(StrEnum):
    CUSTOMER_CREATED = "customer.created"
    PURCHASE_COMPLETED = "purchase.completed"
    SUBSCRIPTION_CREATED = "subscription.created"
    PAYMENT_SUCCEEDED = "payment.succeeded"

    __pg_enum_name__ = "event_type_enum"


__all__ = ["EventType"]
