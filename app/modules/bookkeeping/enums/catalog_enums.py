# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/catalog_enums.py

Enums del catálogo: modelo de cobro del precio, intervalos y descuentos.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from enum import StrEnum


class PriceType(StrEnum):
    """Modelo de cobro del precio (determina la forma del Purchase)."""

    SUBSCRIPTION = "subscription"
    SINGLE_PAYMENT = "single_payment"
    USAGE = "usage"

    __pg_enum_name__ = "price_type_enum"


class IntervalUnit(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    __pg_enum_name__ = "interval_unit_enum"


class DiscountAmountType(StrEnum):
    FIXED = "fixed"
    PERCENT = "percent"

    __pg_enum_name__ = "discount_amount_type_enum"


class DiscountDuration(StrEnum):
    """Cuántos pagos consume un descuento antes de agotarse."""

    ONCE = "once"
    FOREVER = "forever"
    NUMBER_OF_PAYMENTS = "number_of_payments"

    __pg_enum_name__ = "discount_duration_enum"


__all__ = ["PriceType", "IntervalUnit", "DiscountAmountType", "DiscountDuration"]
