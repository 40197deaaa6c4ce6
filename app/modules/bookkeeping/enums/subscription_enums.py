# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/enums/subscription_enums.py

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from enum import StrEnum


class SubscriptionStatus(StrEnum):
    INCOMPLETE = "incomplete"
    TRIALING = "trialing"
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELED = "canceled"
    CREDIT_TRIAL = "credit_trial"

    __pg_enum_name__ = "subscription_status_enum"

    @property
    def is_current(self) -> bool:
        return self in {
            SubscriptionStatus.INCOMPLETE,
            SubscriptionStatus.TRIALING,
            SubscriptionStatus.ACTIVE,
            SubscriptionStatus.PAST_DUE,
            SubscriptionStatus.CREDIT_TRIAL,
        }


class BillingPeriodStatus(StrEnum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELED = "canceled"

    __pg_enum_name__ = "billing_period_status_enum"


__all__ = ["SubscriptionStatus", "BillingPeriodStatus"]
