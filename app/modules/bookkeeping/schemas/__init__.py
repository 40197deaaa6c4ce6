# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/schemas/__init__.py
"""

from .checkout_session_schemas import BillingAddress, EditCheckoutSessionInput, FeeParameters
from .processor_events import (
    Address,
    BillingDetails,
    ChargeSnapshot,
    CheckoutSessionIntentMetadata,
    IntentMetadata,
    SetupIntentSnapshot,
    parse_intent_metadata,
)

__all__ = [
    "Address",
    "BillingAddress",
    "BillingDetails",
    "ChargeSnapshot",
    "CheckoutSessionIntentMetadata",
    "EditCheckoutSessionInput",
    "FeeParameters",
    "IntentMetadata",
    "SetupIntentSnapshot",
    "parse_intent_metadata",
]
