# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/providers/__init__.py
"""

from .stripe_provider import ProcessorClient, StripeProvider

__all__ = ["ProcessorClient", "StripeProvider"]
