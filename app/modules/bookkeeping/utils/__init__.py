# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/utils/__init__.py
"""

from .datetime_helpers import add_days, ensure_utc, utcnow
from .id_helpers import id_factory, new_id, random_token, stripe_id_from_object_or_id

__all__ = [
    "add_days",
    "ensure_utc",
    "utcnow",
    "id_factory",
    "new_id",
    "random_token",
    "stripe_id_from_object_or_id",
]
