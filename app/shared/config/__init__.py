# -*- coding: utf-8 -*-
"""
backend/app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import get_billing_settings

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from .logging_config import setup_logging, setup_logging_from_settings
from .settings_billing import BillingSettings, get_billing_settings, reset_billing_settings

__all__ = [
    "BillingSettings",
    "get_billing_settings",
    "reset_billing_settings",
    "setup_logging",
    "setup_logging_from_settings",
]
