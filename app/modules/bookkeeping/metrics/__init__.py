# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/metrics/__init__.py
"""

from .prometheus_exporter import (
    observe_customer_conflict,
    observe_reconciliation,
    reconciliation_timer,
    registry,
    render_prometheus_metrics,
)

__all__ = [
    "observe_customer_conflict",
    "observe_reconciliation",
    "reconciliation_timer",
    "registry",
    "render_prometheus_metrics",
]
