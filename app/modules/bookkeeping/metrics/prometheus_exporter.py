# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/metrics/prometheus_exporter.py

Métricas Prometheus de la reconciliación de checkout sessions.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
# Registro de Prometheus del módulo
# --------------------------------------------------------------------------
registry = CollectorRegistry()

# --------------------------------------------------------------------------
# Definición de métricas
# --------------------------------------------------------------------------
RECONCILIATIONS_TOTAL = Counter(
    "bookkeeping_reconciliations_total",
    "Reconciliaciones por entry point y outcome",
    ["entry_point", "outcome"],  # outcome: processed/already_processed/failed_status
    registry=registry,
)

CUSTOMER_CONFLICTS_TOTAL = Counter(
    "bookkeeping_customer_conflicts_total",
    "Conflictos de identidad de customer de Stripe detectados",
    registry=registry,
)

RECONCILIATION_SECONDS = Histogram(
    "bookkeeping_reconciliation_seconds",
    "Tiempo de reconciliación (segundos)",
    ["entry_point"],
    registry=registry,
)


# --------------------------------------------------------------------------
# Funciones auxiliares
# --------------------------------------------------------------------------
def render_prometheus_metrics() -> bytes:
    return generate_latest(registry)


def observe_reconciliation(entry_point: str, outcome: str) -> None:
    RECONCILIATIONS_TOTAL.labels(entry_point=entry_point, outcome=outcome).inc()
    logger.debug("[Prometheus] reconciliation entry_point=%s outcome=%s", entry_point, outcome)


def observe_customer_conflict() -> None:
    CUSTOMER_CONFLICTS_TOTAL.inc()


@contextmanager
def reconciliation_timer(entry_point: str) -> Iterator[None]:
    """Mide la duración del bloque, también si termina con excepción."""
    started = time.perf_counter()
    try:
        yield
    finally:
        RECONCILIATION_SECONDS.labels(entry_point=entry_point).observe(time.perf_counter() - started)


__all__ = [
    "registry",
    "RECONCILIATIONS_TOTAL",
    "CUSTOMER_CONFLICTS_TOTAL",
    "RECONCILIATION_SECONDS",
    "render_prometheus_metrics",
    "observe_reconciliation",
    "observe_customer_conflict",
    "reconciliation_timer",
]
