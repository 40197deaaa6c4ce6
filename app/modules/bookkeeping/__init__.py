# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/__init__.py

Módulo de bookkeeping de checkout sessions.

Reconcilia los eventos del procesador de pagos (charges, setup intents,
cierres sin pago) contra customers, purchases, invoices, fee calculations,
redenciones de descuento y suscripciones.

Estructura:
- enums: Estados y tipos (CheckoutSessionStatus, PriceType, ...)
- models: Modelos ORM
- repositories: Acceso a datos (sesión explícita como primer argumento)
- schemas: DTOs Pydantic de Stripe y de edición
- services: Lógica de negocio de bajo nivel
- facades: Entry points de reconciliación (API pública)
- transaction: Borde transaccional y despacho de efectos diferidos

Autor: Equipo Billing
Fecha: 2026-01-12
"""

# ===== ERRORES =====
from .errors import (
    BookkeepingError,
    CheckoutSessionNotOpenError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    UnsupportedPriceTypeError,
    ValidationError,
)

# ===== EFECTOS =====
from .effects import (
    DeferredTask,
    DomainEventInsert,
    LedgerCommand,
    TransactionEffects,
    TransactionOutput,
)

__all__ = [
    # Errores
    "BookkeepingError",
    "CheckoutSessionNotOpenError",
    "ConflictError",
    "InvalidStateError",
    "NotFoundError",
    "UnsupportedPriceTypeError",
    "ValidationError",
    # Efectos
    "DeferredTask",
    "DomainEventInsert",
    "LedgerCommand",
    "TransactionEffects",
    "TransactionOutput",
]

# Fin del archivo backend/app/modules/bookkeeping/__init__.py
