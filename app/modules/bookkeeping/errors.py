# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/errors.py

Errores de dominio del módulo Bookkeeping.

Objetivo:
- Definir excepciones semánticas que servicios y fachadas lanzan de forma
  síncrona al llamador.
- Permitir que los entry points (webhooks, API) traduzcan estas excepciones
  sin acoplarse a la lógica de reconciliación.

El llamador es responsable de hacer rollback de la transacción ante
cualquiera de estos errores (ver transaction.py).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Optional


class BookkeepingError(Exception):
    """
    Error base para el módulo Bookkeeping.
    """

    pass


class NotFoundError(BookkeepingError):
    """
    Un registro requerido (sesión, purchase, customer, invoice,
    fee calculation, ...) no existe.
    """

    def __init__(self, entity: str, key: Any = None, message: Optional[str] = None) -> None:
        self.entity = entity
        self.key = key
        super().__init__(message or f"{entity} not found: {key}")


class InvalidStateError(BookkeepingError):
    """
    La operación no es válida dado el estado actual del registro.
    """

    def __init__(self, message: str = "Invalid state for operation") -> None:
        super().__init__(message)


class CheckoutSessionNotOpenError(InvalidStateError):
    """Edición de una sesión que ya no está en OPEN."""

    def __init__(self, checkout_session_id: str, status: Any) -> None:
        self.checkout_session_id = checkout_session_id
        self.status = status
        super().__init__(
            f"Checkout session is not open: {checkout_session_id} (status={status})"
        )


class UnsupportedPriceTypeError(InvalidStateError):
    """El modelo de cobro del precio no está soportado en este flujo."""

    def __init__(self, price_type: Any) -> None:
        self.price_type = price_type
        super().__init__(f"Unsupported price type: {price_type}")


class ConflictError(BookkeepingError):
    """
    Conflicto de identidad: p.ej. el customer de Stripe del evento difiere
    del ya vinculado al purchase/customer de la sesión.
    """

    def __init__(self, message: str = "Conflicting identity") -> None:
        super().__init__(message)


class ValidationError(BookkeepingError):
    """
    Datos de entrada insuficientes o inconsistentes (email faltante,
    total distinto de cero en un flujo sin pago, etc.).
    """

    def __init__(self, message: str = "Validation failed") -> None:
        super().__init__(message)


__all__ = [
    "BookkeepingError",
    "NotFoundError",
    "InvalidStateError",
    "CheckoutSessionNotOpenError",
    "UnsupportedPriceTypeError",
    "ConflictError",
    "ValidationError",
]

# Fin del archivo backend/app/modules/bookkeeping/errors.py
