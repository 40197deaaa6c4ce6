# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/utils/id_helpers.py

Generación de identificadores opacos con prefijo por tipo de entidad
(cust_..., prch_..., inv_...), y helpers para ids de Stripe.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import secrets
import string
from typing import Any, Callable, Optional

_ALPHABET = string.ascii_letters + string.digits


def random_token(length: int = 21) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def new_id(prefix: str) -> str:
    """
    Genera un id `<prefix>_<token>`.

    >>> new_id("cust").startswith("cust_")
    True
    """
    return f"{prefix}_{random_token()}"


def id_factory(prefix: str) -> Callable[[], str]:
    """Default de columna para PKs prefijadas."""
    def _factory() -> str:
        return new_id(prefix)
    return _factory


def stripe_id_from_object_or_id(value: Any) -> Optional[str]:
    """
    Extrae el id de una unión id-u-objeto de Stripe.

    Stripe expande campos como `customer` o `payment_method` a objetos
    completos según los parámetros `expand`; aquí se acepta cualquiera de
    las formas (str, dict con "id", objeto con atributo `.id`).
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        return value.get("id")
    return getattr(value, "id", None)


__all__ = ["random_token", "new_id", "id_factory", "stripe_id_from_object_or_id"]
