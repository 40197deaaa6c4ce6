# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> now = utcnow()
        >>> now.tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Asegura que un datetime sea UTC timezone-aware.

    SQLite devuelve datetimes naive aunque la columna sea timezone=True;
    se asumen UTC.

    Examples:
        >>> dt_utc = ensure_utc(datetime(2025, 10, 26, 14, 30, 0))
        >>> dt_utc.tzinfo == timezone.utc
        True
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    elif dt.tzinfo != timezone.utc:
        return dt.astimezone(timezone.utc)
    return dt


def add_days(dt: datetime, days: int) -> datetime:
    return ensure_utc(dt) + timedelta(days=days)


__all__ = ["utcnow", "ensure_utc", "add_days"]
