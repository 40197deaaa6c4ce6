# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/common.py

Columnas compartidas por los modelos de bookkeeping.

Los timestamps usan defaults del lado de Python (no server_default) para
que estén disponibles tras el flush sin un refresh, y con resolución de
microsegundos: "la fee calculation más reciente" se decide por created_at.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ..utils.datetime_helpers import utcnow


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class LivemodeMixin:
    livemode: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="True para datos de producción (Stripe live), False para testmode.",
    )


__all__ = ["TimestampMixin", "LivemodeMixin"]
