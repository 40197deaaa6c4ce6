# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/event.py

Modelo ORM para la tabla events (eventos de dominio).

Cada evento lleva un hash determinista (tipo + objeto); el índice único
sobre hash hace idempotente la inserción ante reintentos del webhook.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, JSONType, enum_column_type

from ..enums import EventType
from ..utils.datetime_helpers import utcnow
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Event(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("evt"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    type: Mapped[EventType] = mapped_column(enum_column_type(EventType), nullable=False)

    hash: Mapped[str] = mapped_column(String(64), nullable=False)

    payload: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("hash", name="uq_events_hash"),
    )

    def __repr__(self) -> str:
        return f"<Event id={self.id} type={self.type}>"


__all__ = ["Event"]
