# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/checkout_session_repository.py

Repositorio para checkout_sessions.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from app.shared.database.repository import BaseRepository

from ..models import CheckoutSession


class CheckoutSessionRepository(BaseRepository[CheckoutSession]):
    entity_name = "checkout_session"

    def __init__(self) -> None:
        super().__init__(CheckoutSession)


__all__ = ["CheckoutSessionRepository"]
