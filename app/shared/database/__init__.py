# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from .base import Base, JSONType, NAMING_CONVENTION, enum_column_type
from .database import (
    build_engine,
    build_session_factory,
    get_engine,
    get_session_factory,
    session_scope,
)
from .repository import BaseRepository

__all__ = [
    "Base",
    "BaseRepository",
    "JSONType",
    "NAMING_CONVENTION",
    "enum_column_type",
    "build_engine",
    "build_session_factory",
    "get_engine",
    "get_session_factory",
    "session_scope",
]

# Fin del archivo backend/app/shared/database/__init__.py
