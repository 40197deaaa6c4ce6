# -*- coding: utf-8 -*-
"""
backend/app/shared/database/base.py

Base declarativa, convención de nombres y tipos portables para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- JSONType: JSON genérico con variante JSONB en PostgreSQL
- enum_column_type: helper para mapear enums Python a columnas VARCHAR validadas

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from enum import Enum
from typing import Type

from sqlalchemy import JSON, MetaData
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# JSONB en PostgreSQL, JSON plano en SQLite (tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de bookkeeping.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== HELPER GENÉRICO PARA ENUMS =====
def enum_column_type(enum_cls: Type[Enum], name: str | None = None) -> SQLEnum:
    """
    Devuelve un tipo Enum de SQLAlchemy no nativo basado en un Enum de Python.

    Uso típico:

        from app.shared.database.base import Base, enum_column_type
        from ..enums import PurchaseStatus

        class Purchase(Base):
            status: Mapped[PurchaseStatus] = mapped_column(
                enum_column_type(PurchaseStatus),
                nullable=False,
            )

    - Persiste el `.value` del enum (no el nombre del miembro).
    - native_enum=False: se guarda como VARCHAR con CHECK, portable a SQLite.
    """
    enum_name = name or getattr(enum_cls, "__pg_enum_name__", enum_cls.__name__.lower())

    return SQLEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        create_constraint=False,
        length=64,
        values_callable=lambda e: [x.value for x in e],
        validate_strings=True,
    )


__all__ = ["Base", "NAMING_CONVENTION", "JSONType", "enum_column_type"]

# Fin del archivo backend/app/shared/database/base.py
