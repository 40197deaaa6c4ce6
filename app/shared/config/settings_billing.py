# -*- coding: utf-8 -*-
"""
backend/app/shared/config/settings_billing.py

Configuración del núcleo de bookkeeping de billing.

Descripción:
    Centraliza conexión a base de datos, llaves de Stripe (live/test),
    parámetros de cálculo de fees, numeración de facturas y logging.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import os
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BillingSettings(BaseSettings):
    """Configuración del sistema de bookkeeping."""

    # =========================================================================
    # BASE DE DATOS
    # =========================================================================

    db_url: str = Field(
        default="sqlite+aiosqlite:///./bookkeeping.db",
        description="DSN async completo (postgresql+asyncpg://... en producción)",
    )

    db_echo_sql: bool = Field(
        default=False,
        description="Loggea SQL emitido por SQLAlchemy",
    )

    # =========================================================================
    # STRIPE
    # =========================================================================

    stripe_secret_key: Optional[str] = Field(
        default=None,
        description="Stripe secret key para livemode (sk_live_...)",
    )

    stripe_test_secret_key: Optional[str] = Field(
        default=None,
        description="Stripe secret key para testmode (sk_test_...)",
    )

    stripe_api_version: Optional[str] = Field(
        default=None,
        description="Versión fija de la API de Stripe (opcional)",
    )

    @field_validator("stripe_secret_key", mode="before")
    @classmethod
    def _load_stripe_secret_key(cls, v: Optional[str]) -> Optional[str]:
        """Fallback a STRIPE_SECRET_KEY env var si no está en settings."""
        if v:
            return v
        return os.getenv("STRIPE_SECRET_KEY")

    @field_validator("stripe_test_secret_key", mode="before")
    @classmethod
    def _load_stripe_test_secret_key(cls, v: Optional[str]) -> Optional[str]:
        if v:
            return v
        return os.getenv("STRIPE_TEST_SECRET_KEY")

    # =========================================================================
    # BOOKKEEPING
    # =========================================================================

    default_currency: str = Field(
        default="usd",
        description="Moneda por defecto (ISO 4217, minúsculas como Stripe)",
    )

    default_fee_percentage: str = Field(
        default="0.65",
        description="Porcentaje de fee de plataforma cuando la organización no define uno",
    )

    invoice_number_padding: int = Field(
        default=5,
        ge=1,
        description="Dígitos del consecutivo en invoice_number (BASE-00001)",
    )

    emit_events: bool = Field(
        default=True,
        description="Persiste eventos de dominio al cerrar la transacción",
    )

    # =========================================================================
    # LOGGING
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Nivel de logging raíz",
    )

    log_format: Literal["plain", "json"] = Field(
        default="plain",
        description="plain para desarrollo, json para producción",
    )

    # =========================================================================
    # CONFIGURACIÓN DE PYDANTIC
    # =========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    def stripe_key_for(self, livemode: bool) -> Optional[str]:
        """Devuelve la secret key correspondiente al modo (live/test)."""
        return self.stripe_secret_key if livemode else self.stripe_test_secret_key


# Singleton global
_billing_settings: Optional[BillingSettings] = None


def get_billing_settings() -> BillingSettings:
    """
    Obtiene la instancia global de configuración de billing.

    Returns:
        BillingSettings: Configuración de bookkeeping
    """
    global _billing_settings
    if _billing_settings is None:
        _billing_settings = BillingSettings()
    return _billing_settings


def reset_billing_settings() -> None:
    """Descarta el singleton (útil en tests que alteran el entorno)."""
    global _billing_settings
    _billing_settings = None


__all__ = [
    "BillingSettings",
    "get_billing_settings",
    "reset_billing_settings",
]
# Fin del archivo backend/app/shared/config/settings_billing.py
