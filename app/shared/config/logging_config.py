# -*- coding: utf-8 -*-
"""
backend/app/shared/config/logging_config.py

Configuración centralizada de logging para el núcleo de billing.
Soporta formato plain (desarrollo) y json (producción).

Autor: Equipo Billing
Fecha: 2026-01-12
"""

import logging.config
from typing import Literal, Optional


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "json"] = "plain",
    quiet_loggers: Optional[dict[str, str]] = None,
) -> None:
    """
    Configura el sistema de logging de la aplicación.

    Args:
        level: Nivel de logging (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Formato de salida (plain, json)
        quiet_loggers: Niveles por logger para silenciar librerías ruidosas

    Ejemplos:
        >>> setup_logging("INFO", "plain")
        >>> setup_logging("WARNING", "json")
    """
    use_json = fmt == "json"

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if use_json else "default",
            "stream": "ext://sys.stdout",
        }
    }

    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s"
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        },
    }

    loggers = {
        "sqlalchemy.engine": {"level": "WARNING"},
        "stripe": {"level": "WARNING"},
    }
    for name, logger_level in (quiet_loggers or {}).items():
        loggers[name] = {"level": logger_level.upper()}

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": loggers,
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }

    logging.config.dictConfig(logging_config)


def setup_logging_from_settings() -> None:
    """Aplica setup_logging con los valores de BillingSettings."""
    from .settings_billing import get_billing_settings

    settings = get_billing_settings()
    setup_logging(settings.log_level, settings.log_format)


__all__ = ["setup_logging", "setup_logging_from_settings"]
# Fin del archivo backend/app/shared/config/logging_config.py
