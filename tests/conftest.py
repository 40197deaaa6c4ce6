# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests del núcleo de bookkeeping.

- Pre-carga de modelos para resolver relationships('ClassName')
- Entorno aislado: sin secretos de Stripe ni DSN del shell del dev
"""

import importlib

import pytest

# Registrar todos los modelos en Base.metadata antes de cualquier create_all
importlib.import_module("app.modules.bookkeeping.models")


@pytest.fixture(autouse=True)
def _no_stripe_secrets(monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("STRIPE_TEST_SECRET_KEY", raising=False)
    monkeypatch.delenv("DB_URL", raising=False)
