# -*- coding: utf-8 -*-
import pytest


@pytest.fixture(autouse=True)
def _isolate_env_and_cache(monkeypatch):
    """
    Aísla variables de entorno y limpia el singleton de BillingSettings en cada test.
    """
    import os

    from app.shared.config import reset_billing_settings

    # No heredar secretos ni DSN del shell del dev
    for k in list(os.environ.keys()):
        if k.startswith(("DB_", "STRIPE_", "LOG_", "INVOICE_", "EMIT_", "DEFAULT_")):
            monkeypatch.delenv(k, raising=False)
    reset_billing_settings()

    yield

    reset_billing_settings()
# Fin del archivo backend/tests/shared/config/conftest.py
