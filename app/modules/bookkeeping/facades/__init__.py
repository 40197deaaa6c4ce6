
# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/facades/__init__.py

Punto de entrada del paquete de fachadas del módulo Bookkeeping.

Diseño:
- Este __init__ NO realiza imports automáticos de submódulos.
- Cada facade se importa explícitamente desde su módulo:

  Ejemplos de uso:

      from app.modules.bookkeeping.facades.charges import (
          process_stripe_charge_for_checkout_session,
      )
      from app.modules.bookkeeping.facades.setup_intents import process_setup_intent_succeeded
      from app.modules.bookkeeping.facades.non_payment import process_non_payment_checkout_session
      from app.modules.bookkeeping.facades.checkout_sessions import (
          confirm_checkout_session,
          edit_checkout_session,
          edit_checkout_session_billing_address,
      )
      from app.modules.bookkeeping.facades.dependencies import BookkeepingDependencies

Autor: Equipo Billing
Fecha: 2026-01-12
"""

__all__: list[str] = []

# Fin del archivo backend/app/modules/bookkeeping/facades/__init__.py
