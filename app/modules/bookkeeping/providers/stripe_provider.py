# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/providers/stripe_provider.py

Cliente Stripe usado por la reconciliación de bookkeeping.

Operaciones: crear customers, actualizar/cancelar payment intents y
leer/actualizar setup intents. La secret key se elige por livemode.
Las llamadas del SDK son bloqueantes y se ejecutan en un worker thread.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, Optional, Protocol

import stripe
from anyio import to_thread

from app.shared.config import BillingSettings, get_billing_settings

logger = logging.getLogger(__name__)


class ProcessorClient(Protocol):
    """Contrato mínimo que la reconciliación espera del procesador de pagos."""

    async def create_customer(
        self,
        *,
        email: str,
        name: str,
        livemode: bool,
        metadata: Optional[dict[str, str]] = None,
    ) -> Any: ...

    async def update_payment_intent(
        self,
        payment_intent_id: str,
        *,
        livemode: bool,
        amount: Optional[int] = None,
        application_fee_amount: Optional[int] = None,
        customer: Optional[str] = None,
    ) -> Any: ...

    async def get_setup_intent(self, setup_intent_id: str, *, livemode: bool) -> Any: ...

    async def update_setup_intent(self, setup_intent_id: str, *, customer: str, livemode: bool) -> Any: ...

    async def cancel_payment_intent(self, payment_intent_id: str, *, livemode: bool) -> Any: ...

    async def get_payment_method(self, payment_method_id: str, *, livemode: bool) -> Any: ...


class StripeProvider:
    """
    Proveedor Stripe para bookkeeping.

    Implementa ProcessorClient sobre el SDK oficial `stripe`.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        test_secret_key: Optional[str] = None,
        settings: Optional[BillingSettings] = None,
    ):
        """
        Inicializa el proveedor Stripe.

        Args:
            secret_key: key de livemode. Si no se proporciona, se toma de settings.
            test_secret_key: key de testmode. Si no se proporciona, se toma de settings.
            settings: BillingSettings (por defecto, el singleton global)
        """
        settings = settings or get_billing_settings()
        self._secret_key = secret_key or settings.stripe_secret_key
        self._test_secret_key = test_secret_key or settings.stripe_test_secret_key
        self._api_version = settings.stripe_api_version
        if not (self._secret_key or self._test_secret_key):
            logger.warning("STRIPE_SECRET_KEY not configured")

    def is_configured(self, livemode: bool) -> bool:
        """True si hay secret key para el modo solicitado."""
        return bool(self._secret_key if livemode else self._test_secret_key)

    def _request_options(self, livemode: bool) -> dict[str, Any]:
        key = self._secret_key if livemode else self._test_secret_key
        if not key:
            mode = "live" if livemode else "test"
            raise ValueError(f"Stripe is not configured for {mode} mode. Set STRIPE_SECRET_KEY.")
        options: dict[str, Any] = {"api_key": key}
        if self._api_version:
            options["stripe_version"] = self._api_version
        return options

    async def _call(self, fn: Callable[..., Any], *args: Any, livemode: bool, **params: Any) -> Any:
        # Ejecutar en threadpool para no bloquear el event loop
        return await to_thread.run_sync(
            partial(fn, *args, **params, **self._request_options(livemode))
        )

    # -----------------------------------------------------------------
    # Customers
    # -----------------------------------------------------------------
    async def create_customer(
        self,
        *,
        email: str,
        name: str,
        livemode: bool,
        metadata: Optional[dict[str, str]] = None,
    ) -> stripe.Customer:
        logger.info("Creating Stripe customer: livemode=%s", livemode)
        customer = await self._call(
            stripe.Customer.create,
            livemode=livemode,
            email=email,
            name=name,
            metadata=metadata or {},
        )
        logger.info("Stripe customer created: id=%s", customer.id)
        return customer

    # -----------------------------------------------------------------
    # Payment intents
    # -----------------------------------------------------------------
    async def update_payment_intent(
        self,
        payment_intent_id: str,
        *,
        livemode: bool,
        amount: Optional[int] = None,
        application_fee_amount: Optional[int] = None,
        customer: Optional[str] = None,
    ) -> stripe.PaymentIntent:
        params: dict[str, Any] = {}
        if amount is not None:
            params["amount"] = amount
        if application_fee_amount is not None:
            params["application_fee_amount"] = application_fee_amount
        if customer is not None:
            params["customer"] = customer

        logger.info(
            "Updating Stripe payment intent: id=%s fields=%s",
            payment_intent_id, sorted(params),
        )
        return await self._call(
            stripe.PaymentIntent.modify,
            payment_intent_id,
            livemode=livemode,
            **params,
        )

    async def cancel_payment_intent(self, payment_intent_id: str, *, livemode: bool) -> stripe.PaymentIntent:
        logger.info("Canceling Stripe payment intent: id=%s", payment_intent_id)
        return await self._call(stripe.PaymentIntent.cancel, payment_intent_id, livemode=livemode)

    # -----------------------------------------------------------------
    # Setup intents / payment methods
    # -----------------------------------------------------------------
    async def get_setup_intent(self, setup_intent_id: str, *, livemode: bool) -> stripe.SetupIntent:
        return await self._call(stripe.SetupIntent.retrieve, setup_intent_id, livemode=livemode)

    async def update_setup_intent(
        self,
        setup_intent_id: str,
        *,
        customer: str,
        livemode: bool,
    ) -> stripe.SetupIntent:
        logger.info("Attaching customer to setup intent: id=%s customer=%s", setup_intent_id, customer)
        return await self._call(
            stripe.SetupIntent.modify,
            setup_intent_id,
            livemode=livemode,
            customer=customer,
        )

    async def get_payment_method(self, payment_method_id: str, *, livemode: bool) -> stripe.PaymentMethod:
        return await self._call(stripe.PaymentMethod.retrieve, payment_method_id, livemode=livemode)


__all__ = ["ProcessorClient", "StripeProvider"]
