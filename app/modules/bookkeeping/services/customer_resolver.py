# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/customer_resolver.py

Customer Resolver: dada una checkout session y, opcionalmente, el id de
customer de Stripe del evento, encuentra o crea exactamente un Customer.

Orden de resolución (gana el primero):
  1. customer del purchase ya vinculado a la sesión
  2. customer_id directo de la sesión
  3. si (1) o (2) resolvió y Stripe trae un customer distinto al ya
     vinculado -> ConflictError (nunca se reasigna en silencio)
  4. customer de la organización ya vinculado al id de Stripe
  5. nuevo customer desde customer_email/customer_name de la sesión

La creación de customers emite CustomerCreated y, si el pricing model
tiene plan free, encola la creación de la suscripción por defecto; ambos
como efectos diferidos.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..effects import DeferredTask, DomainEventInsert, TransactionEffects
from ..enums import EventType
from ..errors import ConflictError, ValidationError
from ..metrics import observe_customer_conflict
from ..models import CheckoutSession, Customer
from ..providers import ProcessorClient, StripeProvider
from ..repositories import (
    CustomerRepository,
    PriceRepository,
    PricingModelRepository,
    ProductRepository,
    PurchaseRepository,
)
from ..utils.id_helpers import random_token, stripe_id_from_object_or_id

logger = logging.getLogger(__name__)

CREATE_DEFAULT_SUBSCRIPTION_TASK = "create_default_subscription"


@dataclass
class ResolvedCustomer:
    """Resultado de resolver el customer de una sesión."""
    customer: Customer
    created: bool


class CustomerResolver:
    """
    Resuelve (o crea) el customer de una checkout session.
    """

    def __init__(
        self,
        processor: Optional[ProcessorClient] = None,
        customers: Optional[CustomerRepository] = None,
        purchases: Optional[PurchaseRepository] = None,
        prices: Optional[PriceRepository] = None,
        products: Optional[ProductRepository] = None,
        pricing_models: Optional[PricingModelRepository] = None,
    ) -> None:
        self._processor = processor
        self.customers = customers or CustomerRepository()
        self.purchases = purchases or PurchaseRepository()
        self.prices = prices or PriceRepository()
        self.products = products or ProductRepository()
        self.pricing_models = pricing_models or PricingModelRepository()

    @property
    def processor(self) -> ProcessorClient:
        if self._processor is None:
            self._processor = StripeProvider()
        return self._processor

    async def resolve(
        self,
        session: AsyncSession,
        checkout_session: CheckoutSession,
        *,
        stripe_customer_id: Optional[str],
        effects: TransactionEffects,
    ) -> ResolvedCustomer:
        """
        Encuentra o crea el customer de la sesión.

        Raises:
            ConflictError: el customer de Stripe difiere del ya vinculado
            ValidationError: hay que crear un customer y la sesión no tiene email
        """
        customer: Optional[Customer] = None
        purchase_id: Optional[str] = None

        if checkout_session.purchase_id:
            purchase = await self.purchases.get_or_raise(session, checkout_session.purchase_id)
            purchase_id = purchase.id
            customer = await self.customers.get_or_raise(session, purchase.customer_id)
        elif checkout_session.customer_id:
            customer = await self.customers.get_or_raise(session, checkout_session.customer_id)

        if customer is not None:
            await self._check_stripe_customer_binding(
                session,
                customer,
                checkout_session=checkout_session,
                purchase_id=purchase_id,
                stripe_customer_id=stripe_customer_id,
            )
            return ResolvedCustomer(customer=customer, created=False)

        if stripe_customer_id:
            customer = await self.customers.get_by_stripe_customer_id(
                session,
                organization_id=checkout_session.organization_id,
                stripe_customer_id=stripe_customer_id,
                livemode=checkout_session.livemode,
            )
            if customer is not None:
                logger.info(
                    "customer_resolved_by_stripe_id customer_id=%s checkout_session_id=%s",
                    customer.id,
                    checkout_session.id,
                )
                return ResolvedCustomer(customer=customer, created=False)

        if not checkout_session.customer_email:
            raise ValidationError(
                f"Checkout session {checkout_session.id} has no customer email; "
                "cannot create a customer"
            )

        customer = await self.create_customer_bookkeeping(
            session,
            checkout_session=checkout_session,
            email=checkout_session.customer_email,
            name=checkout_session.customer_name or checkout_session.customer_email,
            stripe_customer_id=stripe_customer_id,
            effects=effects,
        )
        return ResolvedCustomer(customer=customer, created=True)

    async def _check_stripe_customer_binding(
        self,
        session: AsyncSession,
        customer: Customer,
        *,
        checkout_session: CheckoutSession,
        purchase_id: Optional[str],
        stripe_customer_id: Optional[str],
    ) -> None:
        if not stripe_customer_id:
            return
        if customer.stripe_customer_id is None:
            owner = await self.customers.get_by_stripe_customer_id(
                session,
                organization_id=customer.organization_id,
                stripe_customer_id=stripe_customer_id,
                livemode=customer.livemode,
            )
            if owner is None or owner.id == customer.id:
                # Sin vínculo previo y sin otro dueño: se fija
                await self.customers.update(session, customer, stripe_customer_id=stripe_customer_id)
                return
            observe_customer_conflict()
            logger.error(
                "customer_conflict checkout_session_id=%s purchase_id=%s customer_id=%s "
                "owner_customer_id=%s incoming_stripe_customer_id=%s",
                checkout_session.id,
                purchase_id,
                customer.id,
                owner.id,
                stripe_customer_id,
            )
            raise ConflictError(
                f"Stripe customer {stripe_customer_id} is already linked to customer {owner.id}, "
                f"cannot bind it to customer {customer.id} for checkout session {checkout_session.id}"
            )
        if customer.stripe_customer_id != stripe_customer_id:
            observe_customer_conflict()
            logger.error(
                "customer_conflict checkout_session_id=%s purchase_id=%s customer_id=%s "
                "linked_stripe_customer_id=%s incoming_stripe_customer_id=%s",
                checkout_session.id,
                purchase_id,
                customer.id,
                customer.stripe_customer_id,
                stripe_customer_id,
            )
            raise ConflictError(
                f"Attempting to process checkout session {checkout_session.id} with a different "
                f"stripe customer {stripe_customer_id} than the checkout session customer "
                f"{customer.stripe_customer_id} already linked to the purchase"
            )

    async def _pricing_model_id_for(
        self,
        session: AsyncSession,
        checkout_session: CheckoutSession,
    ) -> Optional[str]:
        if checkout_session.price_id:
            price = await self.prices.get_or_raise(session, checkout_session.price_id)
            product = await self.products.get_or_raise(session, price.product_id)
            return product.pricing_model_id
        pricing_model = await self.pricing_models.get_default_for_organization(
            session,
            checkout_session.organization_id,
            checkout_session.livemode,
        )
        return pricing_model.id if pricing_model else None

    async def create_customer_bookkeeping(
        self,
        session: AsyncSession,
        *,
        checkout_session: CheckoutSession,
        email: str,
        name: str,
        stripe_customer_id: Optional[str],
        effects: TransactionEffects,
    ) -> Customer:
        """
        Inserta el customer, lo vincula a Stripe (creando el customer remoto
        si no viene uno) y acumula los efectos de creación.
        """
        external_id = random_token()
        if not stripe_customer_id:
            stripe_customer = await self.processor.create_customer(
                email=email,
                name=name,
                livemode=checkout_session.livemode,
                metadata={
                    "organization_id": checkout_session.organization_id,
                    "external_id": external_id,
                },
            )
            stripe_customer_id = stripe_id_from_object_or_id(stripe_customer)

        pricing_model_id = await self._pricing_model_id_for(session, checkout_session)
        customer = await self.customers.create(
            session,
            organization_id=checkout_session.organization_id,
            pricing_model_id=pricing_model_id,
            email=email,
            name=name,
            external_id=external_id,
            stripe_customer_id=stripe_customer_id,
            billing_address=checkout_session.billing_address,
            invoice_number_base=random_token(8).upper(),
            livemode=checkout_session.livemode,
        )
        logger.info(
            "customer_created customer_id=%s checkout_session_id=%s stripe_customer_id=%s",
            customer.id,
            checkout_session.id,
            stripe_customer_id,
        )

        effects.emit(
            DomainEventInsert(
                type=EventType.CUSTOMER_CREATED,
                organization_id=customer.organization_id,
                object_id=customer.id,
                payload={"email": customer.email, "external_id": customer.external_id},
                livemode=customer.livemode,
            )
        )

        if pricing_model_id:
            product, price = await self.prices.get_default_product_and_price(session, pricing_model_id)
            if product is not None and price is not None and price.unit_price == 0:
                effects.add_task(
                    DeferredTask(
                        name=CREATE_DEFAULT_SUBSCRIPTION_TASK,
                        payload={
                            "customer_id": customer.id,
                            "product_id": product.id,
                            "price_id": price.id,
                            "livemode": customer.livemode,
                        },
                    )
                )
        return customer

    async def ensure_stripe_customer(
        self,
        session: AsyncSession,
        customer: Customer,
    ) -> str:
        """
        Devuelve el customer de Stripe del customer, creándolo si falta.

        Raises:
            ValidationError: el customer no tiene email
        """
        if customer.stripe_customer_id:
            return customer.stripe_customer_id
        if not customer.email:
            raise ValidationError(f"Customer {customer.id} has no email; cannot create a Stripe customer")
        stripe_customer = await self.processor.create_customer(
            email=customer.email,
            name=customer.name or customer.email,
            livemode=customer.livemode,
            metadata={"customer_id": customer.id, "organization_id": customer.organization_id},
        )
        stripe_customer_id = stripe_id_from_object_or_id(stripe_customer)
        await self.customers.update(session, customer, stripe_customer_id=stripe_customer_id)
        return stripe_customer_id


__all__ = [
    "CREATE_DEFAULT_SUBSCRIPTION_TASK",
    "ResolvedCustomer",
    "CustomerResolver",
]
