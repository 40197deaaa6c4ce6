# -*- coding: utf-8 -*-
"""
backend/tests/modules/bookkeeping/conftest.py

Fixtures del módulo Bookkeeping:
- Engine SQLite en memoria (aiosqlite) por test, con el esquema completo
- Sesión async y fábrica de sesiones
- FakeStripeProvider que registra llamadas y devuelve ids deterministas
- Factories de datos semilla (setup_org, setup_customer, ...)

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Any, Optional

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.shared.config import reset_billing_settings
from app.shared.database import Base, build_session_factory
from app.modules.bookkeeping.enums import (
    CheckoutSessionStatus,
    CheckoutSessionType,
    DiscountAmountType,
    DiscountDuration,
    FeeCalculationType,
    IntervalUnit,
    InvoiceStatus,
    InvoiceType,
    PaymentMethodType,
    PaymentStatus,
    PriceType,
    PurchaseStatus,
    StripeConnectContractType,
    SubscriptionStatus,
)
from app.modules.bookkeeping.facades.dependencies import BookkeepingDependencies
from app.modules.bookkeeping.models import (
    CheckoutSession,
    Customer,
    Discount,
    FeeCalculation,
    Invoice,
    InvoiceLineItem,
    Organization,
    Payment,
    Price,
    PricingModel,
    Product,
    Purchase,
    Subscription,
)
from app.modules.bookkeeping.utils.id_helpers import random_token

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

US_BILLING_ADDRESS = {
    "name": "Ada Lovelace",
    "address": {
        "line1": "1 Market St",
        "city": "San Francisco",
        "state": "CA",
        "postal_code": "94105",
        "country": "US",
    },
}


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _billing_settings(monkeypatch):
    """Settings limpios por test (sin .env del desarrollador)."""
    monkeypatch.setenv("EMIT_EVENTS", "true")
    monkeypatch.setenv("INVOICE_NUMBER_PADDING", "5")
    reset_billing_settings()
    yield
    reset_billing_settings()


# -----------------------------------------------------------------------------
# Base de datos
# -----------------------------------------------------------------------------
@pytest.fixture
async def engine():
    engine = create_async_engine(TEST_DB_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    """Sesión de test; todo lo escrito se descarta al final."""
    async with session_factory() as session:
        yield session
        await session.rollback()


# -----------------------------------------------------------------------------
# Stripe
# -----------------------------------------------------------------------------
class FakeStripeProvider:
    """Implementación en memoria de ProcessorClient."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self.setup_intents: dict[str, dict[str, Any]] = {}
        self._customer_seq = 0

    def calls_to(self, name: str) -> list[tuple[tuple, dict]]:
        return [(args, kwargs) for n, args, kwargs in self.calls if n == name]

    async def create_customer(self, *, email, name, livemode, metadata=None):
        self.calls.append(("create_customer", (), {"email": email, "name": name, "livemode": livemode}))
        self._customer_seq += 1
        return {"id": f"cus_fake_{self._customer_seq}", "email": email, "name": name}

    async def update_payment_intent(
        self, payment_intent_id, *, livemode, amount=None, application_fee_amount=None, customer=None
    ):
        self.calls.append(
            (
                "update_payment_intent",
                (payment_intent_id,),
                {
                    "livemode": livemode,
                    "amount": amount,
                    "application_fee_amount": application_fee_amount,
                    "customer": customer,
                },
            )
        )
        return {"id": payment_intent_id}

    async def cancel_payment_intent(self, payment_intent_id, *, livemode):
        self.calls.append(("cancel_payment_intent", (payment_intent_id,), {"livemode": livemode}))
        return {"id": payment_intent_id, "status": "canceled"}

    async def get_setup_intent(self, setup_intent_id, *, livemode):
        self.calls.append(("get_setup_intent", (setup_intent_id,), {"livemode": livemode}))
        return self.setup_intents.get(setup_intent_id, {"id": setup_intent_id, "customer": None})

    async def update_setup_intent(self, setup_intent_id, *, customer, livemode):
        self.calls.append(
            ("update_setup_intent", (setup_intent_id,), {"customer": customer, "livemode": livemode})
        )
        return {"id": setup_intent_id, "customer": customer}

    async def get_payment_method(self, payment_method_id, *, livemode):
        self.calls.append(("get_payment_method", (payment_method_id,), {"livemode": livemode}))
        return {
            "id": payment_method_id,
            "type": "card",
            "billing_details": {"name": "Ada Lovelace", "email": "ada@example.com"},
        }


@pytest.fixture
def fake_stripe() -> FakeStripeProvider:
    return FakeStripeProvider()


@pytest.fixture
def deps(fake_stripe) -> BookkeepingDependencies:
    return BookkeepingDependencies.build(processor=fake_stripe)


# -----------------------------------------------------------------------------
# Factories de datos semilla
# -----------------------------------------------------------------------------
async def _add(db, obj):
    db.add(obj)
    await db.flush()
    return obj


@pytest.fixture
def setup_org(db):
    async def _setup_org(**overrides: Any) -> dict[str, Any]:
        """Organización + pricing model por defecto + producto + precio."""
        org = await _add(
            db,
            Organization(
                name=overrides.pop("name", "Acme"),
                fee_percentage=overrides.pop("fee_percentage", "0.65"),
                country_code=overrides.pop("country_code", "US"),
                stripe_connect_contract_type=overrides.pop(
                    "contract_type", StripeConnectContractType.PLATFORM
                ),
                allow_multiple_subscriptions_per_customer=overrides.pop(
                    "allow_multiple_subscriptions_per_customer", False
                ),
            ),
        )
        pricing_model = await _add(
            db,
            PricingModel(organization_id=org.id, name="Default", is_default=True, livemode=False),
        )
        product = await _add(
            db,
            Product(organization_id=org.id, pricing_model_id=pricing_model.id, name="Pro Plan", livemode=False),
        )
        price_type = overrides.pop("price_type", PriceType.SINGLE_PAYMENT)
        is_subscription = price_type == PriceType.SUBSCRIPTION
        price = await _add(
            db,
            Price(
                product_id=product.id,
                type=price_type,
                unit_price=overrides.pop("unit_price", 1000),
                currency="usd",
                interval_unit=overrides.pop("interval_unit", IntervalUnit.MONTH if is_subscription else None),
                interval_count=1 if is_subscription else None,
                trial_period_days=overrides.pop("trial_period_days", None),
                livemode=False,
            ),
        )
        return {"organization": org, "pricing_model": pricing_model, "product": product, "price": price}

    return _setup_org


@pytest.fixture
def setup_price(db):
    async def _setup_price(product: Product, **fields: Any) -> Price:
        fields.setdefault("type", PriceType.SINGLE_PAYMENT)
        fields.setdefault("unit_price", 1000)
        fields.setdefault("livemode", False)
        return await _add(db, Price(product_id=product.id, **fields))

    return _setup_price


@pytest.fixture
def setup_customer(db):
    async def _setup_customer(organization: Organization, **fields: Any) -> Customer:
        fields.setdefault("email", f"{random_token(6).lower()}@example.com")
        fields.setdefault("name", "Test Customer")
        fields.setdefault("external_id", random_token())
        fields.setdefault("invoice_number_base", random_token(8).upper())
        fields.setdefault("livemode", False)
        return await _add(db, Customer(organization_id=organization.id, **fields))

    return _setup_customer


@pytest.fixture
def setup_discount(db):
    async def _setup_discount(organization: Organization, **fields: Any) -> Discount:
        fields.setdefault("name", "Launch")
        fields.setdefault("code", random_token(6).upper())
        fields.setdefault("amount_type", DiscountAmountType.PERCENT)
        fields.setdefault("amount", 10)
        fields.setdefault("duration", DiscountDuration.ONCE)
        fields.setdefault("livemode", False)
        return await _add(db, Discount(organization_id=organization.id, **fields))

    return _setup_discount


@pytest.fixture
def setup_checkout_session(db):
    async def _setup_checkout_session(
        organization: Organization,
        *,
        price: Optional[Price] = None,
        **fields: Any,
    ) -> CheckoutSession:
        fields.setdefault("type", CheckoutSessionType.PRODUCT)
        fields.setdefault("status", CheckoutSessionStatus.OPEN)
        fields.setdefault("customer_email", "ada@example.com")
        fields.setdefault("customer_name", "Ada Lovelace")
        fields.setdefault("billing_address", US_BILLING_ADDRESS)
        fields.setdefault("payment_method_type", PaymentMethodType.CARD)
        fields.setdefault("quantity", 1)
        fields.setdefault("livemode", False)
        return await _add(
            db,
            CheckoutSession(
                organization_id=organization.id,
                price_id=price.id if price is not None else None,
                **fields,
            ),
        )

    return _setup_checkout_session


@pytest.fixture
def setup_purchase(db):
    async def _setup_purchase(customer: Customer, price: Price, **fields: Any) -> Purchase:
        fields.setdefault("name", "Pro Plan")
        fields.setdefault("status", PurchaseStatus.OPEN)
        fields.setdefault("price_type", price.type)
        fields.setdefault("quantity", 1)
        fields.setdefault("first_invoice_value", price.unit_price)
        fields.setdefault("total_purchase_value", price.unit_price)
        fields.setdefault("livemode", False)
        return await _add(
            db,
            Purchase(
                organization_id=customer.organization_id,
                customer_id=customer.id,
                price_id=price.id,
                **fields,
            ),
        )

    return _setup_purchase


@pytest.fixture
def setup_fee_calculation(db):
    async def _setup_fee_calculation(checkout_session: CheckoutSession, **fields: Any) -> FeeCalculation:
        fields.setdefault("base_amount", 1000)
        fields.setdefault("discount_amount", 0)
        fields.setdefault("tax_amount", 0)
        fields.setdefault("platform_fee_percentage", "0.65")
        fields.setdefault("morsurcharge_percentage", "0")
        fields.setdefault("payment_method_fee_fixed", 0)
        return await _add(
            db,
            FeeCalculation(
                organization_id=checkout_session.organization_id,
                type=FeeCalculationType.CHECKOUT_SESSION_PAYMENT,
                checkout_session_id=checkout_session.id,
                price_id=checkout_session.price_id,
                invoice_id=checkout_session.invoice_id,
                discount_id=checkout_session.discount_id,
                billing_address=checkout_session.billing_address,
                payment_method_type=checkout_session.payment_method_type,
                quantity=checkout_session.quantity,
                livemode=checkout_session.livemode,
                **fields,
            ),
        )

    return _setup_fee_calculation


@pytest.fixture
def setup_invoice(db):
    async def _setup_invoice(
        customer: Customer,
        *,
        line_items: list[tuple[str, int, int]],
        **fields: Any,
    ) -> Invoice:
        """line_items: [(descripción, cantidad, precio unitario)]"""
        fields.setdefault("type", InvoiceType.STANDALONE)
        fields.setdefault("status", InvoiceStatus.OPEN)
        fields.setdefault("invoice_number", f"{customer.invoice_number_base}-{random_token(5)}")
        fields.setdefault("livemode", False)
        invoice = await _add(
            db,
            Invoice(organization_id=customer.organization_id, customer_id=customer.id, **fields),
        )
        for description, quantity, price in line_items:
            await _add(
                db,
                InvoiceLineItem(
                    invoice_id=invoice.id,
                    description=description,
                    quantity=quantity,
                    price=price,
                    livemode=False,
                ),
            )
        return invoice

    return _setup_invoice


@pytest.fixture
def setup_payment(db):
    async def _setup_payment(customer: Customer, **fields: Any) -> Payment:
        fields.setdefault("amount", 1000)
        fields.setdefault("status", PaymentStatus.SUCCEEDED)
        fields.setdefault("livemode", False)
        return await _add(
            db,
            Payment(organization_id=customer.organization_id, customer_id=customer.id, **fields),
        )

    return _setup_payment


@pytest.fixture
def setup_subscription(db):
    async def _setup_subscription(customer: Customer, price: Price, **fields: Any) -> Subscription:
        fields.setdefault("status", SubscriptionStatus.ACTIVE)
        fields.setdefault("interval", IntervalUnit.MONTH)
        fields.setdefault("interval_count", 1)
        fields.setdefault("livemode", False)
        return await _add(
            db,
            Subscription(
                organization_id=customer.organization_id,
                customer_id=customer.id,
                price_id=price.id,
                **fields,
            ),
        )

    return _setup_subscription
