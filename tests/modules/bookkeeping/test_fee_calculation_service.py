# -*- coding: utf-8 -*-
"""
backend/tests/modules/bookkeeping/test_fee_calculation_service.py

Tests del Fee Calculation Gate:
- Aritmética de fees (porcentaje, método de pago, descuentos, total)
- is_fee_ready
- Regla recompute-or-reuse
- Impuestos solo para organizaciones merchant-of-record
- Fee internacional (cross-border) por país de organización vs. pagador

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.modules.bookkeeping.enums import (
    CheckoutSessionType,
    DiscountAmountType,
    PaymentMethodType,
    StripeConnectContractType,
)
from app.modules.bookkeeping.errors import NotFoundError, ValidationError
from app.modules.bookkeeping.services import (
    FeeCalculationService,
    calculate_discount_amount,
    calculate_international_fee_percentage,
    calculate_payment_method_fee_amount,
    calculate_percentage_fee,
    calculate_total_due_amount,
    calculate_total_fee_amount,
    fee_parameters_for,
    is_fee_ready,
)


class RecordingTaxCalculator:
    def __init__(self, amount: int) -> None:
        self.amount = amount
        self.calls: list[dict] = []

    async def calculate_tax_amount(self, **kwargs):
        self.calls.append(kwargs)
        return self.amount


# -----------------------------------------------------------------------------
# Aritmética
# -----------------------------------------------------------------------------
class TestFeeArithmetic:

    def test_percentage_fee_rounds_half_up(self):
        assert calculate_percentage_fee(10000, "0.65") == 65
        assert calculate_percentage_fee(1000, "0.65") == 7
        assert calculate_percentage_fee(0, "0.65") == 0

    def test_card_fee(self):
        """2.9% + 30 centavos."""
        assert calculate_payment_method_fee_amount(1000, PaymentMethodType.CARD) == 59

    def test_bank_account_fee_is_capped(self):
        assert calculate_payment_method_fee_amount(10000, PaymentMethodType.US_BANK_ACCOUNT) == 80
        assert calculate_payment_method_fee_amount(1_000_000, PaymentMethodType.US_BANK_ACCOUNT) == 500

    def test_sepa_fee_is_capped(self):
        assert calculate_payment_method_fee_amount(1_000_000, PaymentMethodType.SEPA_DEBIT) == 600

    def test_no_fee_on_zero_total(self):
        assert calculate_payment_method_fee_amount(0, PaymentMethodType.CARD) == 0

    def test_discount_amounts(self):
        percent = SimpleNamespace(amount_type=DiscountAmountType.PERCENT, amount=10)
        fixed = SimpleNamespace(amount_type=DiscountAmountType.FIXED, amount=250)
        over = SimpleNamespace(amount_type=DiscountAmountType.PERCENT, amount=150)

        assert calculate_discount_amount(1000, None) == 0
        assert calculate_discount_amount(1000, percent) == 100
        assert calculate_discount_amount(1000, fixed) == 250
        assert calculate_discount_amount(1000, over) == 1000

    def test_total_due_never_negative(self):
        snapshot = SimpleNamespace(base_amount=1000, discount_amount=2000, tax_amount=0)
        assert calculate_total_due_amount(snapshot) == 0

    def test_total_due_unknown_without_base(self):
        snapshot = SimpleNamespace(base_amount=None, discount_amount=0, tax_amount=0)
        assert calculate_total_due_amount(snapshot) is None

    def test_total_fee_amount(self):
        snapshot = SimpleNamespace(
            base_amount=1000,
            discount_amount=0,
            tax_amount=0,
            platform_fee_percentage="0.65",
            morsurcharge_percentage="0",
            payment_method_fee_fixed=59,
        )
        assert calculate_total_fee_amount(snapshot) == 66

    def test_total_fee_amount_includes_international_fee(self):
        snapshot = SimpleNamespace(
            base_amount=1000,
            discount_amount=0,
            tax_amount=0,
            platform_fee_percentage="0.65",
            morsurcharge_percentage="0",
            international_fee_percentage="1.5",
            payment_method_fee_fixed=59,
        )
        # 7 plataforma + 15 internacional + 59 método
        assert calculate_total_fee_amount(snapshot) == 81


# -----------------------------------------------------------------------------
# Fee internacional
# -----------------------------------------------------------------------------
def _org(country_code: str = "US", merchant_of_record: bool = False) -> SimpleNamespace:
    return SimpleNamespace(country_code=country_code, is_merchant_of_record=merchant_of_record)


class TestInternationalFee:

    def test_same_country_has_no_fee(self):
        assert calculate_international_fee_percentage(
            payment_method_type=PaymentMethodType.CARD,
            payment_method_country="US",
            organization=_org("US"),
        ) == "0"

    def test_cross_border_card(self):
        assert calculate_international_fee_percentage(
            payment_method_type=PaymentMethodType.CARD,
            payment_method_country="GB",
            organization=_org("US"),
        ) == "1.5"

    def test_cross_border_sepa(self):
        assert calculate_international_fee_percentage(
            payment_method_type=PaymentMethodType.SEPA_DEBIT,
            payment_method_country="de",
            organization=_org("US"),
        ) == "1.5"

    def test_cross_border_bank_account_has_no_fee(self):
        assert calculate_international_fee_percentage(
            payment_method_type=PaymentMethodType.US_BANK_ACCOUNT,
            payment_method_country="GB",
            organization=_org("US"),
        ) == "0"

    def test_merchant_of_record_with_us_payer_has_no_fee(self):
        assert calculate_international_fee_percentage(
            payment_method_type=PaymentMethodType.CARD,
            payment_method_country="US",
            organization=_org("GB", merchant_of_record=True),
        ) == "0"

    def test_merchant_of_record_with_foreign_payer(self):
        assert calculate_international_fee_percentage(
            payment_method_type=PaymentMethodType.CARD,
            payment_method_country="DE",
            organization=_org("GB", merchant_of_record=True),
        ) == "1.5"

    def test_unknown_country_raises(self):
        with pytest.raises(ValidationError, match="not in the list of country codes"):
            calculate_international_fee_percentage(
                payment_method_type=PaymentMethodType.CARD,
                payment_method_country="XX",
                organization=_org("US"),
            )


# -----------------------------------------------------------------------------
# Gate
# -----------------------------------------------------------------------------
class TestFeeReadiness:

    @pytest.mark.asyncio
    async def test_product_session_with_address_and_method_is_ready(self, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        assert is_fee_ready(checkout_session) is True

    @pytest.mark.asyncio
    async def test_missing_country_is_not_ready(self, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], billing_address={"name": "Ada"}
        )
        assert is_fee_ready(checkout_session) is False

    @pytest.mark.asyncio
    async def test_add_payment_method_session_is_never_ready(self, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(
            data["organization"], type=CheckoutSessionType.ADD_PAYMENT_METHOD
        )
        assert is_fee_ready(checkout_session) is False


class TestFeeCalculationService:

    @pytest.mark.asyncio
    async def test_create_for_product_session(self, db, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"], quantity=2)

        fee_calculation = await FeeCalculationService().create_for_checkout_session(db, checkout_session)

        assert fee_calculation.base_amount == 2000
        assert fee_calculation.discount_amount == 0
        assert fee_calculation.tax_amount == 0
        assert fee_calculation.morsurcharge_percentage == "0"
        assert fee_calculation.payment_method_fee_fixed == calculate_payment_method_fee_amount(
            2000, PaymentMethodType.CARD
        )
        assert calculate_total_due_amount(fee_calculation) == 2000

    @pytest.mark.asyncio
    async def test_create_applies_discount(self, db, setup_org, setup_discount, setup_checkout_session):
        data = await setup_org()
        discount = await setup_discount(data["organization"], amount=25)
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], discount_id=discount.id
        )

        fee_calculation = await FeeCalculationService().create_for_checkout_session(db, checkout_session)

        assert fee_calculation.discount_amount == 250
        assert calculate_total_due_amount(fee_calculation) == 750

    @pytest.mark.asyncio
    async def test_create_for_invoice_session_sums_line_items(
        self, db, setup_org, setup_customer, setup_invoice, setup_checkout_session
    ):
        data = await setup_org()
        customer = await setup_customer(data["organization"])
        invoice = await setup_invoice(customer, line_items=[("Consulting", 2, 300), ("Setup", 1, 400)])
        checkout_session = await setup_checkout_session(
            data["organization"], type=CheckoutSessionType.INVOICE, invoice_id=invoice.id
        )

        fee_calculation = await FeeCalculationService().create_for_checkout_session(db, checkout_session)

        assert fee_calculation.base_amount == 1000
        assert fee_calculation.invoice_id == invoice.id

    @pytest.mark.asyncio
    async def test_merchant_of_record_gets_tax_and_surcharge(self, db, setup_org, setup_checkout_session):
        data = await setup_org(contract_type=StripeConnectContractType.MERCHANT_OF_RECORD)
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        tax = RecordingTaxCalculator(80)

        fee_calculation = await FeeCalculationService(tax_calculator=tax).create_for_checkout_session(
            db, checkout_session
        )

        assert fee_calculation.tax_amount == 80
        assert fee_calculation.morsurcharge_percentage == "1.1"
        assert calculate_total_due_amount(fee_calculation) == 1080
        assert tax.calls[0]["discount_inclusive_amount"] == 1000

    @pytest.mark.asyncio
    async def test_platform_org_never_calls_tax(self, db, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        tax = RecordingTaxCalculator(80)

        fee_calculation = await FeeCalculationService(tax_calculator=tax).create_for_checkout_session(
            db, checkout_session
        )

        assert fee_calculation.tax_amount == 0
        assert tax.calls == []

    @pytest.mark.asyncio
    async def test_create_stores_international_fee(self, db, setup_org, setup_checkout_session):
        data = await setup_org(country_code="GB")
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        fee_calculation = await FeeCalculationService().create_for_checkout_session(db, checkout_session)

        assert fee_calculation.international_fee_percentage == "1.5"
        # 7 plataforma + 15 internacional + fee de tarjeta
        assert calculate_total_fee_amount(fee_calculation) == 22 + fee_calculation.payment_method_fee_fixed

    @pytest.mark.asyncio
    async def test_create_same_country_has_no_international_fee(self, db, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        fee_calculation = await FeeCalculationService().create_for_checkout_session(db, checkout_session)

        assert fee_calculation.international_fee_percentage == "0"

    @pytest.mark.asyncio
    async def test_get_latest_or_raise_without_snapshot(self, db, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])

        with pytest.raises(NotFoundError):
            await FeeCalculationService().get_latest_or_raise(db, checkout_session.id)


class TestRecomputeOrReuse:

    @pytest.mark.asyncio
    async def test_reuses_when_parameters_unchanged(
        self, db, setup_org, setup_checkout_session, setup_fee_calculation
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        existing = await setup_fee_calculation(checkout_session)
        previous = fee_parameters_for(checkout_session)

        # Cambiar el nombre del cliente no afecta fees
        checkout_session.customer_name = "Grace Hopper"
        result = await FeeCalculationService().recompute_or_reuse(db, checkout_session, previous)

        assert result.id == existing.id

    @pytest.mark.asyncio
    async def test_recomputes_when_quantity_changes(
        self, db, setup_org, setup_checkout_session, setup_fee_calculation
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        existing = await setup_fee_calculation(checkout_session)
        previous = fee_parameters_for(checkout_session)

        checkout_session.quantity = 3
        result = await FeeCalculationService().recompute_or_reuse(db, checkout_session, previous)

        assert result.id != existing.id
        assert result.base_amount == 3000

    @pytest.mark.asyncio
    async def test_recomputes_when_region_changes(
        self, db, setup_org, setup_checkout_session, setup_fee_calculation
    ):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        existing = await setup_fee_calculation(checkout_session)
        previous = fee_parameters_for(checkout_session)

        checkout_session.billing_address = {"address": {"country": "US", "state": "NY"}}
        result = await FeeCalculationService().recompute_or_reuse(db, checkout_session, previous)

        assert result.id != existing.id

    @pytest.mark.asyncio
    async def test_creates_first_snapshot_when_none_exists(self, db, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(data["organization"], price=data["price"])
        previous = fee_parameters_for(checkout_session)

        result = await FeeCalculationService().recompute_or_reuse(db, checkout_session, previous)

        assert result is not None
        assert result.checkout_session_id == checkout_session.id

    @pytest.mark.asyncio
    async def test_returns_none_when_not_fee_ready(self, db, setup_org, setup_checkout_session):
        data = await setup_org()
        checkout_session = await setup_checkout_session(
            data["organization"], price=data["price"], payment_method_type=None
        )

        result = await FeeCalculationService().recompute_or_reuse(db, checkout_session, None)

        assert result is None
