# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/services/fee_calculation_service.py

Fee Calculation Gate: decide si una checkout session tiene datos
suficientes para calcular un total determinista, y crea o reutiliza el
snapshot FeeCalculation correspondiente.

Regla de recompute-or-reuse (usada por todas las rutas de mutación):
- Si cambiaron los parámetros que afectan fees (precio, descuento,
  país/región de facturación, cantidad) -> nuevo snapshot.
- Si no -> se reutiliza por referencia el snapshot más reciente de la
  sesión. El total cobrado debe coincidir con el cotizado.

Aritmética en Decimal con ROUND_HALF_UP; montos en centavos.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Protocol

from babel import Locale
from sqlalchemy.ext.asyncio import AsyncSession

from ..enums import (
    CheckoutSessionType,
    DiscountAmountType,
    FeeCalculationType,
    PaymentMethodType,
    StripeConnectContractType,
)
from ..errors import NotFoundError, ValidationError
from ..models import CheckoutSession, Discount, FeeCalculation, Organization, Price
from ..repositories import (
    DiscountRepository,
    FeeCalculationRepository,
    InvoiceLineItemRepository,
    InvoiceRepository,
    OrganizationRepository,
    PriceRepository,
)
from ..schemas import BillingAddress, FeeParameters

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constantes de fees
# ---------------------------------------------------------------------------
CARD_BASE_FEE_PERCENTAGE = Decimal("2.9")
CARD_FIXED_FEE_CENTS = 30
BANK_ACCOUNT_FEE_PERCENTAGE = Decimal("0.8")
BANK_ACCOUNT_MAX_FEE_CENTS = 500
SEPA_DEBIT_FEE_PERCENTAGE = Decimal("0.8")
SEPA_DEBIT_MAX_FEE_CENTS = 600
MOR_SURCHARGE_PERCENTAGE = "1.1"
CARD_CROSS_BORDER_FEE_PERCENTAGE = "1.5"

# Códigos ISO 3166 alpha-2 conocidos por CLDR ("ZZ" es región desconocida)
COUNTRY_CODES = frozenset(
    code for code in Locale("en").territories if len(code) == 2 and code.isalpha() and code != "ZZ"
)

_ONE = Decimal("1")


def _round_cents(value: Decimal) -> int:
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def calculate_percentage_fee(amount: int, percentage: Any) -> int:
    """
    Porcentaje de un monto en centavos, redondeado half-up.

    >>> calculate_percentage_fee(10000, "0.65")
    65
    """
    return _round_cents(Decimal(amount) * Decimal(str(percentage)) / Decimal(100))


def calculate_discount_amount(base_amount: int, discount: Optional[Discount]) -> int:
    """Fixed -> monto tal cual; Percent -> porcentaje del base (tope 100%)."""
    if discount is None:
        return 0
    if discount.amount_type == DiscountAmountType.FIXED:
        return discount.amount
    if discount.amount_type == DiscountAmountType.PERCENT:
        return calculate_percentage_fee(base_amount, min(discount.amount, 100))
    return 0


def calculate_payment_method_fee_amount(
    total_amount_to_charge: int,
    payment_method_type: Optional[PaymentMethodType],
) -> int:
    if total_amount_to_charge <= 0:
        return 0
    amount = Decimal(total_amount_to_charge)
    if payment_method_type == PaymentMethodType.US_BANK_ACCOUNT:
        return _round_cents(min(amount * BANK_ACCOUNT_FEE_PERCENTAGE / 100, Decimal(BANK_ACCOUNT_MAX_FEE_CENTS)))
    if payment_method_type == PaymentMethodType.SEPA_DEBIT:
        return _round_cents(min(amount * SEPA_DEBIT_FEE_PERCENTAGE / 100, Decimal(SEPA_DEBIT_MAX_FEE_CENTS)))
    # card, link y desconocidos
    return _round_cents(amount * CARD_BASE_FEE_PERCENTAGE / 100 + CARD_FIXED_FEE_CENTS)


def calculate_mor_surcharge_percentage(organization: Organization) -> str:
    if organization.stripe_connect_contract_type == StripeConnectContractType.MERCHANT_OF_RECORD:
        return MOR_SURCHARGE_PERCENTAGE
    return "0"


def calculate_international_fee_percentage(
    *,
    payment_method_type: Optional[PaymentMethodType],
    payment_method_country: Optional[str],
    organization: Organization,
) -> str:
    """
    Fee cross-border como porcentaje en texto.

    - MoR con pagador en US: "0"
    - Mismo país que la organización: "0"
    - Card o SEPA desde otro país: CARD_CROSS_BORDER_FEE_PERCENTAGE

    Raises:
        ValidationError: el país de facturación no es un código ISO conocido
    """
    payer_country = (payment_method_country or "").upper()
    if organization.is_merchant_of_record and payer_country == "US":
        return "0"
    if payer_country not in COUNTRY_CODES:
        raise ValidationError(
            f"Billing address country {payer_country} is not in the list of country codes"
        )
    if organization.country_code.upper() == payer_country:
        return "0"
    if payment_method_type in (PaymentMethodType.CARD, PaymentMethodType.SEPA_DEBIT):
        return CARD_CROSS_BORDER_FEE_PERCENTAGE
    return "0"


def calculate_total_due_amount(fee_calculation: FeeCalculation) -> Optional[int]:
    """
    max(base - descuento + impuesto, 0).

    Returns:
        None si el snapshot no tiene base_amount (total desconocido).
    """
    if fee_calculation.base_amount is None:
        return None
    return max(
        fee_calculation.base_amount
        - (fee_calculation.discount_amount or 0)
        + (fee_calculation.tax_amount or 0),
        0,
    )


def calculate_total_fee_amount(fee_calculation: FeeCalculation) -> int:
    """Fee total: % plataforma + recargo MoR + fee internacional + fee de método + impuesto."""
    base_amount = fee_calculation.base_amount or 0
    discount_inclusive = base_amount - max(fee_calculation.discount_amount or 0, 0)
    platform_fee = calculate_percentage_fee(discount_inclusive, fee_calculation.platform_fee_percentage)
    mor_surcharge = calculate_percentage_fee(discount_inclusive, fee_calculation.morsurcharge_percentage)
    international_fee = calculate_percentage_fee(
        discount_inclusive, fee_calculation.international_fee_percentage or "0"
    )
    return (
        platform_fee
        + mor_surcharge
        + international_fee
        + fee_calculation.payment_method_fee_fixed
        + (fee_calculation.tax_amount or 0)
    )


# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------

def fee_parameters_for(checkout_session: CheckoutSession) -> FeeParameters:
    address = BillingAddress.from_json(checkout_session.billing_address)
    return FeeParameters(
        price_id=checkout_session.price_id,
        invoice_id=checkout_session.invoice_id,
        discount_id=checkout_session.discount_id,
        country=address.country if address else None,
        region=address.region if address else None,
        quantity=checkout_session.quantity or 1,
    )


def fee_calculation_parameters_changed(
    previous: Optional[FeeParameters],
    current: FeeParameters,
) -> bool:
    """Compara exactamente los campos que afectan fees."""
    if previous is None:
        return True
    return previous != current


def is_fee_ready(checkout_session: CheckoutSession) -> bool:
    """
    True si la sesión tiene lo mínimo para un total determinista:
    dirección de facturación con país, tipo de método de pago, y el
    precio (sesiones de producto) o la invoice (sesiones de invoice).
    """
    if checkout_session.type == CheckoutSessionType.ADD_PAYMENT_METHOD:
        return False
    address = BillingAddress.from_json(checkout_session.billing_address)
    if address is None or not address.country:
        return False
    if checkout_session.payment_method_type is None:
        return False
    if checkout_session.type == CheckoutSessionType.INVOICE:
        return checkout_session.invoice_id is not None
    return checkout_session.price_id is not None


class TaxCalculator(Protocol):
    """Colaborador de impuestos (solo organizaciones merchant-of-record)."""

    async def calculate_tax_amount(
        self,
        *,
        discount_inclusive_amount: int,
        billing_address: Optional[dict[str, Any]],
        price: Optional[Price],
        livemode: bool,
    ) -> int: ...


class NoTaxCalculator:
    async def calculate_tax_amount(self, **_: Any) -> int:
        return 0


class FeeCalculationService:
    """
    Crea y resuelve snapshots de FeeCalculation para checkout sessions.
    """

    def __init__(
        self,
        fee_calculations: Optional[FeeCalculationRepository] = None,
        organizations: Optional[OrganizationRepository] = None,
        prices: Optional[PriceRepository] = None,
        discounts: Optional[DiscountRepository] = None,
        invoices: Optional[InvoiceRepository] = None,
        invoice_line_items: Optional[InvoiceLineItemRepository] = None,
        tax_calculator: Optional[TaxCalculator] = None,
    ) -> None:
        self.fee_calculations = fee_calculations or FeeCalculationRepository()
        self.organizations = organizations or OrganizationRepository()
        self.prices = prices or PriceRepository()
        self.discounts = discounts or DiscountRepository()
        self.invoices = invoices or InvoiceRepository()
        self.invoice_line_items = invoice_line_items or InvoiceLineItemRepository()
        self.tax_calculator = tax_calculator or NoTaxCalculator()

    async def get_latest(self, session: AsyncSession, checkout_session_id: str) -> Optional[FeeCalculation]:
        return await self.fee_calculations.get_latest_for_checkout_session(session, checkout_session_id)

    async def get_latest_or_raise(self, session: AsyncSession, checkout_session_id: str) -> FeeCalculation:
        fee_calculation = await self.get_latest(session, checkout_session_id)
        if fee_calculation is None:
            raise NotFoundError(
                "fee_calculation",
                checkout_session_id,
                message=f"No fee calculation found for checkout session {checkout_session_id}",
            )
        return fee_calculation

    async def create_for_checkout_session(
        self,
        session: AsyncSession,
        checkout_session: CheckoutSession,
    ) -> FeeCalculation:
        """
        Calcula e inserta un nuevo snapshot para la sesión.

        Raises:
            NotFoundError: organización, precio, descuento o invoice inexistente
            ValidationError: país de facturación desconocido
        """
        organization = await self.organizations.get_or_raise(session, checkout_session.organization_id)

        price: Optional[Price] = None
        discount: Optional[Discount] = None
        if checkout_session.type == CheckoutSessionType.INVOICE:
            invoice = await self.invoices.get_or_raise(session, checkout_session.invoice_id)
            line_items = await self.invoice_line_items.list_for_invoice(session, invoice.id)
            base_amount = sum(item.price * item.quantity for item in line_items)
            currency = invoice.currency
            internal_notes = "Invoice fee calculation"
        else:
            price = await self.prices.get_or_raise(session, checkout_session.price_id)
            base_amount = price.unit_price * (checkout_session.quantity or 1)
            currency = price.currency
            if checkout_session.discount_id:
                discount = await self.discounts.get_or_raise(session, checkout_session.discount_id)
            internal_notes = None

        address = BillingAddress.from_json(checkout_session.billing_address)
        international_fee_percentage = calculate_international_fee_percentage(
            payment_method_type=checkout_session.payment_method_type,
            payment_method_country=address.country if address else None,
            organization=organization,
        )

        discount_amount = calculate_discount_amount(base_amount, discount)
        discount_inclusive_amount = max(base_amount - discount_amount, 0)

        tax_amount = 0
        if organization.is_merchant_of_record and discount_inclusive_amount > 0:
            tax_amount = await self.tax_calculator.calculate_tax_amount(
                discount_inclusive_amount=discount_inclusive_amount,
                billing_address=checkout_session.billing_address,
                price=price,
                livemode=checkout_session.livemode,
            )

        fee_calculation = await self.fee_calculations.create(
            session,
            organization_id=organization.id,
            type=FeeCalculationType.CHECKOUT_SESSION_PAYMENT,
            checkout_session_id=checkout_session.id,
            invoice_id=checkout_session.invoice_id,
            price_id=checkout_session.price_id,
            discount_id=checkout_session.discount_id,
            billing_address=checkout_session.billing_address,
            payment_method_type=checkout_session.payment_method_type,
            quantity=checkout_session.quantity or 1,
            currency=currency,
            base_amount=base_amount,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            platform_fee_percentage=organization.fee_percentage,
            payment_method_fee_fixed=calculate_payment_method_fee_amount(
                discount_inclusive_amount + tax_amount,
                checkout_session.payment_method_type,
            ),
            morsurcharge_percentage=calculate_mor_surcharge_percentage(organization),
            international_fee_percentage=international_fee_percentage,
            internal_notes=internal_notes,
            livemode=checkout_session.livemode,
        )
        logger.info(
            "fee_calculation_created id=%s checkout_session_id=%s base=%d discount=%d tax=%d",
            fee_calculation.id,
            checkout_session.id,
            base_amount,
            discount_amount,
            tax_amount,
        )
        return fee_calculation

    async def recompute_or_reuse(
        self,
        session: AsyncSession,
        checkout_session: CheckoutSession,
        previous_parameters: Optional[FeeParameters],
    ) -> Optional[FeeCalculation]:
        """
        Aplica la regla recompute-or-reuse.

        Args:
            session: Sesión de base de datos
            checkout_session: sesión ya actualizada
            previous_parameters: parámetros de fees antes de la edición

        Returns:
            FeeCalculation vigente, o None si la sesión no es fee-ready.
        """
        if not is_fee_ready(checkout_session):
            return None

        current = fee_parameters_for(checkout_session)
        if fee_calculation_parameters_changed(previous_parameters, current):
            return await self.create_for_checkout_session(session, checkout_session)

        latest = await self.get_latest(session, checkout_session.id)
        if latest is None:
            # Primera vez fee-ready sin snapshot previo
            return await self.create_for_checkout_session(session, checkout_session)
        logger.debug(
            "fee_calculation_reused id=%s checkout_session_id=%s",
            latest.id,
            checkout_session.id,
        )
        return latest


__all__ = [
    "CARD_BASE_FEE_PERCENTAGE",
    "CARD_FIXED_FEE_CENTS",
    "MOR_SURCHARGE_PERCENTAGE",
    "CARD_CROSS_BORDER_FEE_PERCENTAGE",
    "COUNTRY_CODES",
    "calculate_percentage_fee",
    "calculate_discount_amount",
    "calculate_payment_method_fee_amount",
    "calculate_mor_surcharge_percentage",
    "calculate_international_fee_percentage",
    "calculate_total_due_amount",
    "calculate_total_fee_amount",
    "fee_parameters_for",
    "fee_calculation_parameters_changed",
    "is_fee_ready",
    "TaxCalculator",
    "NoTaxCalculator",
    "FeeCalculationService",
]
