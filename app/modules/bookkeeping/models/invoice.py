# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/models/invoice.py

Modelos ORM para invoices e invoice_line_items.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, enum_column_type

from ..enums import InvoiceStatus, InvoiceType
from ..utils.datetime_helpers import utcnow
from ..utils.id_helpers import id_factory
from .common import LivemodeMixin, TimestampMixin


class Invoice(LivemodeMixin, TimestampMixin, Base):
    """
    Documento de cobro. Las invoices de purchase son 1:1 con el purchase
    (purchase_id único); las standalone se pagan vía sesiones tipo invoice.
    """

    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("inv"))

    organization_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("organizations.id"), nullable=False, index=True
    )

    customer_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("customers.id"), nullable=False, index=True
    )

    purchase_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("purchases.id"), nullable=True
    )

    subscription_id: Mapped[Optional[str]] = mapped_column(
        String(64), ForeignKey("subscriptions.id"), nullable=True
    )

    invoice_number: Mapped[str] = mapped_column(String(64), nullable=False)

    type: Mapped[InvoiceType] = mapped_column(
        enum_column_type(InvoiceType), nullable=False, default=InvoiceType.PURCHASE
    )

    status: Mapped[InvoiceStatus] = mapped_column(
        enum_column_type(InvoiceStatus), nullable=False, default=InvoiceStatus.DRAFT
    )

    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="usd")

    subtotal: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    tax_country: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)

    invoice_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    due_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        UniqueConstraint("purchase_id", name="uq_invoices_purchase_id"),
        UniqueConstraint("invoice_number", name="uq_invoices_invoice_number"),
    )

    def __repr__(self) -> str:
        return f"<Invoice id={self.id} number={self.invoice_number} status={self.status}>"


class InvoiceLineItem(LivemodeMixin, TimestampMixin, Base):
    __tablename__ = "invoice_line_items"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=id_factory("ili"))

    invoice_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("invoices.id"), nullable=False, index=True
    )

    price_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("prices.id"), nullable=True)

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    price: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        doc="Precio unitario en centavos.",
    )

    def __repr__(self) -> str:
        return f"<InvoiceLineItem id={self.id} invoice={self.invoice_id} price={self.price}x{self.quantity}>"


__all__ = ["Invoice", "InvoiceLineItem"]
