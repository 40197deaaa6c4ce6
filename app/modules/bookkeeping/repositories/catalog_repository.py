# -*- coding: utf-8 -*-
"""
backend/app/modules/bookkeeping/repositories/catalog_repository.py

Repositorios de catálogo: organizations, pricing models, products,
prices y discounts.

Autor: Equipo Billing
Fecha: 2026-01-12
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.database.repository import BaseRepository

from ..models import Discount, Organization, Price, PricingModel, Product


class OrganizationRepository(BaseRepository[Organization]):
    entity_name = "organization"

    def __init__(self) -> None:
        super().__init__(Organization)


class PricingModelRepository(BaseRepository[PricingModel]):
    entity_name = "pricing_model"

    def __init__(self) -> None:
        super().__init__(PricingModel)

    async def get_default_for_organization(
        self,
        session: AsyncSession,
        organization_id: str,
        livemode: bool,
    ) -> Optional[PricingModel]:
        return await self.first_where(
            session,
            organization_id=organization_id,
            livemode=livemode,
            is_default=True,
        )


class ProductRepository(BaseRepository[Product]):
    entity_name = "product"

    def __init__(self) -> None:
        super().__init__(Product)


class PriceRepository(BaseRepository[Price]):
    entity_name = "price"

    def __init__(self) -> None:
        super().__init__(Price)

    async def get_default_product_and_price(
        self,
        session: AsyncSession,
        pricing_model_id: str,
    ) -> tuple[Optional[Product], Optional[Price]]:
        """
        Producto y precio por defecto (plan free) del pricing model.

        Returns:
            (product, price); cualquiera puede ser None si no está configurado.
        """
        stmt = (
            select(Product, Price)
            .join(Price, Price.product_id == Product.id)
            .where(
                Product.pricing_model_id == pricing_model_id,
                Product.is_default.is_(True),
                Product.active.is_(True),
                Price.is_default.is_(True),
                Price.active.is_(True),
            )
            .limit(1)
        )
        result = await session.execute(stmt)
        row = result.first()
        if row is None:
            return None, None
        return row[0], row[1]


class DiscountRepository(BaseRepository[Discount]):
    entity_name = "discount"

    def __init__(self) -> None:
        super().__init__(Discount)


__all__ = [
    "OrganizationRepository",
    "PricingModelRepository",
    "ProductRepository",
    "PriceRepository",
    "DiscountRepository",
]
