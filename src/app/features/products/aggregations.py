from __future__ import annotations

from typing import List

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine

from src.app.query.relational import gather_or_cancel

from .models import Category, Product, Tag, product_tags
from .schemas import FacetCount, PriceStats, ProductAggregation


def _by_count(facets: List[FacetCount]) -> List[FacetCount]:
    return sorted(facets, key=lambda facet: facet.product_count, reverse=True)


async def _count_products(engine: AsyncEngine) -> int:
    async with engine.connect() as conn:
        result = await conn.execute(select(func.count()).select_from(Product))
        return int(result.scalar_one())


async def _tag_facets(engine: AsyncEngine) -> List[FacetCount]:
    query = (
        select(Tag.name, func.count(product_tags.c.tag_id))
        .select_from(Tag)
        .outerjoin(product_tags, product_tags.c.tag_id == Tag.id)
        .group_by(Tag.id, Tag.name)
    )
    async with engine.connect() as conn:
        rows = (await conn.execute(query)).all()
    return _by_count([FacetCount(name=name, product_count=int(count)) for name, count in rows])


async def _category_facets(engine: AsyncEngine) -> List[FacetCount]:
    query = (
        select(Category.name, func.count(Product.id))
        .select_from(Category)
        .outerjoin(Product, Product.category_id == Category.id)
        .group_by(Category.id, Category.name)
    )
    async with engine.connect() as conn:
        rows = (await conn.execute(query)).all()
    return _by_count([FacetCount(name=name, product_count=int(count)) for name, count in rows])


async def _brand_facets(engine: AsyncEngine) -> List[FacetCount]:
    query = select(Product.brand, func.count(Product.id)).group_by(Product.brand)
    async with engine.connect() as conn:
        rows = (await conn.execute(query)).all()
    return _by_count([FacetCount(name=brand, product_count=int(count)) for brand, count in rows])


async def _availability_status_facets(engine: AsyncEngine) -> List[FacetCount]:
    # Kept in grouping order, unlike the other facets
    query = select(Product.availability_status, func.count()).group_by(
        Product.availability_status
    )
    async with engine.connect() as conn:
        rows = (await conn.execute(query)).all()
    return [FacetCount(name=status, product_count=int(count)) for status, count in rows]


async def _price_stats(engine: AsyncEngine) -> PriceStats:
    query = select(
        func.min(Product.price), func.max(Product.price), func.avg(Product.price)
    )
    async with engine.connect() as conn:
        minimum, maximum, average = (await conn.execute(query)).one()
    return PriceStats(
        min=float(minimum or 0),
        max=float(maximum or 0),
        average=float(average or 0),
    )


async def aggregate_products(engine: AsyncEngine) -> ProductAggregation:
    """Facet counts and price statistics over the whole catalog.

    The six queries run concurrently; the first failure cancels the others
    and fails the whole call.
    """
    total, tags, categories, brands, statuses, price = await gather_or_cancel(
        _count_products(engine),
        _tag_facets(engine),
        _category_facets(engine),
        _brand_facets(engine),
        _availability_status_facets(engine),
        _price_stats(engine),
    )
    return ProductAggregation(
        total=total,
        tag=tags,
        category=categories,
        brand=brands,
        availability_status=statuses,
        price=price,
    )
