from __future__ import annotations

from typing import Any, Dict, Sequence

from sqlalchemy.ext.asyncio import AsyncEngine

from src.app.query.descriptor import Descriptor
from src.app.query.pagination import PaginatedResult
from src.app.query.relational import fetch_one, fetch_page
from src.services.search.elasticsearch_service import ProductSearchService

from .aggregations import aggregate_products
from .queries import DEFAULT_PRODUCT_SELECT, product_query_builder
from .schemas import ProductAggregation


async def search_products(
    search_service: ProductSearchService, descriptor: Descriptor
) -> PaginatedResult[Dict[str, Any]]:
    """List products from the search index."""
    return await search_service.search(descriptor)


async def list_products(
    engine: AsyncEngine, descriptor: Descriptor
) -> PaginatedResult[Dict[str, Any]]:
    """List products from the main database."""
    return await fetch_page(engine, product_query_builder, descriptor)


async def get_product(
    engine: AsyncEngine,
    product_id: int,
    select: Sequence[str] = DEFAULT_PRODUCT_SELECT,
) -> Dict[str, Any]:
    return await fetch_one(engine, product_query_builder, product_id, select)


async def get_product_aggregations(engine: AsyncEngine) -> ProductAggregation:
    return await aggregate_products(engine)
