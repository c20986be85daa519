from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncEngine

from src.app.core.deps import get_engine, get_product_search_service
from src.app.query.descriptor import Descriptor
from src.app.query.pagination import PaginatedResult
from src.app.query.params import descriptor_params, parse_positive_int, select_params
from src.services.search.elasticsearch_service import ProductSearchService

from .queries import PRODUCT_SCHEMA
from .schemas import ProductAggregation
from .service import (
    search_products as svc_search_products,
    list_products as svc_list_products,
    get_product as svc_get_product,
    get_product_aggregations as svc_get_product_aggregations,
)

router = APIRouter()

product_descriptor = descriptor_params(PRODUCT_SCHEMA)


@router.get(
    "/products",
    response_model=PaginatedResult[Dict[str, Any]],
    summary="Get products from Elasticsearch",
    tags=["products"],
)
async def get_products(
    descriptor: Descriptor = Depends(product_descriptor),
    search_service: ProductSearchService = Depends(get_product_search_service),
):
    return await svc_search_products(search_service, descriptor)


@router.get(
    "/products/from-main-database",
    response_model=PaginatedResult[Dict[str, Any]],
    summary="Get products from the main database",
    tags=["products"],
)
async def get_products_from_main_database(
    descriptor: Descriptor = Depends(product_descriptor),
    engine: AsyncEngine = Depends(get_engine),
):
    return await svc_list_products(engine, descriptor)


@router.get(
    "/products/aggs",
    response_model=ProductAggregation,
    summary="Get product aggregations from the main database",
    tags=["products"],
)
async def get_product_aggregations(engine: AsyncEngine = Depends(get_engine)):
    return await svc_get_product_aggregations(engine)


@router.get(
    "/products/{product_id}",
    response_model=Dict[str, Any],
    summary="Get a product by ID from the main database",
    tags=["products"],
)
async def get_product(
    product_id: str = Path(..., description="Product id (positive integer)"),
    select: List[str] = Depends(select_params(PRODUCT_SCHEMA)),
    engine: AsyncEngine = Depends(get_engine),
):
    return await svc_get_product(engine, parse_positive_int(product_id, "id"), select)
