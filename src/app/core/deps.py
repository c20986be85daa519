from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from src.services.search.elasticsearch_service import ProductSearchService


def get_engine(request: Request) -> AsyncEngine:
    return request.app.state.engine


def get_product_search_service(request: Request) -> ProductSearchService:
    return request.app.state.product_search_service
