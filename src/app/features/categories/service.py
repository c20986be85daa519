from __future__ import annotations

from typing import Any, Dict

from sqlalchemy.ext.asyncio import AsyncEngine

from src.app.query.descriptor import Descriptor
from src.app.query.pagination import PaginatedResult
from src.app.query.relational import fetch_page

from .queries import category_query_builder


async def list_categories(
    engine: AsyncEngine, descriptor: Descriptor
) -> PaginatedResult[Dict[str, Any]]:
    return await fetch_page(engine, category_query_builder, descriptor)
