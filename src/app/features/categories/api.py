from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncEngine

from src.app.core.deps import get_engine
from src.app.query.descriptor import Descriptor
from src.app.query.pagination import PaginatedResult
from src.app.query.params import descriptor_params

from .queries import CATEGORY_SCHEMA
from .service import list_categories as svc_list_categories

router = APIRouter()


@router.get(
    "/categories",
    response_model=PaginatedResult[Dict[str, Any]],
    summary="Get all categories from the database",
    tags=["categories"],
)
async def get_categories(
    descriptor: Descriptor = Depends(descriptor_params(CATEGORY_SCHEMA)),
    engine: AsyncEngine = Depends(get_engine),
):
    return await svc_list_categories(engine, descriptor)
