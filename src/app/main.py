# src/app/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.app.core.errors import ErrorResponse
from src.app.features.categories.api import router as categories_router
from src.app.features.products.api import router as products_router
from src.app.features.products.queries import product_search_query_builder
from src.app.features.status.api import router as status_router
from src.db.automigrate import apply_migrations_safely
from src.db.session import create_db_engine
from src.services.search.elasticsearch_service import (
    ProductSearchService,
    create_elasticsearch_client,
)
from src.settings import Settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings

    if settings.RUN_MIGRATIONS_ON_STARTUP:
        apply_migrations_safely(settings)

    app.state.engine = create_db_engine(settings)
    app.state.product_search_service = ProductSearchService(
        create_elasticsearch_client(settings),
        product_search_query_builder,
        index_name=settings.ELASTIC_PRODUCTS_INDEX,
    )
    yield
    await app.state.product_search_service.close()
    logger.info("Disposing database engine")
    await app.state.engine.dispose()
    logger.info("Database engine disposed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())

    app = FastAPI(
        title="Demo eCommerce API",
        description="Read-only catalog of categories and products backed by a database and a search index.",
        lifespan=lifespan,
        docs_url="/swagger" if settings.IS_SWAGGER_ENABLED else None,
        redoc_url=None,
        openapi_url="/swagger.json" if settings.IS_SWAGGER_ENABLED else None,
    )
    app.state.settings = settings

    if settings.IS_CORS_ENABLED:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(status_router)

    @app.exception_handler(ErrorResponse)
    async def error_handler(_: Request, exc: ErrorResponse):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on ``HOST``:``PORT``."""
    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
