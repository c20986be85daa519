import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, Iterable

from elasticsearch import AsyncElasticsearch
from elasticsearch.helpers import async_bulk
from sqlalchemy.ext.asyncio import AsyncEngine

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from src.app.features.products.queries import PRODUCT_SCHEMA, product_query_builder  # noqa: E402
from src.app.query.descriptor import MAX_PAGE_SIZE, Descriptor  # noqa: E402
from src.app.query.relational import fetch_page  # noqa: E402
from src.db.session import create_db_engine  # noqa: E402
from src.services.search.elasticsearch_service import create_elasticsearch_client  # noqa: E402
from src.settings import Settings  # noqa: E402

logger = logging.getLogger(__name__)


def _keyword_with_analyzed() -> Dict[str, Any]:
    return {"type": "keyword", "fields": {"analyzed": {"type": "text"}}}


PRODUCTS_INDEX_SETTINGS = {"number_of_shards": 1, "number_of_replicas": 0}

PRODUCTS_INDEX_MAPPINGS = {
    "properties": {
        "title": {
            "type": "text",
            "fields": {"keyword": {"type": "keyword", "ignore_above": 256}},
        },
        "description": {"type": "text"},
        "category": _keyword_with_analyzed(),
        "tags": _keyword_with_analyzed(),
        "price": {"type": "double"},
        "discountPercentage": {"type": "double"},
        "rating": {"type": "double"},
        "stock": {"type": "double"},
        "availabilityStatus": _keyword_with_analyzed(),
        "brand": {"type": "keyword"},
        "sku": {"type": "keyword"},
        "weight": {"type": "double"},
        "warrantyInformation": {"type": "text"},
        "shippingInformation": {"type": "text"},
        "returnPolicy": {"type": "text"},
        "minimumOrderQuantity": {"type": "double"},
        "thumbnail": {"type": "keyword"},
    }
}


async def create_products_index(client: AsyncElasticsearch, index_name: str) -> None:
    await client.indices.create(
        index=index_name,
        settings=PRODUCTS_INDEX_SETTINGS,
        mappings=PRODUCTS_INDEX_MAPPINGS,
    )
    logger.info('Index "%s" created', index_name)


async def delete_products_index(client: AsyncElasticsearch, index_name: str) -> None:
    await client.indices.delete(index=index_name, ignore_unavailable=True)
    logger.info('Index "%s" deleted', index_name)


def _actions(index_name: str, products: Iterable[Dict[str, Any]]):
    for product in products:
        yield {"_index": index_name, "_id": str(product["id"]), "_source": product}


async def mirror_products(
    engine: AsyncEngine, client: AsyncElasticsearch, index_name: str
) -> int:
    """Copy every product row, with its category and tags, into the index.

    Returns the number of indexed documents.
    """
    indexed = 0
    page = 1
    while True:
        descriptor = Descriptor(
            select=list(PRODUCT_SCHEMA.select_columns),
            page=page,
            page_size=MAX_PAGE_SIZE,
        )
        result = await fetch_page(engine, product_query_builder, descriptor)
        if result.data:
            success, _ = await async_bulk(client, _actions(index_name, result.data))
            indexed += success
        if page >= result.total_pages:
            break
        page += 1
    logger.info('Indexed %d products into "%s"', indexed, index_name)
    return indexed


async def run(command: str, settings: Settings) -> None:
    client = create_elasticsearch_client(settings)
    engine = create_db_engine(settings) if command == "mirror" else None
    try:
        if command == "up":
            await create_products_index(client, settings.ELASTIC_PRODUCTS_INDEX)
        elif command == "down":
            await delete_products_index(client, settings.ELASTIC_PRODUCTS_INDEX)
        else:
            await mirror_products(engine, client, settings.ELASTIC_PRODUCTS_INDEX)
    finally:
        await client.close()
        if engine is not None:
            await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description="Manage the products search index")
    parser.add_argument(
        "command",
        choices=["up", "down", "mirror"],
        help="create the index, delete it, or copy the catalog into it",
    )
    args = parser.parse_args()

    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    asyncio.run(run(args.command, settings))


if __name__ == "__main__":
    main()
