from __future__ import annotations

import logging
from typing import Any, Dict

from elasticsearch import AsyncElasticsearch

from src.app.query.builders import QueryBuilder
from src.app.query.descriptor import Descriptor
from src.app.query.pagination import PaginatedResult, assemble
from src.app.query.search_index import extract_sources, extract_total
from src.settings import Settings

logger = logging.getLogger(__name__)


def create_elasticsearch_client(settings: Settings) -> AsyncElasticsearch:
    logger.info("Creating Elasticsearch client for %s", settings.elastic_url)
    return AsyncElasticsearch(
        settings.elastic_url,
        basic_auth=(settings.ELASTIC_USERNAME, settings.ELASTIC_PASSWORD),
    )


class ProductSearchService:
    """
    Read access to the products index mirrored from the main database.

    - Builds the request with ``SearchIndexQueryBuilder``
    - Wraps hits in the same pagination envelope as the relational path
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        builder: QueryBuilder[Dict[str, Any]],
        index_name: str = "products",
    ):
        self._client = client
        self._builder = builder
        self.index_name = index_name

    async def search(self, descriptor: Descriptor) -> PaginatedResult[Dict[str, Any]]:
        body = self._builder.build(descriptor)
        response = await self._client.search(
            index=self.index_name,
            source=body["_source"],
            query=body["query"],
            sort=body["sort"],
            from_=body["from"],
            size=body["size"],
        )
        hits = response["hits"]
        total = extract_total(hits)
        return assemble(extract_sources(hits), total, descriptor.page, descriptor.page_size)

    async def close(self) -> None:
        logger.info("Closing Elasticsearch client")
        await self._client.close()
        logger.info("Elasticsearch client closed")
