from __future__ import annotations

from typing import Protocol, TypeVar, runtime_checkable

from .descriptor import Descriptor, EntitySchema

Q = TypeVar("Q", covariant=True)


@runtime_checkable
class QueryBuilder(Protocol[Q]):
    """Turns a validated Descriptor into a store-specific query.

    Implemented by ``RelationalQueryBuilder`` (SQLAlchemy statements) and
    ``SearchIndexQueryBuilder`` (Elasticsearch request body).
    """

    schema: EntitySchema

    def build(self, descriptor: Descriptor) -> Q: ...
