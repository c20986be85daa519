from __future__ import annotations

import asyncio
import logging
import operator
from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
)

from sqlalchemy import JSON, func, select
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql import ColumnElement, FromClause, Select
from sqlalchemy.sql.functions import FunctionElement

from src.app.core.errors import InvalidQueryError, NotFoundError

from .descriptor import DEFAULT_SELECT, Descriptor, EntitySchema, SearchFilter
from .pagination import PaginatedResult, assemble

logger = logging.getLogger(__name__)

COMPARISONS = {
    "=": operator.eq,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


def compare(expression: ColumnElement, operation: str, value: Any) -> ColumnElement:
    """Build ``expression <operation> value``; text operations match substrings case-insensitively."""
    if operation == "like":
        return expression.ilike(f"%{value}%")
    if operation == "not like":
        return expression.not_ilike(f"%{value}%")
    try:
        return COMPARISONS[operation](expression, value)
    except KeyError:
        raise InvalidQueryError(f'Unsupported search operation "{operation}"')


class json_array_agg(FunctionElement):
    """Aggregate a column into a JSON array; ``[]`` when the group has no values."""

    type = JSON()
    inherit_cache = True
    name = "json_array_agg"


@compiles(json_array_agg)
def _json_array_agg_mysql(element, compiler, **kw):
    return "coalesce(json_arrayagg(%s), json_array())" % compiler.process(
        element.clauses, **kw
    )


@compiles(json_array_agg, "postgresql")
def _json_array_agg_postgresql(element, compiler, **kw):
    arg = compiler.process(element.clauses, **kw)
    return "coalesce(json_agg(%s) FILTER (WHERE %s IS NOT NULL), '[]'::json)" % (arg, arg)


@compiles(json_array_agg, "sqlite")
def _json_array_agg_sqlite(element, compiler, **kw):
    arg = compiler.process(element.clauses, **kw)
    return "coalesce(json_group_array(%s) FILTER (WHERE %s IS NOT NULL), '[]')" % (arg, arg)


class VirtualColumn:
    """A projected field that is not on the base row and needs joins to resolve.

    - ``join`` extends the FROM clause with the joins the field needs
    - ``projection`` is the (possibly aggregated) expression selected for it
    - ``group_by`` lists the keys added next to the primary key
    - ``match_from`` returns a sub-select correlated with the base table,
      used to filter on ``match_target`` without touching the FROM clause
    """

    def __init__(
        self,
        *,
        projection: ColumnElement,
        join: Callable[[FromClause], FromClause],
        group_by: Sequence[ColumnElement] = (),
        match_target: ColumnElement,
        match_from: Callable[[], Select],
    ):
        self.projection = projection
        self.join = join
        self.group_by = tuple(group_by)
        self.match_target = match_target
        self.match_from = match_from

    def predicate(self, operation: str, value: Any) -> ColumnElement:
        if operation == "not like":
            return ~self.match_from().where(compare(self.match_target, "like", value)).exists()
        return self.match_from().where(compare(self.match_target, operation, value)).exists()


class RelationalEntity:
    """Table topology of one entity: plain columns keyed by API name plus virtual columns."""

    def __init__(
        self,
        schema: EntitySchema,
        *,
        table: FromClause,
        primary_key: ColumnElement,
        columns: Mapping[str, ColumnElement],
        virtual: Optional[Mapping[str, VirtualColumn]] = None,
    ):
        self.schema = schema
        self.table = table
        self.primary_key = primary_key
        self.columns = dict(columns)
        self.virtual = dict(virtual or {})


class RelationalQuery(NamedTuple):
    data: Select
    count: Select


class RelationalQueryBuilder:
    def __init__(self, entity: RelationalEntity):
        self.entity = entity
        self.schema = entity.schema

    def _column(self, name: str) -> ColumnElement:
        try:
            return self.entity.columns[name]
        except KeyError:
            raise InvalidQueryError(f'Unknown column "{name}" for {self.schema.name}')

    def _predicate(self, search: SearchFilter) -> ColumnElement:
        virtual = self.entity.virtual.get(search.column)
        if virtual is not None:
            return virtual.predicate(search.operation, search.value)
        return compare(self._column(search.column), search.operation, search.value)

    def _projection(self, columns: Sequence[str]) -> Select:
        from_clause = self.entity.table
        selected: List[ColumnElement] = []
        group_by: List[ColumnElement] = []
        for name in columns:
            virtual = self.entity.virtual.get(name)
            if virtual is None:
                selected.append(self._column(name).label(name))
                continue
            from_clause = virtual.join(from_clause)
            selected.append(virtual.projection.label(name))
            group_by.extend(virtual.group_by)

        statement = select(*selected).select_from(from_clause)
        if group_by:
            statement = statement.group_by(self.entity.primary_key, *group_by)
        return statement

    def build(self, descriptor: Descriptor) -> RelationalQuery:
        descriptor = self.schema.check(descriptor)
        criteria = [self._predicate(search) for search in descriptor.search]

        data = self._projection(descriptor.select)
        count = select(func.count().label("total")).select_from(self.entity.table)
        if criteria:
            data = data.where(*criteria)
            count = count.where(*criteria)

        for order in descriptor.order_by:
            column = self._column(order.column)
            data = data.order_by(column.asc() if order.direction == "asc" else column.desc())

        data = data.limit(descriptor.page_size).offset(descriptor.offset)
        return RelationalQuery(data=data, count=count)

    def build_one(self, identifier: int, columns: Sequence[str] = DEFAULT_SELECT) -> Select:
        self.schema.check_select(columns)
        return self._projection(columns).where(self.entity.primary_key == identifier)


async def gather_or_cancel(*coroutines: Awaitable[Any]) -> List[Any]:
    """Await all coroutines concurrently; the first failure cancels the rest and is re-raised.

    Cancelled siblings are awaited so none keeps running on a pooled connection.
    """
    tasks = [asyncio.ensure_future(coroutine) for coroutine in coroutines]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _fetch_rows(engine: AsyncEngine, statement: Select) -> List[Dict[str, Any]]:
    async with engine.connect() as conn:
        result = await conn.execute(statement)
        return [dict(row) for row in result.mappings().all()]


async def _fetch_total(engine: AsyncEngine, statement: Select) -> int:
    async with engine.connect() as conn:
        result = await conn.execute(statement)
        return int(result.scalar_one())


async def fetch_page(
    engine: AsyncEngine, builder: RelationalQueryBuilder, descriptor: Descriptor
) -> PaginatedResult[Dict[str, Any]]:
    """Run the data and count queries concurrently and wrap them in the envelope."""
    query = builder.build(descriptor)
    rows, total = await gather_or_cancel(
        _fetch_rows(engine, query.data),
        _fetch_total(engine, query.count),
    )
    logger.debug("%s page %s: %s rows of %s", builder.schema.name, descriptor.page, len(rows), total)
    return assemble(rows, total, descriptor.page, descriptor.page_size)


async def fetch_one(
    engine: AsyncEngine,
    builder: RelationalQueryBuilder,
    identifier: int,
    columns: Sequence[str] = DEFAULT_SELECT,
) -> Dict[str, Any]:
    async with engine.connect() as conn:
        result = await conn.execute(builder.build_one(identifier, columns))
        row = result.mappings().first()
    if row is None:
        raise NotFoundError(f"{builder.schema.name.capitalize()} {identifier} not found")
    return dict(row)
