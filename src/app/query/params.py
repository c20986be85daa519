from __future__ import annotations

import json
from typing import Any, Callable, List, Optional

from fastapi import Query
from pydantic import TypeAdapter, ValidationError

from src.app.core.errors import InvalidQueryError

from .descriptor import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    Descriptor,
    EntitySchema,
    OrderSpec,
    SearchFilter,
    default_order_by,
)

_search_adapter = TypeAdapter(List[SearchFilter])
_order_by_adapter = TypeAdapter(List[OrderSpec])


def _describe(exc: ValidationError) -> str:
    error = exc.errors()[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}" if location else error["msg"]


def _parse_json(name: str, raw: Any) -> Any:
    if not isinstance(raw, str):
        return raw

    def reject_constant(constant: str) -> None:
        raise InvalidQueryError(f'{name} parameter contains a non-finite number: "{constant}"')

    try:
        return json.loads(raw, parse_constant=reject_constant)
    except json.JSONDecodeError:
        raise InvalidQueryError(f'{name} parameter is not valid JSON: "{raw}"')


def parse_positive_int(raw: Any, name: str, max_value: Optional[int] = None) -> int:
    """Parse a positive integer request value, optionally bounded by ``max_value``."""
    if max_value is not None and max_value <= 0:
        raise InvalidQueryError(f'Max value is not a positive integer: "{max_value}"')
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise InvalidQueryError(f'{name} parameter is not a valid number: "{raw}"')
    if not value.is_integer():
        raise InvalidQueryError(f'{name} parameter is not an integer: "{raw}"')
    if value <= 0:
        raise InvalidQueryError(f'{name} parameter is not a positive integer: "{raw}"')
    if max_value is not None and value > max_value:
        raise InvalidQueryError(
            f'{name} parameter value "{raw}" is greater than the allowed maximum ({max_value})'
        )
    return int(value)


def parse_select(raw: Optional[List[str]], schema: EntitySchema) -> List[str]:
    """Accept either a JSON array in one parameter or the parameter repeated."""
    if not raw:
        return list(schema.default_select)
    if len(raw) == 1 and raw[0].lstrip().startswith("["):
        columns = _parse_json("select", raw[0])
    else:
        columns = raw
    if not isinstance(columns, list) or not all(isinstance(c, str) for c in columns):
        raise InvalidQueryError("select parameter must be an array of column names")
    schema.check_select(columns)
    return columns


def parse_search(raw: Optional[str], schema: EntitySchema) -> List[SearchFilter]:
    if raw is None:
        return []
    try:
        filters = _search_adapter.validate_python(_parse_json("search", raw))
    except ValidationError as exc:
        raise InvalidQueryError(f"search parameter is invalid: {_describe(exc)}")
    return [schema.normalize_filter(f) for f in filters]


def parse_order_by(raw: Optional[str], schema: EntitySchema) -> List[OrderSpec]:
    if raw is None:
        return default_order_by()
    try:
        order_by = _order_by_adapter.validate_python(_parse_json("orderBy", raw))
    except ValidationError as exc:
        raise InvalidQueryError(f"orderBy parameter is invalid: {_describe(exc)}")
    for order in order_by:
        if order.column not in schema.order_by_columns:
            raise InvalidQueryError(
                f'Unknown orderBy column "{order.column}" for {schema.name}. '
                f"Available columns: {', '.join(schema.order_by_columns)}"
            )
    return order_by


def select_params(schema: EntitySchema) -> Callable[..., List[str]]:
    def dependency(
        select: Optional[List[str]] = Query(
            None,
            description=f"JSON array of columns to return. Available: {', '.join(schema.select_columns)}",
        ),
    ) -> List[str]:
        return parse_select(select, schema)

    return dependency


def descriptor_params(schema: EntitySchema) -> Callable[..., Descriptor]:
    """FastAPI dependency that turns list query parameters into a validated Descriptor."""

    def dependency(
        select: Optional[List[str]] = Query(
            None,
            description=f"JSON array of columns to return. Available: {', '.join(schema.select_columns)}",
        ),
        search: Optional[str] = Query(
            None,
            description='JSON array of filters, e.g. [{"column":"title","operation":"like","value":"phone"}]',
        ),
        order_by: Optional[str] = Query(
            None,
            alias="orderBy",
            description='JSON array of sort orders, e.g. [{"column":"id","direction":"asc"}]',
        ),
        page: Optional[str] = Query(None, description="Page number (positive integer)"),
        page_size: Optional[str] = Query(
            None,
            alias="pageSize",
            description=f"Number of items per page (positive integer, max {MAX_PAGE_SIZE})",
        ),
    ) -> Descriptor:
        return Descriptor(
            select=parse_select(select, schema),
            search=parse_search(search, schema),
            order_by=parse_order_by(order_by, schema),
            page=DEFAULT_PAGE if page is None else parse_positive_int(page, "page"),
            page_size=(
                DEFAULT_PAGE_SIZE
                if page_size is None
                else parse_positive_int(page_size, "pageSize", MAX_PAGE_SIZE)
            ),
        )

    return dependency
