from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Sequence, Union

from pydantic import (
    AllowInfNan,
    BaseModel,
    ConfigDict,
    Field,
    StrictFloat,
    StrictInt,
    StrictStr,
)

from src.app.core.errors import InvalidQueryError

DEFAULT_SELECT = ("id",)
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

TEXT_OPERATIONS = ("like", "not like")
NUMERIC_OPERATIONS = ("=", "!=", ">", ">=", "<", "<=")

Operation = Literal["like", "not like", "=", "!=", ">", ">=", "<", "<="]
Direction = Literal["asc", "desc"]
StrictFiniteFloat = Annotated[StrictFloat, AllowInfNan(False)]


class SearchFilter(BaseModel):
    column: str
    operation: Optional[Operation] = Field(
        None, description="Defaults to 'like' for text columns and '=' for numeric ones"
    )
    value: Union[StrictInt, StrictFiniteFloat, StrictStr]


class OrderSpec(BaseModel):
    column: str
    direction: Direction = "asc"


def default_order_by() -> List[OrderSpec]:
    return [OrderSpec(column="id", direction="asc")]


class Descriptor(BaseModel):
    """Normalized list request shared by the relational and search-index builders."""

    model_config = ConfigDict(populate_by_name=True)

    select: List[str] = Field(default_factory=lambda: list(DEFAULT_SELECT))
    search: List[SearchFilter] = Field(default_factory=list)
    order_by: List[OrderSpec] = Field(default_factory=default_order_by, alias="orderBy")
    page: int = Field(DEFAULT_PAGE, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class EntitySchema:
    """Per-entity allow-lists for select, search and orderBy columns.

    Search columns are typed: text columns take ``like``/``not like`` with a
    string value, numeric columns take the six comparison operations with a
    number.
    """

    def __init__(
        self,
        name: str,
        *,
        select_columns: Sequence[str],
        text_search_columns: Sequence[str],
        numeric_search_columns: Sequence[str],
        order_by_columns: Sequence[str],
        default_select: Sequence[str] = DEFAULT_SELECT,
    ):
        self.name = name
        self.select_columns = tuple(select_columns)
        self.text_search_columns = tuple(text_search_columns)
        self.numeric_search_columns = tuple(numeric_search_columns)
        self.order_by_columns = tuple(order_by_columns)
        self.default_select = tuple(default_select)

    def is_text(self, column: str) -> bool:
        return column in self.text_search_columns

    def is_numeric(self, column: str) -> bool:
        return column in self.numeric_search_columns

    def check_select(self, columns: Sequence[str]) -> None:
        if not columns:
            raise InvalidQueryError("select must contain at least one column")
        for column in columns:
            if column not in self.select_columns:
                raise InvalidQueryError(
                    f'Unknown select column "{column}" for {self.name}. '
                    f"Available columns: {', '.join(self.select_columns)}"
                )

    def normalize_filter(self, search_filter: SearchFilter) -> SearchFilter:
        """Fill in the default operation and reject filters that do not fit the column type."""
        column = search_filter.column
        value = search_filter.value
        if self.is_text(column):
            operation = search_filter.operation or "like"
            if operation not in TEXT_OPERATIONS:
                raise InvalidQueryError(
                    f'Operation "{operation}" is not allowed for text column "{column}"'
                )
            if not isinstance(value, str):
                raise InvalidQueryError(f'Search value for "{column}" must be a string')
        elif self.is_numeric(column):
            operation = search_filter.operation or "="
            if operation not in NUMERIC_OPERATIONS:
                raise InvalidQueryError(
                    f'Operation "{operation}" is not allowed for numeric column "{column}"'
                )
            if isinstance(value, str):
                raise InvalidQueryError(f'Search value for "{column}" must be a number')
        else:
            raise InvalidQueryError(f'Unknown search column "{column}" for {self.name}')
        return search_filter.model_copy(update={"operation": operation})

    def check(self, descriptor: Descriptor) -> Descriptor:
        """Validate every column of the descriptor; returns it with default operations resolved."""
        self.check_select(descriptor.select)
        for order in descriptor.order_by:
            if order.column not in self.order_by_columns:
                raise InvalidQueryError(
                    f'Unknown orderBy column "{order.column}" for {self.name}'
                )
        if not 1 <= descriptor.page_size <= MAX_PAGE_SIZE or descriptor.page < 1:
            raise InvalidQueryError("page and pageSize must be positive integers")
        search = [self.normalize_filter(f) for f in descriptor.search]
        return descriptor.model_copy(update={"search": search})
