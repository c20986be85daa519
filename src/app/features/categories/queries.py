from src.app.features.products.models import Category
from src.app.query.descriptor import EntitySchema
from src.app.query.relational import RelationalEntity, RelationalQueryBuilder

CATEGORY_SCHEMA = EntitySchema(
    "category",
    select_columns=("id", "name"),
    text_search_columns=("name",),
    numeric_search_columns=("id",),
    order_by_columns=("id", "name"),
)

CATEGORY_ENTITY = RelationalEntity(
    CATEGORY_SCHEMA,
    table=Category.__table__,
    primary_key=Category.id,
    columns={"id": Category.id, "name": Category.name},
)

category_query_builder = RelationalQueryBuilder(CATEGORY_ENTITY)
