from sqlalchemy import select

from src.app.query.descriptor import EntitySchema
from src.app.query.relational import (
    RelationalEntity,
    RelationalQueryBuilder,
    VirtualColumn,
    json_array_agg,
)
from src.app.query.search_index import SearchIndexQueryBuilder

from .models import Category, Product, Tag, product_tags

# API name -> column; API names are the camelCase field names of the index documents
PRODUCT_COLUMNS = {
    "id": Product.id,
    "title": Product.title,
    "description": Product.description,
    "price": Product.price,
    "discountPercentage": Product.discount_percentage,
    "rating": Product.rating,
    "stock": Product.stock,
    "availabilityStatus": Product.availability_status,
    "brand": Product.brand,
    "sku": Product.sku,
    "weight": Product.weight,
    "warrantyInformation": Product.warranty_information,
    "shippingInformation": Product.shipping_information,
    "returnPolicy": Product.return_policy,
    "minimumOrderQuantity": Product.minimum_order_quantity,
    "thumbnail": Product.thumbnail,
}

DEFAULT_PRODUCT_SELECT = ("id", "title")
ANALYZED_PRODUCT_FIELDS = ("category", "tags", "availabilityStatus")

PRODUCT_SCHEMA = EntitySchema(
    "product",
    select_columns=(
        "id",
        "title",
        "description",
        "category",
        "tags",
        "price",
        "discountPercentage",
        "rating",
        "stock",
        "availabilityStatus",
        "brand",
        "sku",
        "weight",
        "warrantyInformation",
        "shippingInformation",
        "returnPolicy",
        "minimumOrderQuantity",
        "thumbnail",
    ),
    text_search_columns=(
        "title",
        "description",
        "category",
        "tags",
        "availabilityStatus",
        "brand",
        "sku",
    ),
    numeric_search_columns=("id", "price", "rating", "weight", "stock"),
    order_by_columns=tuple(PRODUCT_COLUMNS),
    default_select=DEFAULT_PRODUCT_SELECT,
)


def _join_tags(from_clause):
    return from_clause.outerjoin(
        product_tags, product_tags.c.product_id == Product.id
    ).outerjoin(Tag.__table__, Tag.id == product_tags.c.tag_id)


def _product_tags():
    return (
        select(product_tags.c.product_id)
        .join(Tag.__table__, Tag.id == product_tags.c.tag_id)
        .where(product_tags.c.product_id == Product.id)
        .correlate(Product.__table__)
    )


def _join_category(from_clause):
    return from_clause.outerjoin(Category.__table__, Category.id == Product.category_id)


def _product_category():
    return (
        select(Category.id)
        .where(Category.id == Product.category_id)
        .correlate(Product.__table__)
    )


PRODUCT_VIRTUAL_COLUMNS = {
    "tags": VirtualColumn(
        projection=json_array_agg(Tag.name),
        join=_join_tags,
        match_target=Tag.name,
        match_from=_product_tags,
    ),
    "category": VirtualColumn(
        projection=Category.name,
        join=_join_category,
        group_by=(Category.id, Category.name),
        match_target=Category.name,
        match_from=_product_category,
    ),
}

PRODUCT_ENTITY = RelationalEntity(
    PRODUCT_SCHEMA,
    table=Product.__table__,
    primary_key=Product.id,
    columns=PRODUCT_COLUMNS,
    virtual=PRODUCT_VIRTUAL_COLUMNS,
)

product_query_builder = RelationalQueryBuilder(PRODUCT_ENTITY)
product_search_query_builder = SearchIndexQueryBuilder(
    PRODUCT_SCHEMA, analyzed_fields=ANALYZED_PRODUCT_FIELDS
)
