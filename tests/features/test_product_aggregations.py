import asyncio

import pytest
from sqlalchemy import func, insert, select, text
from sqlalchemy.exc import OperationalError, SQLAlchemyError

import src.app.features.products.aggregations as aggregations
from src.app.features.products.aggregations import aggregate_products
from src.app.features.products.models import Product, Tag, product_tags


def _counts(facets):
    return {facet.name: facet.product_count for facet in facets}


@pytest.mark.asyncio
async def test_aggregate_products(engine):
    result = await aggregate_products(engine)

    assert result.total == 5
    assert _counts(result.tag) == {"beauty": 2, "mascara": 1, "perfumes": 1, "furniture": 1}
    assert result.tag[0].name == "beauty"
    assert _counts(result.category) == {
        "Beauty Products": 2,
        "Beauty Accessories": 1,
        "Furniture": 2,
        "Groceries": 0,
    }
    assert [f.product_count for f in result.category] == [2, 2, 1, 0]
    assert _counts(result.brand) == {
        "Essence": 1,
        "Glamour Beauty": 1,
        "Calvin Klein": 1,
        "(unknown brand)": 1,
        "Annibale Colombo": 1,
    }
    assert _counts(result.availability_status) == {
        "In Stock": 3,
        "Low Stock": 1,
        "Out of Stock": 1,
    }
    assert result.price.min == pytest.approx(9.99)
    assert result.price.max == pytest.approx(1899.99)
    assert result.price.average == pytest.approx(555.99)


@pytest.mark.asyncio
async def test_tag_facet_sorted_by_product_count(empty_engine, make_product):
    async with empty_engine.begin() as conn:
        await conn.execute(
            insert(Tag.__table__),
            [{"id": 1, "name": "sale"}, {"id": 2, "name": "new"}, {"id": 3, "name": "popular"}],
        )
        await conn.execute(
            insert(Product.__table__), [make_product(i) for i in range(1, 41)]
        )
        links = (
            [{"product_id": i, "tag_id": 3} for i in range(1, 41)]
            + [{"product_id": i, "tag_id": 2} for i in range(1, 26)]
            + [{"product_id": i, "tag_id": 1} for i in range(1, 16)]
        )
        await conn.execute(insert(product_tags), links)

    result = await aggregate_products(empty_engine)

    assert [(f.name, f.product_count) for f in result.tag] == [
        ("popular", 40),
        ("new", 25),
        ("sale", 15),
    ]


@pytest.mark.asyncio
async def test_availability_status_facet_keeps_grouping_order(engine):
    # Unlike the other facets, this one is not re-sorted by count
    async with engine.connect() as conn:
        rows = (
            await conn.execute(
                select(Product.availability_status, func.count()).group_by(
                    Product.availability_status
                )
            )
        ).all()

    result = await aggregate_products(engine)

    assert [(f.name, f.product_count) for f in result.availability_status] == [
        (status, count) for status, count in rows
    ]


@pytest.mark.asyncio
async def test_aggregate_empty_catalog(empty_engine):
    result = await aggregate_products(empty_engine)

    assert result.total == 0
    assert result.tag == []
    assert result.category == []
    assert result.brand == []
    assert result.availability_status == []
    assert result.price.model_dump() == {"min": 0.0, "max": 0.0, "average": 0.0}


@pytest.mark.asyncio
async def test_aggregation_serializes_with_camel_case_keys(engine):
    result = await aggregate_products(engine)
    payload = result.model_dump(by_alias=True)
    assert set(payload) == {"total", "tag", "category", "brand", "availabilityStatus", "price"}
    assert set(payload["tag"][0]) == {"name", "productCount"}


@pytest.mark.asyncio
async def test_aggregate_fails_when_one_facet_query_fails(engine, monkeypatch):
    price_cancelled = asyncio.Event()

    async def failing_brand_facets(engine):
        raise SQLAlchemyError("brand facet failed")

    async def slow_price_stats(engine):
        try:
            await asyncio.sleep(10)
        except asyncio.CancelledError:
            price_cancelled.set()
            raise

    monkeypatch.setattr(aggregations, "_brand_facets", failing_brand_facets)
    monkeypatch.setattr(aggregations, "_price_stats", slow_price_stats)

    with pytest.raises(SQLAlchemyError, match="brand facet failed"):
        await aggregate_products(engine)
    assert price_cancelled.is_set()


@pytest.mark.asyncio
async def test_aggregate_propagates_missing_table(engine):
    async with engine.begin() as conn:
        await conn.execute(text("DROP TABLE product_tags"))

    with pytest.raises(OperationalError):
        await aggregate_products(engine)
