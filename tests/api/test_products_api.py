import json

import pytest
from fastapi.testclient import TestClient

from src.app.core.errors import NotFoundError
from src.app.features.products.schemas import FacetCount, PriceStats, ProductAggregation
from src.app.query.pagination import assemble
from src.settings import Settings


@pytest.fixture
def calls():
    return []


@pytest.fixture
def app(monkeypatch, calls):
    import src.app.features.products.api as products_api
    from src.app.main import create_app

    async def search_products(search_service, descriptor):
        calls.append(("search", descriptor))
        rows = [{"id": 1, "title": "Essence Mascara Lash Princess"}]
        return assemble(rows, 42, descriptor.page, descriptor.page_size)

    async def list_products(engine, descriptor):
        calls.append(("list", descriptor))
        return assemble([], 0, descriptor.page, descriptor.page_size)

    async def get_product(engine, product_id, select):
        calls.append(("get", product_id, select))
        if product_id != 1:
            raise NotFoundError(f"Product {product_id} not found")
        return {"id": 1, "title": "Essence Mascara Lash Princess"}

    async def get_product_aggregations(engine):
        return ProductAggregation(
            total=1,
            tag=[FacetCount(name="beauty", product_count=1)],
            category=[FacetCount(name="Beauty Products", product_count=1)],
            brand=[FacetCount(name="Essence", product_count=1)],
            availability_status=[FacetCount(name="Low Stock", product_count=1)],
            price=PriceStats(min=9.99, max=9.99, average=9.99),
        )

    monkeypatch.setattr(products_api, "svc_search_products", search_products)
    monkeypatch.setattr(products_api, "svc_list_products", list_products)
    monkeypatch.setattr(products_api, "svc_get_product", get_product)
    monkeypatch.setattr(products_api, "svc_get_product_aggregations", get_product_aggregations)

    fastapi_app = create_app(
        Settings(DATABASE_URL="sqlite:///unused.db", RUN_MIGRATIONS_ON_STARTUP=False)
    )
    # The lifespan is not run; dependencies only need something to hand over
    fastapi_app.state.engine = object()
    fastapi_app.state.product_search_service = object()
    return fastapi_app


def test_list_products_from_search_index(app, calls):
    client = TestClient(app)
    res = client.get(
        "/products",
        params={
            "select": json.dumps(["id", "title"]),
            "search": json.dumps([{"column": "price", "operation": ">", "value": 100}]),
            "orderBy": json.dumps([{"column": "price", "direction": "desc"}]),
            "page": "2",
            "pageSize": "10",
        },
    )
    assert res.status_code == 200
    assert res.json() == {
        "data": [{"id": 1, "title": "Essence Mascara Lash Princess"}],
        "total": 42,
        "page": 2,
        "pageSize": 10,
        "totalPages": 5,
    }
    kind, descriptor = calls[0]
    assert kind == "search"
    assert descriptor.search[0].operation == ">"
    assert descriptor.order_by[0].column == "price"


def test_list_products_defaults(app, calls):
    client = TestClient(app)
    res = client.get("/products/from-main-database")
    assert res.status_code == 200
    assert res.json() == {"data": [], "total": 0, "page": 1, "pageSize": 10, "totalPages": 0}
    kind, descriptor = calls[0]
    assert kind == "list"
    assert descriptor.select == ["id", "title"]


@pytest.mark.parametrize(
    "params",
    [
        {"page": "0"},
        {"page": "abc"},
        {"pageSize": "101"},
        {"select": json.dumps(["id", "password"])},
        {"search": "not json"},
        {"search": json.dumps([{"column": "price", "operation": "like", "value": "1"}])},
        {"search": '[{"column": "price", "operation": "<", "value": NaN}]'},
        {"orderBy": json.dumps([{"column": "tags"}])},
    ],
)
def test_invalid_list_parameters_are_rejected(app, calls, params):
    client = TestClient(app)
    res = client.get("/products/from-main-database", params=params)
    assert res.status_code == 400
    assert isinstance(res.json()["detail"], str)
    assert calls == []


def test_get_product_found(app, calls):
    client = TestClient(app)
    res = client.get("/products/1", params={"select": json.dumps(["id", "title"])})
    assert res.status_code == 200
    assert res.json() == {"id": 1, "title": "Essence Mascara Lash Princess"}
    assert calls == [("get", 1, ["id", "title"])]


def test_get_product_not_found(app):
    client = TestClient(app)
    res = client.get("/products/999")
    assert res.status_code == 404
    assert res.json() == {"detail": "Product 999 not found"}


@pytest.mark.parametrize("product_id", ["abc", "0", "-1", "1.5"])
def test_get_product_invalid_id(app, calls, product_id):
    client = TestClient(app)
    res = client.get(f"/products/{product_id}")
    assert res.status_code == 400
    assert calls == []


def test_get_product_aggregations(app):
    client = TestClient(app)
    res = client.get("/products/aggs")
    assert res.status_code == 200
    body = res.json()
    assert body["total"] == 1
    assert body["tag"] == [{"name": "beauty", "productCount": 1}]
    assert body["availabilityStatus"] == [{"name": "Low Stock", "productCount": 1}]
    assert body["price"] == {"min": 9.99, "max": 9.99, "average": 9.99}
