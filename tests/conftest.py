import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy import insert

# Ensure repository root is on sys.path so `import src.*` works
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Provide safe default env vars for tests (overridden by real .env if present)
os.environ.setdefault("DATABASE_URL", "sqlite:///./test-catalog.db")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("ELASTIC_PASSWORD", "test")

from src.app.features.products.models import (  # noqa: E402
    Base,
    Category,
    Product,
    Tag,
    product_tags,
)
from src.db.session import create_db_engine  # noqa: E402
from src.settings import Settings  # noqa: E402


def product_row(product_id: int, **overrides):
    row = {
        "id": product_id,
        "title": f"Product {product_id}",
        "description": f"Description of product {product_id}",
        "category_id": None,
        "price": 10.0,
        "discount_percentage": 5.0,
        "rating": 4.0,
        "stock": 10,
        "brand": "Acme",
        "sku": f"SKU-{product_id:04d}",
        "weight": 1.0,
        "warranty_information": "1 year warranty",
        "shipping_information": "Ships in 1-2 business days",
        "availability_status": "In Stock",
        "return_policy": "30 days return policy",
        "minimum_order_quantity": 1,
        "thumbnail": f"https://cdn.example.com/{product_id}/thumbnail.png",
    }
    row.update(overrides)
    return row


CATEGORIES = [
    {"id": 1, "name": "Beauty Products"},
    {"id": 2, "name": "Beauty Accessories"},
    {"id": 3, "name": "Furniture"},
    {"id": 4, "name": "Groceries"},
]

TAGS = [
    {"id": 1, "name": "beauty"},
    {"id": 2, "name": "mascara"},
    {"id": 3, "name": "perfumes"},
    {"id": 4, "name": "furniture"},
]

PRODUCTS = [
    product_row(
        1,
        title="Essence Mascara Lash Princess",
        category_id=1,
        price=9.99,
        rating=4.94,
        stock=5,
        brand="Essence",
        availability_status="Low Stock",
    ),
    product_row(
        2,
        title="Eyeshadow Palette with Mirror",
        category_id=1,
        price=19.99,
        rating=3.28,
        stock=44,
        brand="Glamour Beauty",
    ),
    product_row(
        3,
        title="Calvin Klein CK One",
        category_id=2,
        price=49.99,
        rating=4.85,
        stock=17,
        brand="Calvin Klein",
    ),
    product_row(
        4,
        title="Wooden Bathroom Sink With Mirror",
        category_id=3,
        price=799.99,
        rating=3.59,
        stock=0,
        brand="(unknown brand)",
        availability_status="Out of Stock",
    ),
    product_row(
        5,
        title="Annibale Colombo Bed",
        category_id=3,
        price=1899.99,
        rating=4.14,
        stock=47,
        brand="Annibale Colombo",
    ),
]

PRODUCT_TAGS = [
    {"product_id": 1, "tag_id": 1},
    {"product_id": 1, "tag_id": 2},
    {"product_id": 2, "tag_id": 1},
    {"product_id": 3, "tag_id": 3},
    {"product_id": 5, "tag_id": 4},
]


@pytest.fixture
def settings(tmp_path):
    # A file database: every pooled connection must see the same data
    return Settings(
        DATABASE_URL=f"sqlite:///{tmp_path / 'catalog.db'}",
        RUN_MIGRATIONS_ON_STARTUP=False,
    )


@pytest_asyncio.fixture
async def empty_engine(settings):
    engine = create_db_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def engine(empty_engine):
    async with empty_engine.begin() as conn:
        await conn.execute(insert(Category.__table__), CATEGORIES)
        await conn.execute(insert(Tag.__table__), TAGS)
        await conn.execute(insert(Product.__table__), PRODUCTS)
        await conn.execute(insert(product_tags), PRODUCT_TAGS)
    return empty_engine


@pytest.fixture
def make_product():
    return product_row
