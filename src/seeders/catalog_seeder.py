import argparse
import json
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy import delete, insert

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from src.app.features.products.models import Category, Product, Tag, product_tags  # noqa: E402
from src.db.session import get_db  # noqa: E402
from src.settings import Settings  # noqa: E402

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = "data/products.json"
DUMMY_DATA_URL = "https://dummyjson.com/products?limit=100"


@dataclass
class Catalog:
    categories: List[Dict[str, Any]] = field(default_factory=list)
    tags: List[Dict[str, Any]] = field(default_factory=list)
    products: List[Dict[str, Any]] = field(default_factory=list)
    product_tags: List[Dict[str, Any]] = field(default_factory=list)


def _number_by_name(rows: List[Dict[str, Any]], name: str) -> int:
    for row in rows:
        if row["name"] == name:
            return row["id"]
    rows.append({"id": len(rows) + 1, "name": name})
    return len(rows)


def parse_catalog(raw_products: List[Dict[str, Any]]) -> Catalog:
    """Split a dummyjson product dump into rows for every catalog table.

    Categories and tags are numbered from 1 in order of first appearance.
    """
    catalog = Catalog()
    for item in raw_products:
        category_id = _number_by_name(catalog.categories, item["category"])
        for tag in item.get("tags", []):
            tag_id = _number_by_name(catalog.tags, tag)
            link = {"product_id": item["id"], "tag_id": tag_id}
            if link not in catalog.product_tags:
                catalog.product_tags.append(link)
        catalog.products.append(
            {
                "id": item["id"],
                "title": item["title"],
                "description": item["description"],
                "category_id": category_id,
                "price": item["price"],
                "discount_percentage": item.get("discountPercentage"),
                "rating": item["rating"],
                "stock": item["stock"],
                "brand": item.get("brand") or "(unknown brand)",
                "sku": item["sku"],
                "weight": item["weight"],
                "warranty_information": item["warrantyInformation"],
                "shipping_information": item["shippingInformation"],
                "availability_status": item["availabilityStatus"],
                "return_policy": item["returnPolicy"],
                "minimum_order_quantity": item["minimumOrderQuantity"],
                "thumbnail": item["thumbnail"],
            }
        )
    return catalog


def download_dummy_data(
    output: str = DEFAULT_DATA_FILE,
    url: str = DUMMY_DATA_URL,
    transport: Optional[httpx.BaseTransport] = None,
) -> int:
    """Fetch the dummyjson product list and save it where `load_catalog` reads it.

    Returns the number of downloaded products.
    """
    logger.info("Downloading dummy data from %s", url)
    with httpx.Client(timeout=30.0, transport=transport) as client:
        response = client.get(url)
    response.raise_for_status()
    content = response.json()

    path = Path(output)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(content, f, indent=2)

    count = len(content["products"])
    logger.info("Saved %d products to %s", count, path)
    return count


def load_catalog(file_path: str) -> Catalog:
    """Read a dump saved from https://dummyjson.com/products."""
    with open(file_path, "r") as f:
        content = json.load(f)
    raw_products = content["products"] if isinstance(content, dict) else content
    return parse_catalog(raw_products)


def seed_catalog(session, catalog: Catalog) -> None:
    """Replace the catalog tables' contents with the given rows."""
    # Clear existing data, children first
    session.execute(delete(product_tags))
    session.execute(delete(Product))
    session.execute(delete(Tag))
    session.execute(delete(Category))

    if catalog.categories:
        session.execute(insert(Category), catalog.categories)
    if catalog.tags:
        session.execute(insert(Tag), catalog.tags)
    if catalog.products:
        session.execute(insert(Product), catalog.products)
    if catalog.product_tags:
        session.execute(insert(product_tags), catalog.product_tags)
    session.commit()
    logger.info(
        "Seeded %d categories, %d tags, %d products and %d product tags",
        len(catalog.categories),
        len(catalog.tags),
        len(catalog.products),
        len(catalog.product_tags),
    )


def main():
    parser = argparse.ArgumentParser(description="Seed the catalog database")
    commands = parser.add_subparsers(dest="command", required=True)

    download = commands.add_parser("download", help="fetch the dummyjson product dump")
    download.add_argument("file", nargs="?", default=DEFAULT_DATA_FILE, help="output file")
    download.add_argument("--url", default=DUMMY_DATA_URL)

    seed = commands.add_parser("seed", help="load a product dump into the database")
    seed.add_argument("file", nargs="?", default=DEFAULT_DATA_FILE, help="dummyjson product dump")

    args = parser.parse_args()

    if args.command == "download":
        logging.basicConfig(level=logging.INFO)
        download_dummy_data(args.file, args.url)
        return

    settings = Settings()
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    catalog = load_catalog(args.file)
    with get_db(settings) as session:
        seed_catalog(session, catalog)


if __name__ == "__main__":
    main()
