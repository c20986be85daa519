from pydantic import BaseModel, ConfigDict, Field
from typing import List


class FacetCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Facet value, e.g. a tag or brand name")
    product_count: int = Field(
        ..., alias="productCount", description="Number of products with this value"
    )


class PriceStats(BaseModel):
    min: float = Field(..., description="Minimum price")
    max: float = Field(..., description="Maximum price")
    average: float = Field(..., description="Average price")


class ProductAggregation(BaseModel):
    """Catalog-wide facet counts and price statistics."""

    model_config = ConfigDict(populate_by_name=True)

    total: int = Field(..., description="Total number of products")
    tag: List[FacetCount]
    category: List[FacetCount]
    brand: List[FacetCount]
    availability_status: List[FacetCount] = Field(..., alias="availabilityStatus")
    price: PriceStats
