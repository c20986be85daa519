from sqlalchemy.orm import declarative_base
from sqlalchemy import (
    CheckConstraint,
    Column,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Table,
    Text,
)

Base = declarative_base()

AVAILABILITY_STATUSES = ("In Stock", "Low Stock", "Out of Stock")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(36), nullable=False)


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True)
    name = Column(String(36), nullable=False)


product_tags = Table(
    "product_tags",
    Base.metadata,
    Column(
        "product_id",
        Integer,
        ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "tag_id",
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    title = Column(String(256), nullable=False, index=True)
    description = Column(Text, nullable=False)
    category_id = Column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), index=True
    )
    price = Column(Numeric(14, 4, asdecimal=False), nullable=False)
    discount_percentage = Column(Numeric(5, 2, asdecimal=False))
    rating = Column(Numeric(3, 2, asdecimal=False), nullable=False)
    stock = Column(Integer, nullable=False)
    brand = Column(String(256), nullable=False, server_default="(unknown brand)")
    sku = Column(String(256), nullable=False)
    weight = Column(Numeric(14, 4, asdecimal=False), nullable=False)
    warranty_information = Column(String(256), nullable=False)
    shipping_information = Column(String(256), nullable=False)
    availability_status = Column(
        Enum(*AVAILABILITY_STATUSES, name="availability_status", native_enum=False),
        nullable=False,
        server_default="Out of Stock",
    )
    return_policy = Column(String(256), nullable=False)
    minimum_order_quantity = Column(Integer, nullable=False)
    thumbnail = Column(String(256), nullable=False)

    __table_args__ = (
        CheckConstraint("price > 0.0001", name="check_product_price"),
        CheckConstraint(
            "discount_percentage BETWEEN 0.01 AND 100",
            name="check_product_discount_percentage",
        ),
        CheckConstraint("rating BETWEEN 0 AND 5", name="check_product_rating"),
        CheckConstraint("stock >= 0", name="check_product_stock"),
        CheckConstraint("weight > 0.0001", name="check_product_weight"),
        CheckConstraint(
            "minimum_order_quantity > 0", name="check_product_minimum_order_quantity"
        ),
    )
