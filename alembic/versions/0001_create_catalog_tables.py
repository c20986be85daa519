"""Create catalog tables

Revision ID: 0001_create_catalog_tables
Revises:
Create Date: 2025-06-02 10:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_catalog_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=36), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "tags",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=36), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("price", sa.Numeric(14, 4), nullable=False),
        sa.Column("discount_percentage", sa.Numeric(5, 2), nullable=True),
        sa.Column("rating", sa.Numeric(3, 2), nullable=False),
        sa.Column("stock", sa.Integer(), nullable=False),
        sa.Column(
            "brand",
            sa.String(length=256),
            server_default="(unknown brand)",
            nullable=False,
        ),
        sa.Column("sku", sa.String(length=256), nullable=False),
        sa.Column("weight", sa.Numeric(14, 4), nullable=False),
        sa.Column("warranty_information", sa.String(length=256), nullable=False),
        sa.Column("shipping_information", sa.String(length=256), nullable=False),
        sa.Column(
            "availability_status",
            sa.Enum(
                "In Stock",
                "Low Stock",
                "Out of Stock",
                name="availability_status",
                native_enum=False,
            ),
            server_default="Out of Stock",
            nullable=False,
        ),
        sa.Column("return_policy", sa.String(length=256), nullable=False),
        sa.Column("minimum_order_quantity", sa.Integer(), nullable=False),
        sa.Column("thumbnail", sa.String(length=256), nullable=False),
        sa.CheckConstraint("price > 0.0001", name="check_product_price"),
        sa.CheckConstraint(
            "discount_percentage BETWEEN 0.01 AND 100",
            name="check_product_discount_percentage",
        ),
        sa.CheckConstraint("rating BETWEEN 0 AND 5", name="check_product_rating"),
        sa.CheckConstraint("stock >= 0", name="check_product_stock"),
        sa.CheckConstraint("weight > 0.0001", name="check_product_weight"),
        sa.CheckConstraint(
            "minimum_order_quantity > 0", name="check_product_minimum_order_quantity"
        ),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_title"), "products", ["title"], unique=False)
    op.create_index(
        op.f("ix_products_category_id"), "products", ["category_id"], unique=False
    )
    op.create_table(
        "product_tags",
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("tag_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tag_id"], ["tags.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("product_id", "tag_id"),
    )


def downgrade() -> None:
    op.drop_table("product_tags")
    op.drop_index(op.f("ix_products_category_id"), table_name="products")
    op.drop_index(op.f("ix_products_title"), table_name="products")
    op.drop_table("products")
    op.drop_table("tags")
    op.drop_table("categories")
