"""Create catalog tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates categories, sub_categories, brands, variant_types, variants
       and products.
How:   UUID primary keys, TIMESTAMP WITH TIME ZONE audit columns, plain
       foreign keys (deletes are guarded by the application), product
       images as JSONB.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _record_columns():
    return [
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _reference(name: str, target: str, nullable: bool) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey(f"{target}.id"),
        nullable=nullable,
    )


def upgrade() -> None:
    op.create_table(
        "categories",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False, comment="Display name, required and non-empty"),
        sa.Column(
            "image",
            sa.Text(),
            nullable=False,
            server_default=sa.text("'no_url'"),
            comment="Cloudinary URL or the 'no_url' sentinel",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "sub_categories",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        _reference("category_id", "categories", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_sub_categories_category_id", "sub_categories", ["category_id"])

    op.create_table(
        "brands",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        _reference("subcategory_id", "sub_categories", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_brands_subcategory_id", "brands", ["subcategory_id"])

    op.create_table(
        "variant_types",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(100), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "variants",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        _reference("variant_type_id", "variant_types", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_variants_variant_type_id", "variants", ["variant_type_id"])

    op.create_table(
        "products",
        *_record_columns(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("min_quantity", sa.Integer(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("offer_price", sa.Float(), nullable=True),
        sa.Column("wholesale_price", sa.Float(), nullable=True),
        sa.Column("wholesale_offer_price", sa.Float(), nullable=True),
        _reference("pro_category_id", "categories", nullable=False),
        _reference("pro_sub_category_id", "sub_categories", nullable=False),
        _reference("pro_brand_id", "brands", nullable=True),
        _reference("pro_variant_type_id", "variant_types", nullable=True),
        _reference("pro_variant_id", "variants", nullable=True),
        sa.Column(
            "images",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
            comment="Ordered [{image: slot, url}] entries, one per slot",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    # Delete guards count by these columns
    for column in (
        "pro_category_id",
        "pro_sub_category_id",
        "pro_brand_id",
        "pro_variant_type_id",
        "pro_variant_id",
    ):
        op.create_index(f"ix_products_{column}", "products", [column])


def downgrade() -> None:
    op.drop_table("products")
    op.drop_index("ix_variants_variant_type_id", table_name="variants")
    op.drop_table("variants")
    op.drop_table("variant_types")
    op.drop_index("ix_brands_subcategory_id", table_name="brands")
    op.drop_table("brands")
    op.drop_index("ix_sub_categories_category_id", table_name="sub_categories")
    op.drop_table("sub_categories")
    op.drop_table("categories")
