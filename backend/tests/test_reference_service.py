"""
Catalog Backend: Reference Data Service Tests
==============================================

What:  CRUD and delete guards for subcategories, brands, variant types and
       variants, plus the shared ensure_no_dependents helper.
"""

from uuid import uuid4

import pytest

from catalog.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.models import Brand, Product, Variant, VariantType
from catalog.schemas.reference import BrandIn, SubCategoryIn, VariantIn, VariantTypeIn
from catalog.services.reference_service import (
    Dependent,
    brand_service,
    ensure_no_dependents,
    sub_category_service,
    variant_service,
    variant_type_service,
)


class TestEnsureNoDependents:

    @pytest.mark.asyncio
    async def test_passes_when_nothing_references(self, mock_db_session):
        mock_db_session.scalar.return_value = 0
        dependents = (Dependent(Product, Product.pro_brand_id, "Products"),)

        await ensure_no_dependents(mock_db_session, "brand", uuid4(), dependents)

    @pytest.mark.asyncio
    async def test_stops_at_first_blocking_kind(self, mock_db_session):
        mock_db_session.scalar.side_effect = [2, 5]
        dependents = (
            Dependent(Variant, Variant.variant_type_id, "Variants"),
            Dependent(Product, Product.pro_variant_type_id, "Products"),
        )

        with pytest.raises(ConflictError) as exc_info:
            await ensure_no_dependents(mock_db_session, "variant type", uuid4(), dependents)

        assert exc_info.value.message == "Cannot delete variant type. Variants are referencing it."
        assert exc_info.value.context["count"] == 2
        assert mock_db_session.scalar.await_count == 1


class TestSubCategories:

    @pytest.mark.asyncio
    async def test_create_requires_existing_category(self, db_session):
        with pytest.raises(ValidationError, match="Category not found."):
            await sub_category_service.create(
                db_session, SubCategoryIn(name="Sneakers", category_id=uuid4())
            )

    @pytest.mark.asyncio
    async def test_create_and_list(self, db_session, seeded_refs):
        await sub_category_service.create(
            db_session, SubCategoryIn(name="Boots", category_id=seeded_refs["category_id"])
        )
        await db_session.commit()

        names = [record.name for record in await sub_category_service.list_all(db_session)]
        assert names == ["Sneakers", "Boots"]

    @pytest.mark.asyncio
    async def test_brands_block_delete(self, db_session, seeded_refs):
        db_session.add(Brand(name="Acme", subcategory_id=seeded_refs["sub_category_id"]))
        await db_session.commit()

        with pytest.raises(ConflictError, match="Brands are referencing it."):
            await sub_category_service.delete(db_session, seeded_refs["sub_category_id"])

    @pytest.mark.asyncio
    async def test_products_block_delete(self, db_session, seeded_refs):
        db_session.add(
            Product(
                name="Runner",
                quantity=1,
                price=1.0,
                pro_category_id=seeded_refs["category_id"],
                pro_sub_category_id=seeded_refs["sub_category_id"],
            )
        )
        await db_session.commit()

        with pytest.raises(ConflictError, match="Products are referencing it."):
            await sub_category_service.delete(db_session, seeded_refs["sub_category_id"])


class TestBrands:

    @pytest.mark.asyncio
    async def test_update_renames_brand(self, db_session, seeded_refs):
        brand = await brand_service.create(
            db_session, BrandIn(name="Acme", subcategory_id=seeded_refs["sub_category_id"])
        )
        await db_session.commit()

        updated = await brand_service.update(
            db_session, brand.id, BrandIn(name="Acme Sports", subcategory_id=seeded_refs["sub_category_id"])
        )

        assert updated.name == "Acme Sports"
        assert updated.subcategory_id == seeded_refs["sub_category_id"]

    @pytest.mark.asyncio
    async def test_get_missing_brand(self, db_session):
        with pytest.raises(NotFoundError, match="Brand not found."):
            await brand_service.get(db_session, uuid4())

    @pytest.mark.asyncio
    async def test_unreferenced_brand_deleted(self, db_session, seeded_refs):
        brand = await brand_service.create(
            db_session, BrandIn(name="Acme", subcategory_id=seeded_refs["sub_category_id"])
        )
        await db_session.commit()

        await brand_service.delete(db_session, brand.id)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await brand_service.get(db_session, brand.id)


class TestVariants:

    @pytest.mark.asyncio
    async def test_variant_requires_existing_type(self, db_session):
        with pytest.raises(ValidationError, match="Variant type not found."):
            await variant_service.create(db_session, VariantIn(name="XL", variant_type_id=uuid4()))

    @pytest.mark.asyncio
    async def test_variants_block_type_delete(self, db_session):
        variant_type = await variant_type_service.create(db_session, VariantTypeIn(name="Size", type="size"))
        await variant_service.create(db_session, VariantIn(name="XL", variant_type_id=variant_type.id))
        await db_session.commit()

        with pytest.raises(ConflictError) as exc_info:
            await variant_type_service.delete(db_session, variant_type.id)

        assert exc_info.value.message == "Cannot delete variant type. Variants are referencing it."
        assert await db_session.get(VariantType, variant_type.id) is not None
