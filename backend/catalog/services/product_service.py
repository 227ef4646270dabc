"""
Catalog Backend: Product Service (Multi-Slot Upsert Workflow)
==============================================================

What:  Business logic for products: list, get, create, update, delete.
How:   Same pipeline as categories, with up to five image slots:

    Validating ──▶ Uploading (image1..image5, concurrent) ──▶ Merging ──▶ Persisting

    1. Validating: form values are checked (required fields on create) and
       coerced through ProductCreate / ProductPatch; a bad value stops the
       request before any upload.
    2. Uploading: only slots that carry a file; MediaService.upload_slots()
       fans them out and fails the request if any slot fails.
    3. Merging: only supplied fields change (exclude_unset). Slot URLs
       replace the existing entry for that slot or are appended.
    4. Persisting: one insert or one flush of the loaded row. On failure the
       freshly uploaded images are discarded.

Image list invariant:
    At most one {"image": slot, "url": ...} entry per slot, original order
    preserved, new slots appended.
"""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.exceptions import NotFoundError, PersistenceError, ValidationError
from catalog.models import Brand, Category, Product, SubCategory, Variant, VariantType
from catalog.models.product import IMAGE_SLOTS
from catalog.schemas.product import PRODUCT_REQUIRED_FIELDS, ProductCreate, ProductPatch
from catalog.services.media_service import MediaPayload, UploadedMedia, media_service
from catalog.services.reference_service import ensure_parents_exist

logger = logging.getLogger(__name__)

PRODUCT_REFERENCES = {
    "pro_category_id": (Category, "Category"),
    "pro_sub_category_id": (SubCategory, "Sub-category"),
    "pro_brand_id": (Brand, "Brand"),
    "pro_variant_type_id": (VariantType, "Variant type"),
    "pro_variant_id": (Variant, "Variant"),
}

_REFERENCE_LOADS = (
    selectinload(Product.category),
    selectinload(Product.sub_category),
    selectinload(Product.brand),
    selectinload(Product.variant_type),
    selectinload(Product.variant),
)


def merge_images(
    existing: Optional[List[Dict[str, Any]]],
    uploads: Mapping[str, str],
) -> List[Dict[str, Any]]:
    """
    Apply {slot: url} onto an image list.

    Existing slots are overwritten in place, unknown slots appended in
    image1..image5 order. Returns a new list; the input is not modified.
    """
    merged = [dict(entry) for entry in existing or []]
    positions = {entry.get("image"): index for index, entry in enumerate(merged)}
    for slot in IMAGE_SLOTS:
        if slot not in uploads:
            continue
        if slot in positions:
            merged[positions[slot]]["url"] = uploads[slot]
        else:
            positions[slot] = len(merged)
            merged.append({"image": slot, "url": uploads[slot]})
    return merged


def _supplied(fields: Mapping[str, Optional[str]]) -> Dict[str, str]:
    """Stripped form values; blank or missing ones count as not supplied."""
    stripped = {key: value.strip() for key, value in fields.items() if value is not None}
    return {key: value for key, value in stripped.items() if value}


def _describe(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ())) or "request"
    return f"Invalid value for {field}: {first.get('msg', 'invalid')}"


class ProductService:
    """
    Stateless service; every call receives its own session.
    """

    async def _load(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        try:
            result = await db.execute(
                select(Product).where(Product.id == product_id).options(*_REFERENCE_LOADS)
            )
            product = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching product %s: %s", product_id, e)
            raise PersistenceError(
                message="Could not retrieve the product. Please try again.",
                context={"product_id": str(product_id)},
            )
        if product is None:
            raise NotFoundError(resource="Product", resource_id=str(product_id))
        return product

    async def list_products(self, db: AsyncSession) -> List[Product]:
        try:
            result = await db.execute(
                select(Product).options(*_REFERENCE_LOADS).order_by(Product.created_at)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing products: %s", e, exc_info=True)
            raise PersistenceError(message="Could not retrieve products. Please try again.")

    async def get_product(self, db: AsyncSession, product_id: uuid.UUID) -> Product:
        return await self._load(db, product_id)

    def parse_create(self, fields: Mapping[str, Optional[str]]) -> ProductCreate:
        """
        Validate a create form.

        `fields` maps camelCase form names to raw strings; blank values
        count as absent.
        """
        supplied = _supplied(fields)
        missing = [name for name in PRODUCT_REQUIRED_FIELDS if name not in supplied]
        if missing:
            raise ValidationError(
                message="Required fields are missing.",
                context={"missing": missing},
            )
        try:
            return ProductCreate.model_validate(supplied)
        except PydanticValidationError as e:
            raise ValidationError(message=_describe(e), context={"errors": e.error_count()})

    def parse_patch(self, fields: Mapping[str, Optional[str]]) -> ProductPatch:
        """Validate an update form; only non-blank values become part of the patch."""
        supplied = _supplied(fields)
        try:
            return ProductPatch.model_validate(supplied)
        except PydanticValidationError as e:
            raise ValidationError(message=_describe(e), context={"errors": e.error_count()})

    async def _upload(self, images: Optional[Mapping[str, MediaPayload]]) -> Dict[str, UploadedMedia]:
        images = images or {}
        unknown = sorted(set(images) - set(IMAGE_SLOTS))
        if unknown:
            raise ValidationError(
                message=f"Unexpected image field: {unknown[0]}",
                field=unknown[0],
            )
        return await media_service.upload_slots(images)

    async def create_product(
        self,
        db: AsyncSession,
        fields: Mapping[str, Optional[str]],
        images: Optional[Mapping[str, MediaPayload]] = None,
    ) -> Product:
        """
        Create a product with up to five images.

        Raises:
            ValidationError: required field missing, a value does not parse or
                             a referenced record does not exist
            UploadError:     any slot failed (nothing written, other slots discarded)
            PersistenceError: insert failed (uploaded images discarded)
        """
        data = self.parse_create(fields)
        await ensure_parents_exist(db, PRODUCT_REFERENCES, data.model_dump())
        uploaded = await self._upload(images)

        product = Product(
            **data.model_dump(),
            images=merge_images([], {slot: media.url for slot, media in uploaded.items()}),
        )
        try:
            db.add(product)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating product: %s", e, exc_info=True)
            await media_service.discard(uploaded.values())
            raise PersistenceError(message="Could not create the product. Please try again.")

        logger.info("Product created: %s with %d image(s)", product.id, len(product.images))
        return product

    async def update_product(
        self,
        db: AsyncSession,
        product_id: uuid.UUID,
        fields: Mapping[str, Optional[str]],
        images: Optional[Mapping[str, MediaPayload]] = None,
    ) -> Product:
        """
        Partially update a product.

        Omitted fields keep their stored value. Supplied image slots replace
        the stored URL for that slot or are appended.

        Raises:
            ValidationError, NotFoundError, UploadError, PersistenceError.
            On any of them the stored row is left unchanged.
        """
        patch = self.parse_patch(fields)
        product = await self._load(db, product_id)
        changes = patch.model_dump(exclude_unset=True)
        await ensure_parents_exist(db, PRODUCT_REFERENCES, changes)
        uploaded = await self._upload(images)

        for attr, value in changes.items():
            setattr(product, attr, value)
        if uploaded:
            product.images = merge_images(
                product.images,
                {slot: media.url for slot, media in uploaded.items()},
            )

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating product %s: %s", product_id, e, exc_info=True)
            await media_service.discard(uploaded.values())
            raise PersistenceError(
                message="Could not update the product. Please try again.",
                context={"product_id": str(product_id)},
            )

        logger.info(
            "Product updated: %s (fields=%s, slots=%s)",
            product_id,
            sorted(patch.model_fields_set),
            sorted(uploaded),
        )
        return product

    async def delete_product(self, db: AsyncSession, product_id: uuid.UUID) -> None:
        product = await self._load(db, product_id)
        try:
            await db.delete(product)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting product %s: %s", product_id, e, exc_info=True)
            raise PersistenceError(
                message="Could not delete the product. Please try again.",
                context={"product_id": str(product_id)},
            )
        logger.info("Product deleted: %s", product_id)


product_service = ProductService()
