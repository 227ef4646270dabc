"""
Catalog Backend: Category Service (Upsert Workflow + Delete Guard)
===================================================================

What:  Business logic for categories: list, get, create, update, delete.
How:   Create and update follow the same pipeline:

    ┌────────────┐   ┌─────────────┐   ┌──────────┐   ┌────────────┐
    │ Validating │──▶│ Uploading   │──▶│ Merging  │──▶│ Persisting │
    │ (name)     │   │ (img, 0..1) │   │ (patch)  │   │ (flush)    │
    └────────────┘   └─────────────┘   └──────────┘   └────────────┘

    Validation failures never reach Cloudinary or the database.
    An update of a missing category stops with NotFoundError before the
    upload, so no image is stored for a record that does not exist.
    If the write fails after an upload, the image is discarded again.

Image resolution:
    create: uploaded URL, else "no_url"
    update: uploaded URL, else the client's `image` form value, else the
            stored value
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.exceptions import NotFoundError, PersistenceError, ValidationError
from catalog.models import Category, Product, SubCategory
from catalog.models.category import NO_URL
from catalog.models.mixins import NAME_MAX_LENGTH
from catalog.schemas.category import CategoryPatch
from catalog.services.media_service import MediaPayload, UploadedMedia, media_service
from catalog.services.reference_service import Dependent, ensure_no_dependents

logger = logging.getLogger(__name__)

# Form field carrying the category picture
IMAGE_FIELD = "img"

CATEGORY_DEPENDENTS = (
    Dependent(SubCategory, SubCategory.category_id, "Subcategories"),
    Dependent(Product, Product.pro_category_id, "Products"),
)


class CategoryService:
    """
    Stateless service; every call receives its own session.
    """

    def _require_name(self, name: Optional[str]) -> str:
        if name is None or not name.strip():
            raise ValidationError(message="Name is required.", field="name")
        name = name.strip()
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(
                message=f"Name must be at most {NAME_MAX_LENGTH} characters.",
                field="name",
            )
        return name

    async def list_categories(self, db: AsyncSession) -> List[Category]:
        try:
            result = await db.execute(select(Category).order_by(Category.created_at))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing categories: %s", e, exc_info=True)
            raise PersistenceError(message="Could not retrieve categories. Please try again.")

    async def get_category(self, db: AsyncSession, category_id: uuid.UUID) -> Category:
        try:
            category = await db.get(Category, category_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching category %s: %s", category_id, e)
            raise PersistenceError(
                message="Could not retrieve the category. Please try again.",
                context={"category_id": str(category_id)},
            )
        if category is None:
            raise NotFoundError(resource="Category", resource_id=str(category_id))
        return category

    async def create_category(
        self,
        db: AsyncSession,
        name: Optional[str],
        image: Optional[MediaPayload] = None,
    ) -> Category:
        """
        Create a category, uploading its picture first when one is supplied.

        Raises:
            ValidationError: blank or missing name (nothing uploaded)
            UploadError:     picture rejected or provider failure (nothing written)
            PersistenceError: insert failed (uploaded picture discarded)
        """
        name = self._require_name(name)

        uploaded: Optional[UploadedMedia] = None
        if image is not None:
            uploaded = await media_service.upload(image, slot=IMAGE_FIELD)

        category = Category(name=name, image=uploaded.url if uploaded else NO_URL)
        try:
            db.add(category)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating category: %s", e, exc_info=True)
            if uploaded:
                await media_service.discard([uploaded])
            raise PersistenceError(message="Could not create the category. Please try again.")

        logger.info("Category created: %s (image=%s)", category.id, category.image)
        return category

    async def update_category(
        self,
        db: AsyncSession,
        category_id: uuid.UUID,
        name: Optional[str],
        image_url: Optional[str] = None,
        image: Optional[MediaPayload] = None,
    ) -> Category:
        """
        Update a category. `name` is required on every update.

        Raises:
            ValidationError, NotFoundError, UploadError, PersistenceError.
            On any of them the stored row is left unchanged.
        """
        patch = CategoryPatch(name=self._require_name(name))
        category = await self.get_category(db, category_id)

        uploaded: Optional[UploadedMedia] = None
        if image is not None:
            uploaded = await media_service.upload(image, slot=IMAGE_FIELD)
            patch.image = uploaded.url
        elif image_url and image_url.strip():
            patch.image = image_url.strip()

        for attr, value in patch.model_dump(exclude_unset=True).items():
            setattr(category, attr, value)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating category %s: %s", category_id, e, exc_info=True)
            if uploaded:
                await media_service.discard([uploaded])
            raise PersistenceError(
                message="Could not update the category. Please try again.",
                context={"category_id": str(category_id)},
            )

        logger.info("Category updated: %s (image=%s)", category.id, category.image)
        return category

    async def delete_category(self, db: AsyncSession, category_id: uuid.UUID) -> None:
        """
        Delete a category nobody references.

        Order: existence, then subcategories, then products.

        Raises:
            NotFoundError: unknown id
            ConflictError: subcategories or products still point at it
        """
        category = await self.get_category(db, category_id)
        await ensure_no_dependents(db, "category", category_id, CATEGORY_DEPENDENTS)

        try:
            await db.delete(category)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting category %s: %s", category_id, e, exc_info=True)
            raise PersistenceError(
                message="Could not delete the category. Please try again.",
                context={"category_id": str(category_id)},
            )
        logger.info("Category deleted: %s", category_id)


category_service = CategoryService()
