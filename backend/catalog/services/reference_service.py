"""
Catalog Backend: Reference Data Service & Delete Guard
=======================================================

What:  CRUD for the lookup resources (subcategories, brands, variant types,
       variants) and the referential delete guard shared with categories.
How:   One ReferenceService class, configured per resource with:
         - the ORM model and its display names
         - the parents a new row must point at (checked before insert)
         - the dependents that block a delete (checked in order)

Delete Guard:
    ensure_no_dependents() counts rows referencing the target, one dependent
    kind at a time, and raises ConflictError naming the first kind found.
    Only when every count is zero may the caller delete.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Type

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import Base
from catalog.exceptions import ConflictError, NotFoundError, PersistenceError, ValidationError
from catalog.models import Brand, Category, Product, SubCategory, Variant, VariantType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dependent:
    """Rows of `model` whose `column` points at the record being deleted."""

    model: Type[Base]
    column: Any
    label: str

    @property
    def blocked_by(self) -> str:
        return self.label.lower()


async def ensure_no_dependents(
    db: AsyncSession,
    resource: str,
    record_id: uuid.UUID,
    dependents: Sequence[Dependent],
) -> None:
    """
    Refuse a delete while anything still references `record_id`.

    Raises:
        ConflictError: "Cannot delete <resource>. <Label> are referencing it."
    """
    for dependent in dependents:
        count = await db.scalar(
            select(func.count())
            .select_from(dependent.model)
            .where(dependent.column == record_id)
        )
        if count:
            logger.info(
                "Delete of %s %s blocked by %d %s",
                resource,
                record_id,
                count,
                dependent.blocked_by,
            )
            raise ConflictError(
                message=f"Cannot delete {resource}. {dependent.label} are referencing it.",
                blocked_by=dependent.blocked_by,
                context={"resource_id": str(record_id), "count": count},
            )


async def ensure_parents_exist(
    db: AsyncSession,
    parents: Dict[str, Tuple[Type[Base], str]],
    values: Dict[str, Any],
) -> None:
    """
    Check that every supplied reference id points at an existing row.

    Raises:
        ValidationError: "<Parent> not found."
    """
    for attr, (parent_model, parent_name) in parents.items():
        parent_id = values.get(attr)
        if parent_id is not None and await db.get(parent_model, parent_id) is None:
            raise ValidationError(
                message=f"{parent_name} not found.",
                field=attr,
                context={"parent_id": str(parent_id)},
            )


@dataclass
class ReferenceService:
    """
    Stateless CRUD for one reference resource.

    Attributes:
        model:      ORM class
        singular:   "Sub-category" (used in messages: "Sub-category not found.")
        plural:     "Sub-categories"
        parents:    {attribute: (ORM class, display name)} validated on write
        dependents: delete blockers, checked in order
    """

    model: Type[Base]
    singular: str
    plural: str
    parents: Dict[str, Tuple[Type[Base], str]] = field(default_factory=dict)
    dependents: Tuple[Dependent, ...] = ()

    async def list_all(self, db: AsyncSession) -> List[Any]:
        try:
            result = await db.execute(select(self.model).order_by(self.model.created_at))
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing %s: %s", self.plural, e, exc_info=True)
            raise PersistenceError(context={"resource": self.plural})

    async def get(self, db: AsyncSession, record_id: uuid.UUID) -> Any:
        try:
            record = await db.get(self.model, record_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching %s %s: %s", self.singular, record_id, e)
            raise PersistenceError(context={"resource_id": str(record_id)})
        if record is None:
            raise NotFoundError(resource=self.singular, resource_id=str(record_id))
        return record

    async def create(self, db: AsyncSession, data: BaseModel) -> Any:
        values = data.model_dump()
        await ensure_parents_exist(db, self.parents, values)
        record = self.model(**values)
        try:
            db.add(record)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating %s: %s", self.singular, e, exc_info=True)
            raise PersistenceError(context={"resource": self.singular})
        logger.info("%s created: %s", self.singular, record.id)
        return record

    async def update(self, db: AsyncSession, record_id: uuid.UUID, data: BaseModel) -> Any:
        record = await self.get(db, record_id)
        values = data.model_dump(exclude_unset=True)
        await ensure_parents_exist(db, self.parents, values)
        for attr, value in values.items():
            setattr(record, attr, value)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating %s %s: %s", self.singular, record_id, e, exc_info=True)
            raise PersistenceError(context={"resource_id": str(record_id)})
        logger.info("%s updated: %s", self.singular, record_id)
        return record

    async def delete(self, db: AsyncSession, record_id: uuid.UUID) -> None:
        record = await self.get(db, record_id)
        await ensure_no_dependents(db, self.singular.lower(), record_id, self.dependents)
        try:
            await db.delete(record)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting %s %s: %s", self.singular, record_id, e, exc_info=True)
            raise PersistenceError(context={"resource_id": str(record_id)})
        logger.info("%s deleted: %s", self.singular, record_id)


sub_category_service = ReferenceService(
    model=SubCategory,
    singular="Sub-category",
    plural="Sub-categories",
    parents={"category_id": (Category, "Category")},
    dependents=(
        Dependent(Brand, Brand.subcategory_id, "Brands"),
        Dependent(Product, Product.pro_sub_category_id, "Products"),
    ),
)

brand_service = ReferenceService(
    model=Brand,
    singular="Brand",
    plural="Brands",
    parents={"subcategory_id": (SubCategory, "Sub-category")},
    dependents=(Dependent(Product, Product.pro_brand_id, "Products"),),
)

variant_type_service = ReferenceService(
    model=VariantType,
    singular="Variant type",
    plural="Variant types",
    dependents=(
        Dependent(Variant, Variant.variant_type_id, "Variants"),
        Dependent(Product, Product.pro_variant_type_id, "Products"),
    ),
)

variant_service = ReferenceService(
    model=Variant,
    singular="Variant",
    plural="Variants",
    parents={"variant_type_id": (VariantType, "Variant type")},
    dependents=(Dependent(Product, Product.pro_variant_id, "Products"),),
)
