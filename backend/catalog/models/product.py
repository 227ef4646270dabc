"""
Catalog Backend: Product SQLAlchemy Model
==========================================

What:  ORM model for the `products` table.
How:   Scalar catalog fields plus five optional references. Images live in a
       JSON column as an ordered list of {"image": "<slot>", "url": "..."}
       entries, at most one per slot (image1..image5).

Query Patterns:
    - List / get: SELECT ... with selectinload() on the five references so
      the API can render them as {id, name}
    - Delete guards: COUNT(*) WHERE pro_category_id = :id (indexed), etc.
"""

import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base
from catalog.models.category import Category
from catalog.models.mixins import NAME_MAX_LENGTH, RecordMixin
from catalog.models.reference import Brand, SubCategory, Variant, VariantType

IMAGE_SLOTS = ("image1", "image2", "image3", "image4", "image5")


class Product(RecordMixin, Base):
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # ── Stock & pricing ───────────────────────────────────────────────────
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    min_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    offer_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wholesale_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    wholesale_offer_price: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # ── References ────────────────────────────────────────────────────────
    pro_category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=False, index=True
    )
    pro_sub_category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sub_categories.id"), nullable=False, index=True
    )
    pro_brand_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("brands.id"), nullable=True, index=True
    )
    pro_variant_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("variant_types.id"), nullable=True, index=True
    )
    pro_variant_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("variants.id"), nullable=True, index=True
    )

    # ── Images ────────────────────────────────────────────────────────────
    # Reassign (never mutate in place) so SQLAlchemy notices the change.
    images: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    category: Mapped[Category] = relationship(lazy="raise")
    sub_category: Mapped[SubCategory] = relationship(lazy="raise")
    brand: Mapped[Optional[Brand]] = relationship(lazy="raise")
    variant_type: Mapped[Optional[VariantType]] = relationship(lazy="raise")
    variant: Mapped[Optional[Variant]] = relationship(lazy="raise")

    def __repr__(self) -> str:
        return f"<Product(id={self.id}, name='{self.name}', images={len(self.images or [])})>"
