"""
Catalog Backend: Reference Data Models
=======================================

What:  The small lookup tables a Product points at: SubCategory, Brand,
       VariantType and Variant.
How:   Plain name-bearing rows with one optional parent reference each:

    Category ◄── SubCategory ◄── Brand
    VariantType ◄── Variant

Deletes are guarded in the service layer (see reference_service), so the
foreign keys carry no ON DELETE action.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base
from catalog.models.mixins import NAME_MAX_LENGTH, RecordMixin


class SubCategory(RecordMixin, Base):
    __tablename__ = "sub_categories"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )


class Brand(RecordMixin, Base):
    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    subcategory_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("sub_categories.id"),
        nullable=False,
        index=True,
    )


class VariantType(RecordMixin, Base):
    __tablename__ = "variant_types"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    # e.g. "Size", "Color"
    type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)


class Variant(RecordMixin, Base):
    __tablename__ = "variants"

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)
    variant_type_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("variant_types.id"),
        nullable=False,
        index=True,
    )
