"""
Catalog Backend: Category SQLAlchemy Model
===========================================

What:  ORM model for the `categories` table.
How:   `image` holds the Cloudinary URL, or the literal sentinel "no_url"
       when the category was created without a picture.

Lifecycle:
    1. Created on POST /categories (image optional)
    2. Updated on PUT /categories/{id} (name required every time)
    3. Deleted only when no SubCategory or Product references it
"""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base
from catalog.models.mixins import NAME_MAX_LENGTH, RecordMixin

NO_URL = "no_url"


class Category(RecordMixin, Base):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(
        String(NAME_MAX_LENGTH),
        nullable=False,
        comment="Display name, required and non-empty",
    )

    image: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=NO_URL,
        comment="Cloudinary URL or the 'no_url' sentinel",
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
