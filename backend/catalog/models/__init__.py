"""
ORM models. Importing this package registers every table on Base.metadata
(Alembic autogenerate and relationship resolution both rely on it).
"""

from catalog.models.category import Category
from catalog.models.product import Product
from catalog.models.reference import Brand, SubCategory, Variant, VariantType

__all__ = [
    "Brand",
    "Category",
    "Product",
    "SubCategory",
    "Variant",
    "VariantType",
]
