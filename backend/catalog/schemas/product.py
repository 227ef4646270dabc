"""
Catalog Backend: Product Schemas
=================================

What:  API contract for products: create payload, partial-update patch and
       the populated read model.

Form field names are camelCase (proCategoryId, minQuantity, ...), matching
the JSON keys of the read model.

Patch semantics:
    A ProductPatch only contains the fields the client sent. Applying it
    with exclude_unset leaves every other column untouched, so an omitted
    price keeps its value while an explicit "0" sets it to zero.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from catalog.models.mixins import INT32_MAX, NAME_MAX_LENGTH
from catalog.models.product import Product
from catalog.schemas.common import CamelModel


class ProductFields(CamelModel):
    """Columns a client may set; all optional at this level."""

    model_config = ConfigDict(allow_inf_nan=False)

    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    quantity: Optional[int] = Field(default=None, ge=0, le=INT32_MAX)
    min_quantity: Optional[int] = Field(default=None, ge=0, le=INT32_MAX)
    price: Optional[float] = Field(default=None, ge=0)
    offer_price: Optional[float] = Field(default=None, ge=0)
    wholesale_price: Optional[float] = Field(default=None, ge=0)
    wholesale_offer_price: Optional[float] = Field(default=None, ge=0)
    pro_category_id: Optional[uuid.UUID] = None
    pro_sub_category_id: Optional[uuid.UUID] = None
    pro_brand_id: Optional[uuid.UUID] = None
    pro_variant_type_id: Optional[uuid.UUID] = None
    pro_variant_id: Optional[uuid.UUID] = None


class ProductCreate(ProductFields):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    quantity: int = Field(ge=0, le=INT32_MAX)
    price: float = Field(ge=0)
    pro_category_id: uuid.UUID
    pro_sub_category_id: uuid.UUID


class ProductPatch(ProductFields):
    pass


# Required on create, checked before type coercion so the client gets the
# same message whether a field is absent or blank.
PRODUCT_REQUIRED_FIELDS = ("name", "quantity", "price", "proCategoryId", "proSubCategoryId")


class RefSummary(BaseModel):
    id: uuid.UUID
    name: str


class ProductImage(BaseModel):
    image: str = Field(description="Slot name, image1..image5")
    url: str


class ProductResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    quantity: int
    min_quantity: Optional[int] = None
    price: float
    offer_price: Optional[float] = None
    wholesale_price: Optional[float] = None
    wholesale_offer_price: Optional[float] = None
    pro_category_id: Optional[RefSummary] = None
    pro_sub_category_id: Optional[RefSummary] = None
    pro_brand_id: Optional[RefSummary] = None
    pro_variant_type_id: Optional[RefSummary] = None
    pro_variant_id: Optional[RefSummary] = None
    images: List[ProductImage] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_product(cls, product: Product) -> "ProductResponse":
        """Builds the read model; references must already be loaded."""

        def ref(obj) -> Optional[RefSummary]:
            return RefSummary(id=obj.id, name=obj.name) if obj is not None else None

        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            quantity=product.quantity,
            min_quantity=product.min_quantity,
            price=product.price,
            offer_price=product.offer_price,
            wholesale_price=product.wholesale_price,
            wholesale_offer_price=product.wholesale_offer_price,
            pro_category_id=ref(product.category),
            pro_sub_category_id=ref(product.sub_category),
            pro_brand_id=ref(product.brand),
            pro_variant_type_id=ref(product.variant_type),
            pro_variant_id=ref(product.variant),
            images=[ProductImage(**entry) for entry in product.images or []],
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
