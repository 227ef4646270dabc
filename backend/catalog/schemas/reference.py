"""
Catalog Backend: Reference Data Schemas
========================================

What:  JSON bodies and read models for subcategories, brands, variant types
       and variants. POST and PUT share one input model per resource.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from catalog.models.mixins import NAME_MAX_LENGTH
from catalog.schemas.common import CamelModel


class ReferenceResponse(CamelModel):
    id: uuid.UUID
    name: str
    created_at: datetime
    updated_at: datetime


# ── SubCategory ───────────────────────────────────────────────────────────

class SubCategoryIn(CamelModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    category_id: uuid.UUID


class SubCategoryResponse(ReferenceResponse):
    category_id: uuid.UUID


# ── Brand ─────────────────────────────────────────────────────────────────

class BrandIn(CamelModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    subcategory_id: uuid.UUID


class BrandResponse(ReferenceResponse):
    subcategory_id: uuid.UUID


# ── VariantType ───────────────────────────────────────────────────────────

class VariantTypeIn(CamelModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    type: Optional[str] = Field(default=None, max_length=100)


class VariantTypeResponse(ReferenceResponse):
    type: Optional[str] = None


# ── Variant ───────────────────────────────────────────────────────────────

class VariantIn(CamelModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    variant_type_id: uuid.UUID


class VariantResponse(ReferenceResponse):
    variant_type_id: uuid.UUID
