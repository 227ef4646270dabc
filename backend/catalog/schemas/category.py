"""
Catalog Backend: Category Schemas
==================================

What:  API contract for categories.
How:   `CategoryPatch` is the explicit optional-field patch applied on
       update; only the fields a client actually supplied are set, so
       `model_dump(exclude_unset=True)` is exactly the change set.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from catalog.models.mixins import NAME_MAX_LENGTH
from catalog.schemas.common import CamelModel


class CategoryResponse(CamelModel):
    id: uuid.UUID
    name: str
    image: str = Field(description="Cloudinary URL or 'no_url'")
    created_at: datetime
    updated_at: datetime


class CategoryPatch(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    image: Optional[str] = Field(default=None, min_length=1)
