"""
Catalog Backend: Category Routes
=================================

What:  /categories CRUD. Create and update accept multipart/form-data with a
       `name` field and an optional `img` file.

Request Flow (POST / PUT):
    1. FastAPI parses the multipart body
    2. The `img` part (if any) is read into memory
    3. CategoryService validates → uploads → merges → persists
    4. {success, message, data: null} on success; errors go to the global
       handlers
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db_session
from catalog.routes.uploads import read_payload
from catalog.schemas.category import CategoryResponse
from catalog.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from catalog.services.category_service import category_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/categories", tags=["Categories"])

_ERRORS = {
    400: {"description": "Validation or upload error", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_ERRORS_WITH_404 = {
    **_ERRORS,
    404: {"description": "Category not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ApiResponse[List[CategoryResponse]],
    responses=_ERRORS,
    summary="List all categories",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CategoryResponse]]:
    categories = await category_service.list_categories(db)
    return ApiResponse(
        message="Categories retrieved successfully.",
        data=[CategoryResponse.model_validate(category) for category in categories],
    )


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryResponse],
    responses=_ERRORS_WITH_404,
    summary="Get a category by ID",
)
async def get_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryResponse]:
    category = await category_service.get_category(db, category_id)
    return ApiResponse(
        message="Category retrieved successfully.",
        data=CategoryResponse.model_validate(category),
    )


@router.post(
    "",
    response_model=ApiResponse[None],
    responses=_ERRORS,
    summary="Create a category",
    description=(
        "Multipart form with `name` (required) and an optional `img` file "
        "(PNG or JPEG, max 5MB). Without a file the image is stored as 'no_url'."
    ),
)
async def create_category(
    name: Optional[str] = Form(None, description="Category name (required)"),
    img: Optional[UploadFile] = File(None, description="Category picture"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    image = await read_payload(img)
    await category_service.create_category(db, name=name, image=image)
    return ApiResponse(message="Category created successfully.", data=None)


@router.put(
    "/{category_id}",
    response_model=ApiResponse[None],
    responses=_ERRORS_WITH_404,
    summary="Update a category",
    description=(
        "Multipart form with `name` (required), optional `image` (URL to keep) "
        "and optional `img` file. A new file replaces the stored image."
    ),
)
async def update_category(
    category_id: UUID,
    name: Optional[str] = Form(None, description="Category name (required)"),
    image: Optional[str] = Form(None, description="Existing image URL to keep"),
    img: Optional[UploadFile] = File(None, description="Replacement picture"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    payload = await read_payload(img)
    await category_service.update_category(
        db,
        category_id,
        name=name,
        image_url=image,
        image=payload,
    )
    return ApiResponse(message="Category updated successfully.", data=None)


@router.delete(
    "/{category_id}",
    response_model=MessageResponse,
    responses={
        **_ERRORS_WITH_404,
        400: {"description": "Subcategories or products reference the category", "model": ErrorResponse},
    },
    summary="Delete a category",
)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await category_service.delete_category(db, category_id)
    return MessageResponse(message="Category deleted successfully.")
