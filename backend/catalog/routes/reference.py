"""
Catalog Backend: Reference Data Routes
=======================================

What:  JSON CRUD for the lookup resources products point at:
       /subCategories, /brands, /variantTypes, /variants.
How:   build_reference_router() stamps out the same five routes for each
       resource from its ReferenceService plus input/output schemas.
       Deletes go through the shared delete guard.
"""

import logging
from typing import List, Type
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db_session
from catalog.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from catalog.schemas.reference import (
    BrandIn,
    BrandResponse,
    SubCategoryIn,
    SubCategoryResponse,
    VariantIn,
    VariantResponse,
    VariantTypeIn,
    VariantTypeResponse,
)
from catalog.services.reference_service import (
    ReferenceService,
    brand_service,
    sub_category_service,
    variant_service,
    variant_type_service,
)

logger = logging.getLogger(__name__)


def build_reference_router(
    prefix: str,
    service: ReferenceService,
    in_model: Type[BaseModel],
    out_model: Type[BaseModel],
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[service.plural])
    errors = {
        400: {"description": "Validation error or referenced by other records", "model": ErrorResponse},
        404: {"description": f"{service.singular} not found", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    }

    @router.get(
        "",
        response_model=ApiResponse[List[out_model]],
        responses=errors,
        summary=f"List all {service.plural.lower()}",
    )
    async def list_records(db: AsyncSession = Depends(get_db_session)):
        records = await service.list_all(db)
        return ApiResponse(
            message=f"{service.plural} retrieved successfully.",
            data=[out_model.model_validate(record) for record in records],
        )

    @router.get(
        "/{record_id}",
        response_model=ApiResponse[out_model],
        responses=errors,
        summary=f"Get a {service.singular.lower()} by ID",
    )
    async def get_record(record_id: UUID, db: AsyncSession = Depends(get_db_session)):
        record = await service.get(db, record_id)
        return ApiResponse(
            message=f"{service.singular} retrieved successfully.",
            data=out_model.model_validate(record),
        )

    @router.post(
        "",
        response_model=ApiResponse[None],
        responses=errors,
        summary=f"Create a {service.singular.lower()}",
    )
    async def create_record(body: in_model, db: AsyncSession = Depends(get_db_session)):
        await service.create(db, body)
        return ApiResponse(message=f"{service.singular} created successfully.", data=None)

    @router.put(
        "/{record_id}",
        response_model=ApiResponse[None],
        responses=errors,
        summary=f"Update a {service.singular.lower()}",
    )
    async def update_record(
        record_id: UUID,
        body: in_model,
        db: AsyncSession = Depends(get_db_session),
    ):
        await service.update(db, record_id, body)
        return ApiResponse(message=f"{service.singular} updated successfully.", data=None)

    @router.delete(
        "/{record_id}",
        response_model=MessageResponse,
        responses=errors,
        summary=f"Delete a {service.singular.lower()}",
    )
    async def delete_record(record_id: UUID, db: AsyncSession = Depends(get_db_session)):
        await service.delete(db, record_id)
        return MessageResponse(message=f"{service.singular} deleted successfully.")

    return router


sub_categories_router = build_reference_router(
    "/subCategories", sub_category_service, SubCategoryIn, SubCategoryResponse
)
brands_router = build_reference_router("/brands", brand_service, BrandIn, BrandResponse)
variant_types_router = build_reference_router(
    "/variantTypes", variant_type_service, VariantTypeIn, VariantTypeResponse
)
variants_router = build_reference_router("/variants", variant_service, VariantIn, VariantResponse)

routers = (sub_categories_router, brands_router, variant_types_router, variants_router)
