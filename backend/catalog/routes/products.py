"""
Catalog Backend: Product Routes
================================

What:  /products CRUD. Create and update accept multipart/form-data with the
       product fields (camelCase names) and up to five files image1..image5.
How:   `product_form` collects the raw strings and files once for both
       write routes; ProductService does all validation and coercion, so a
       bad number yields the API's own 400 envelope rather than FastAPI's 422.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.database import get_db_session
from catalog.routes.uploads import read_payloads
from catalog.schemas.common import ApiResponse, ErrorResponse, MessageResponse
from catalog.schemas.product import ProductResponse
from catalog.services.media_service import MediaPayload
from catalog.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Products"])

_ERRORS = {
    400: {"description": "Validation or upload error", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_ERRORS_WITH_404 = {
    **_ERRORS,
    404: {"description": "Product not found", "model": ErrorResponse},
}


@dataclass
class ProductForm:
    fields: Dict[str, Optional[str]]
    images: Dict[str, MediaPayload]


async def product_form(
    name: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    quantity: Optional[str] = Form(None),
    min_quantity: Optional[str] = Form(None, alias="minQuantity"),
    price: Optional[str] = Form(None),
    offer_price: Optional[str] = Form(None, alias="offerPrice"),
    wholesale_price: Optional[str] = Form(None, alias="wholesalePrice"),
    wholesale_offer_price: Optional[str] = Form(None, alias="wholesaleOfferPrice"),
    pro_category_id: Optional[str] = Form(None, alias="proCategoryId"),
    pro_sub_category_id: Optional[str] = Form(None, alias="proSubCategoryId"),
    pro_brand_id: Optional[str] = Form(None, alias="proBrandId"),
    pro_variant_type_id: Optional[str] = Form(None, alias="proVariantTypeId"),
    pro_variant_id: Optional[str] = Form(None, alias="proVariantId"),
    image1: Optional[UploadFile] = File(None),
    image2: Optional[UploadFile] = File(None),
    image3: Optional[UploadFile] = File(None),
    image4: Optional[UploadFile] = File(None),
    image5: Optional[UploadFile] = File(None),
) -> ProductForm:
    fields = {
        "name": name,
        "description": description,
        "quantity": quantity,
        "minQuantity": min_quantity,
        "price": price,
        "offerPrice": offer_price,
        "wholesalePrice": wholesale_price,
        "wholesaleOfferPrice": wholesale_offer_price,
        "proCategoryId": pro_category_id,
        "proSubCategoryId": pro_sub_category_id,
        "proBrandId": pro_brand_id,
        "proVariantTypeId": pro_variant_type_id,
        "proVariantId": pro_variant_id,
    }
    images = await read_payloads({
        "image1": image1,
        "image2": image2,
        "image3": image3,
        "image4": image4,
        "image5": image5,
    })
    return ProductForm(fields=fields, images=images)


@router.get(
    "",
    response_model=ApiResponse[List[ProductResponse]],
    responses=_ERRORS,
    summary="List all products",
    description="References (category, subcategory, brand, variant type, variant) are returned as {id, name}.",
)
async def list_products(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[ProductResponse]]:
    products = await product_service.list_products(db)
    return ApiResponse(
        message="Products retrieved successfully.",
        data=[ProductResponse.from_product(product) for product in products],
    )


@router.get(
    "/{product_id}",
    response_model=ApiResponse[ProductResponse],
    responses=_ERRORS_WITH_404,
    summary="Get a product by ID",
)
async def get_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ProductResponse]:
    product = await product_service.get_product(db, product_id)
    return ApiResponse(
        message="Product retrieved successfully.",
        data=ProductResponse.from_product(product),
    )


@router.post(
    "",
    response_model=ApiResponse[None],
    responses=_ERRORS,
    summary="Create a product",
    description=(
        "Required: name, quantity, price, proCategoryId, proSubCategoryId. "
        "Optional files image1..image5 (PNG or JPEG, max 5MB each)."
    ),
)
async def create_product(
    form: ProductForm = Depends(product_form),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await product_service.create_product(db, fields=form.fields, images=form.images)
    return ApiResponse(message="Product created successfully.", data=None)


@router.put(
    "/{product_id}",
    response_model=MessageResponse,
    responses=_ERRORS_WITH_404,
    summary="Update a product",
    description=(
        "Only supplied fields change. A file in imageN replaces the stored "
        "imageN URL (or adds it when the product had none for that slot)."
    ),
)
async def update_product(
    product_id: UUID,
    form: ProductForm = Depends(product_form),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.update_product(db, product_id, fields=form.fields, images=form.images)
    return MessageResponse(message="Product updated successfully.")


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses=_ERRORS_WITH_404,
    summary="Delete a product",
)
async def delete_product(
    product_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await product_service.delete_product(db, product_id)
    return MessageResponse(message="Product deleted successfully.")
