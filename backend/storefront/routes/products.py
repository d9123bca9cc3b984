"""
Storefront Backend — Product Route Handlers
=============================================

What:  POST/GET /api/products, GET/DELETE /api/products/{id}.
How:   Handlers receive the store, materializer and ingestor through
       dependencies and delegate everything else to ProductService.

Request Flow (POST):
    1. Client sends multipart/form-data: name, description, price,
       photo (file), extraPhotos (file, repeatable)
    2. MultipartIngestor spools file parts to temporary files
    3. ProductService validates, materializes images and inserts
    4. Return 201 Created with the new id and the rendered product
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from storefront.database import DocumentStore, get_store
from storefront.schemas.common import ErrorResponse
from storefront.schemas.product import (
    ProductCreatedResponse,
    ProductDeletedResponse,
    ProductResponse,
)
from storefront.services.image_base import ImageMaterializer, get_materializer
from storefront.services.ingest_service import MultipartIngestor, get_ingestor
from storefront.services.product_service import product_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Products"])


@router.post(
    "/products",
    status_code=201,
    response_model=ProductCreatedResponse,
    responses={
        400: {"description": "Malformed form or invalid fields", "model": ErrorResponse},
        500: {"description": "Image or database failure", "model": ErrorResponse},
    },
    summary="Create a product with images",
    description=(
        "multipart/form-data with text fields name, description, price and files "
        "photo (single) and extraPhotos (repeatable)."
    ),
)
async def create_product(
    request: Request,
    store: DocumentStore = Depends(get_store),
    materializer: ImageMaterializer = Depends(get_materializer),
    ingestor: MultipartIngestor = Depends(get_ingestor),
) -> ProductCreatedResponse:
    form = await ingestor.parse(request)
    logger.info(
        "Received product upload: name=%s, files=%d",
        form.fields.get("name", ""),
        len(form.all_files()),
    )
    return await product_service.create_product(store, materializer, form)


@router.get(
    "/products",
    response_model=List[ProductResponse],
    responses={500: {"description": "Database failure", "model": ErrorResponse}},
    summary="List all products",
)
async def list_products(
    store: DocumentStore = Depends(get_store),
    materializer: ImageMaterializer = Depends(get_materializer),
) -> List[ProductResponse]:
    return await product_service.list_products(store, materializer)


@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    responses={404: {"description": "Product not found", "model": ErrorResponse}},
    summary="Get a single product",
)
async def get_product(
    product_id: str,
    store: DocumentStore = Depends(get_store),
    materializer: ImageMaterializer = Depends(get_materializer),
) -> ProductResponse:
    return await product_service.get_product(store, materializer, product_id)


@router.delete(
    "/products/{product_id}",
    response_model=ProductDeletedResponse,
    responses={
        404: {"description": "Product not found", "model": ErrorResponse},
        500: {"description": "Database failure", "model": ErrorResponse},
    },
    summary="Delete a product",
)
async def delete_product(
    product_id: str,
    store: DocumentStore = Depends(get_store),
) -> ProductDeletedResponse:
    return await product_service.delete_product(store, product_id)
