"""Routes for the product catalog."""

from __future__ import annotations

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from catalog_api.models.product import CreateProductRequest, ProductProfile, UpdateProductRequest
from catalog_api.models.validation import MessageResponse, ValidationErrorResponse
from catalog_api.services.products.catalog_service import (
    ProductCatalogService,
    get_product_catalog_service,
)
from catalog_api.services.products.create_flow import (
    CreateProductHandler,
    get_create_product_handler,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])

CreateHandlerDependency = Annotated[CreateProductHandler, Depends(get_create_product_handler)]
CatalogDependency = Annotated[ProductCatalogService, Depends(get_product_catalog_service)]


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductProfile,
    summary="Create a product",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse},
        status.HTTP_409_CONFLICT: {"model": MessageResponse},
    },
)
async def create_product(
    payload: CreateProductRequest,
    response: Response,
    handler: CreateHandlerDependency,
) -> ProductProfile:
    """Validate and store a new product, returning its derived profile."""

    profile = await handler.handle(payload)
    response.headers["Location"] = f"/products/{profile.id}"
    return profile


@router.get("", response_model=list[ProductProfile], summary="List all products")
async def list_products(catalog: CatalogDependency) -> list[ProductProfile]:
    return await catalog.list_products()


@router.get(
    "/{product_id}",
    response_model=ProductProfile,
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def get_product(product_id: uuid.UUID, catalog: CatalogDependency) -> ProductProfile:
    return await catalog.get_product(product_id)


@router.patch(
    "/{product_id}",
    response_model=ProductProfile,
    summary="Partially update a product",
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ValidationErrorResponse},
        status.HTTP_404_NOT_FOUND: {"model": MessageResponse},
        status.HTTP_409_CONFLICT: {"model": MessageResponse},
    },
)
async def update_product(
    product_id: uuid.UUID,
    payload: UpdateProductRequest,
    catalog: CatalogDependency,
) -> ProductProfile:
    return await catalog.update_product(product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={status.HTTP_404_NOT_FOUND: {"model": MessageResponse}},
)
async def delete_product(product_id: uuid.UUID, catalog: CatalogDependency) -> Response:
    await catalog.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
