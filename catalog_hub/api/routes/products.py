from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Path, Query, Response, status

from catalog_hub.api.dependencies import get_repository
from catalog_hub.core.exceptions import ProductNotFoundError
from catalog_hub.core.logging import get_logger
from catalog_hub.domain.schemas.product import (
    AttributeInput,
    AttributeSchema,
    CategorySchema,
    ProductListResponse,
    ProductSchema,
)
from catalog_hub.infrastructure.repositories.product_repository import ProductRepository

# Initialize router and logger
products_router = APIRouter()
logger = get_logger(__name__)


@products_router.get(
    "",
    response_model=ProductListResponse,
    status_code=status.HTTP_200_OK,
    summary="List canonical products",
    description="Lists products from the canonical store, optionally filtered."
)
def list_products(
    category_id: Optional[int] = Query(None, description="Filter by category"),
    owner: Optional[int] = Query(None, description="Filter by creating user"),
    internal_only: bool = Query(False, description="Only products owned by the local store"),
    repository: ProductRepository = Depends(get_repository),
) -> ProductListResponse:
    """
    List canonical products.

    Filters are applied in order of precedence: internal_only, category_id,
    owner. Only the first one given is used.
    """
    if internal_only:
        products = repository.list_internal()
    elif category_id is not None:
        products = repository.list_by_category(category_id)
    elif owner is not None:
        products = repository.list_by_owner(owner)
    else:
        products = repository.list_all()

    return ProductListResponse(
        data=[ProductSchema.from_domain(p) for p in products],
        total=len(products)
    )


@products_router.get(
    "/categories",
    response_model=List[CategorySchema],
    status_code=status.HTTP_200_OK,
    summary="List product categories"
)
def list_categories(
    repository: ProductRepository = Depends(get_repository),
) -> List[CategorySchema]:
    return [CategorySchema.from_domain(c) for c in repository.list_categories()]


@products_router.get(
    "/{product_id}",
    response_model=ProductSchema,
    status_code=status.HTTP_200_OK,
    summary="Get a canonical product",
    responses={404: {"description": "Product not found"}}
)
def get_product(
    product_id: int = Path(..., description="Canonical product id"),
    repository: ProductRepository = Depends(get_repository),
) -> ProductSchema:
    product = repository.get_by_id(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    return ProductSchema.from_domain(product)


@products_router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an internal product",
    description="Only products owned by the local store can be deleted; partner products are managed by reconciliation.",
    responses={404: {"description": "No internal product with that id"}}
)
def delete_product(
    product_id: int = Path(..., description="Canonical product id"),
    repository: ProductRepository = Depends(get_repository),
) -> Response:
    if not repository.delete_internal(product_id):
        raise ProductNotFoundError(product_id, context={"internal_only": True})
    logger.info(f"Deleted internal product {product_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@products_router.get(
    "/{product_id}/attributes",
    response_model=List[AttributeSchema],
    status_code=status.HTTP_200_OK,
    summary="List a product's attributes",
    responses={404: {"description": "Product not found"}}
)
def list_attributes(
    product_id: int = Path(..., description="Canonical product id"),
    repository: ProductRepository = Depends(get_repository),
) -> List[AttributeSchema]:
    return [AttributeSchema.from_domain(a) for a in repository.list_attributes(product_id)]


@products_router.post(
    "/{product_id}/attributes",
    response_model=List[AttributeSchema],
    status_code=status.HTTP_201_CREATED,
    summary="Add local attributes to a product",
    description="Added attributes carry no provider tag and survive reconciliation.",
    responses={404: {"description": "Product not found"}}
)
def add_attributes(
    attributes: List[AttributeInput] = Body(...),
    product_id: int = Path(..., description="Canonical product id"),
    repository: ProductRepository = Depends(get_repository),
) -> List[AttributeSchema]:
    stored = repository.add_attributes(product_id, [a.to_domain() for a in attributes])
    return [AttributeSchema.from_domain(a) for a in stored]


@products_router.put(
    "/{product_id}/attributes/{attribute_id}",
    response_model=AttributeSchema,
    status_code=status.HTTP_200_OK,
    summary="Update a local attribute",
    responses={
        404: {"description": "Attribute not found"},
        409: {"description": "Attribute is owned by a partner"},
    }
)
def update_attribute(
    attribute: AttributeInput,
    product_id: int = Path(..., description="Canonical product id"),
    attribute_id: int = Path(..., description="Attribute id"),
    repository: ProductRepository = Depends(get_repository),
) -> AttributeSchema:
    updated = repository.update_attribute(product_id, attribute_id, attribute.key, attribute.value)
    return AttributeSchema.from_domain(updated)


@products_router.delete(
    "/{product_id}/attributes/{attribute_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a local attribute",
    responses={
        404: {"description": "Attribute not found"},
        409: {"description": "Attribute is owned by a partner"},
    }
)
def delete_attribute(
    product_id: int = Path(..., description="Canonical product id"),
    attribute_id: int = Path(..., description="Attribute id"),
    repository: ProductRepository = Depends(get_repository),
) -> Response:
    repository.delete_attribute(product_id, attribute_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
