from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status

from admin_api.adapters.store.base import AbstractDocumentStore
from admin_api.api.dependencies import get_store
from admin_api.core.errors import NotFoundAppError
from admin_api.core.response_cache import cached, invalidate_cache
from admin_api.schemas.products import ProductCreate, ProductUpdate

router = APIRouter(prefix="/admin/products", tags=["Products"])

PRODUCTS_TTL_SECONDS = 30
PRODUCTS_CACHE_PREFIX = "/api/admin/products"

Store = Annotated[AbstractDocumentStore, Depends(get_store)]


def _not_found(product_id: str) -> NotFoundAppError:
    return NotFoundAppError(
        code="product_not_found",
        message="Product not found",
        details={"resource": "products", "resource_id": product_id},
    )


def format_product(product: dict[str, Any]) -> dict[str, Any]:
    """Shape a stored product for the admin UI (image as a data URL)."""
    formatted = dict(product)
    image = formatted.get("image")
    if image and not image.startswith("data:"):
        formatted["image"] = f"data:image/jpeg;base64,{image}"
    return formatted


@router.get("")
@cached(ttl_seconds=PRODUCTS_TTL_SECONDS)
async def list_products(request: Request, store: Store) -> list[dict[str, Any]]:
    return [format_product(p) for p in await store.list("products")]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(body: ProductCreate, request: Request, store: Store) -> dict[str, Any]:
    product = await store.insert("products", body.model_dump())
    invalidate_cache(request, PRODUCTS_CACHE_PREFIX)
    return {"message": "Product added successfully", "product": format_product(product)}


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: ProductUpdate,
    request: Request,
    store: Store,
) -> dict[str, Any]:
    product = await store.update("products", product_id, body.model_dump(exclude_none=True))
    if product is None:
        raise _not_found(product_id)
    invalidate_cache(request, PRODUCTS_CACHE_PREFIX)
    return {
        "success": True,
        "message": "Product updated successfully",
        "product": format_product(product),
    }


@router.delete("/{product_id}")
async def delete_product(product_id: str, request: Request, store: Store) -> dict[str, Any]:
    if await store.delete("products", product_id) is None:
        raise _not_found(product_id)
    invalidate_cache(request, PRODUCTS_CACHE_PREFIX)
    return {"success": True, "message": "Product deleted successfully", "deletedId": product_id}
