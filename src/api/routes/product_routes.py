"""
Product routes - full-collection read/replace plus validated single-product
create, edit and delete.
"""
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel, Field

from api.dependencies import error_response, get_store
from order_engine.models import Product, ProductPatch
from order_engine.products import (
    create_product,
    find_product,
    sort_for_display,
    update_product,
)
from storage.record_store import PRODUCTS

router = APIRouter()


class ProductCreateRequest(BaseModel):
    """Raw product form input; values are parsed by the engine."""
    name: Any = None
    price: Any = None
    description: Any = ""
    image_data_url: Any = Field("", alias="imageDataUrl")


def _load_products(store):
    return tuple(Product.from_dict(p) for p in store.load(PRODUCTS) if isinstance(p, dict))


def _save_one(store, product: Product):
    """
    Write one product back: replace the stored record with the same id,
    keeping any extra keys, or prepend it. Other records are untouched.
    """
    records = store.load(PRODUCTS)
    for index, record in enumerate(records):
        if isinstance(record, dict) and record.get("id") == product.id:
            records[index] = {**record, **product.to_dict()}
            break
    else:
        records.insert(0, product.to_dict())
    return store.save(PRODUCTS, records)


def _save_failed():
    return error_response("Failed to save products", status.HTTP_500_INTERNAL_SERVER_ERROR)


@router.get("", summary="List all products")
async def list_products(store=Depends(get_store)):
    return store.load(PRODUCTS)


@router.post("", summary="Replace the product collection")
async def replace_products(request: Request, store=Depends(get_store)):
    """Store the posted JSON array as the complete product list."""
    try:
        products = await request.json()
    except ValueError:
        return error_response("Invalid JSON")
    if not isinstance(products, list):
        return error_response("Invalid data format")
    if not store.save(PRODUCTS, products):
        return _save_failed()
    return {"success": True}


@router.get("/sorted", summary="Products, most recently updated first")
async def list_products_sorted(store=Depends(get_store)):
    return [p.to_dict() for p in sort_for_display(_load_products(store))]


@router.post("/create", status_code=status.HTTP_201_CREATED, summary="Create one product")
async def create_single_product(body: ProductCreateRequest, store=Depends(get_store)):
    result = create_product(body.name, body.price, body.description, body.image_data_url)
    if not result.ok:
        return error_response(result.error.value, status.HTTP_422_UNPROCESSABLE_ENTITY)

    if not _save_one(store, result.value):
        return _save_failed()
    return result.value.to_dict()


@router.patch("/{product_id}", summary="Edit one product")
async def edit_product(product_id: str, request: Request, store=Depends(get_store)):
    """Partial update; only keys present in the body change."""
    try:
        body = await request.json()
    except ValueError:
        return error_response("Invalid JSON")
    if not isinstance(body, dict):
        return error_response("Invalid data format")

    products = _load_products(store)
    existing: Optional[Product] = find_product(products, product_id)
    if existing is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    result = update_product(existing, ProductPatch.from_dict(body))
    if not result.ok:
        return error_response(result.error.value, status.HTTP_422_UNPROCESSABLE_ENTITY)

    if not _save_one(store, result.value):
        return _save_failed()
    return result.value.to_dict()


@router.delete("/{product_id}", summary="Delete one product")
async def remove_product(product_id: str, store=Depends(get_store)):
    records = store.load(PRODUCTS)
    kept = [r for r in records if not (isinstance(r, dict) and r.get("id") == product_id)]
    if len(kept) == len(records):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    if not store.save(PRODUCTS, kept):
        return _save_failed()
    return {"success": True}
