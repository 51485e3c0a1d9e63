"""
Draft routes - build an order step by step and finalize it.

Drafts live in memory until finalized or evicted. A draft idle for
DRAFT_IDLE_MINUTES is dropped, and once DRAFT_MAX_OPEN are open the least
recently used goes first. A finalized order is prepended to the stored
order history. Engine validation failures return 422 with the
error kind, e.g. ``{"error": "PHONE_INVALID"}``.
"""
import time
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

import config
from api.dependencies import error_response, get_store
from order_engine import drafts
from order_engine.models import OrderDraft, Product
from order_engine.products import find_product
from storage.record_store import ORDERS, PRODUCTS
from utils.logger import get_logger

router = APIRouter()

# ── Pydantic models ──────────────────────────────────────────────

class CustomerRequest(BaseModel):
    last_name: Any = Field(None, alias="lastName")
    phone: Any = None


class AddItemRequest(BaseModel):
    product_id: str = Field(..., alias="productId")
    quantity: Any = 1


class QuantityRequest(BaseModel):
    quantity: Any = 1


class DepositRequest(BaseModel):
    deposit: Any = 0
    description: Any = None


# ── In-memory draft store ─────────────────────────────────────────

_drafts: Dict[str, OrderDraft] = {}
_last_used: Dict[str, float] = {}


def _prune_drafts():
    """Drop idle drafts, then the least recently used ones above the cap"""
    cutoff = time.monotonic() - config.DRAFT_IDLE_MINUTES * 60
    for draft_id in [d for d, seen in _last_used.items() if seen < cutoff]:
        _forget(draft_id)
    while len(_drafts) >= config.DRAFT_MAX_OPEN:
        oldest = min(_last_used, key=_last_used.get)
        _forget(oldest)
        get_logger().debug(f"Evicted draft {oldest}", component="Drafts")


def _put(draft: OrderDraft):
    _drafts[draft.id] = draft
    _last_used[draft.id] = time.monotonic()


def _forget(draft_id: str):
    _drafts.pop(draft_id, None)
    _last_used.pop(draft_id, None)


def _get_draft(draft_id: str) -> OrderDraft:
    draft = _drafts.get(draft_id)
    if draft is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Draft not found")
    _last_used[draft_id] = time.monotonic()
    return draft


def _engine_error(result):
    return error_response(result.error.value, status.HTTP_422_UNPROCESSABLE_ENTITY)


# ── Routes ────────────────────────────────────────────────────────

@router.post("", status_code=status.HTTP_201_CREATED, summary="Start a new draft")
async def create_draft():
    _prune_drafts()
    draft = drafts.create_draft()
    _put(draft)
    return draft.to_dict()


@router.get("/{draft_id}", summary="Get a draft")
async def get_draft(draft_id: str):
    return _get_draft(draft_id).to_dict()


@router.delete("/{draft_id}", summary="Discard a draft")
async def discard_draft(draft_id: str):
    _get_draft(draft_id)
    _forget(draft_id)
    return {"success": True}


@router.put("/{draft_id}/customer", summary="Set the customer")
async def set_customer(draft_id: str, body: CustomerRequest):
    result = drafts.set_customer(_get_draft(draft_id), body.last_name, body.phone)
    if not result.ok:
        return _engine_error(result)
    _put(result.value)
    return result.value.to_dict()


@router.post("/{draft_id}/items", summary="Add a product to the cart")
async def add_item(draft_id: str, body: AddItemRequest, store=Depends(get_store)):
    draft = _get_draft(draft_id)
    products = [Product.from_dict(p) for p in store.load(PRODUCTS) if isinstance(p, dict)]
    product = find_product(products, body.product_id)
    if product is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    draft = drafts.add_item(draft, product, body.quantity)
    _put(draft)
    return draft.to_dict()


@router.patch("/{draft_id}/items/{item_id}", summary="Change a cart row quantity")
async def update_item(draft_id: str, item_id: str, body: QuantityRequest):
    draft = drafts.update_item_quantity(_get_draft(draft_id), item_id, body.quantity)
    _put(draft)
    return draft.to_dict()


@router.delete("/{draft_id}/items/{item_id}", summary="Remove a cart row")
async def remove_item(draft_id: str, item_id: str):
    draft = drafts.remove_item(_get_draft(draft_id), item_id)
    _put(draft)
    return draft.to_dict()


@router.put("/{draft_id}/deposit", summary="Set deposit and description")
async def set_deposit(draft_id: str, body: DepositRequest):
    draft = drafts.set_deposit(_get_draft(draft_id), body.deposit)
    if body.description is not None:
        draft = drafts.set_description(draft, body.description)
    _put(draft)
    return draft.to_dict()


@router.post("/{draft_id}/finalize", summary="Validate and commit the draft")
async def finalize_draft(draft_id: str, store=Depends(get_store)):
    """
    Validate the draft and prepend it to the order history.

    The draft is discarded on success and kept unchanged on failure.
    """
    result = drafts.validate_for_finalize(_get_draft(draft_id))
    if not result.ok:
        return _engine_error(result)

    order = result.value
    # Existing records are written back untouched
    if not store.save(ORDERS, [order.to_dict(), *store.load(ORDERS)]):
        return error_response("Failed to save orders", status.HTTP_500_INTERNAL_SERVER_ERROR)

    _forget(draft_id)
    get_logger().log_order_finalized(
        order.id, len(order.items), order.total_amount, order.deposit
    )
    return order.to_dict()
