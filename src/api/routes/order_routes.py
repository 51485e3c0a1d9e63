"""
Order routes - full-collection read/replace, settle, delete, customer search
and dashboard statistics.

Settle and delete touch only the target record; every other stored order is
written back exactly as it was loaded.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from api.dependencies import error_response, get_store
from order_engine import history
from order_engine.models import FinalizedOrder
from order_engine.stats import compute_stats, unpaid_orders_by_remaining
from storage.record_store import ORDERS

router = APIRouter()


def _load_orders(store):
    return tuple(FinalizedOrder.from_dict(o) for o in store.load(ORDERS) if isinstance(o, dict))


def _find_raw(records, order_id):
    for index, record in enumerate(records):
        if isinstance(record, dict) and record.get("id") == order_id:
            return index
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")


@router.get("/orders", summary="List all orders")
async def list_orders(store=Depends(get_store)):
    return store.load(ORDERS)


@router.post("/orders", summary="Replace the order collection")
async def replace_orders(request: Request, store=Depends(get_store)):
    """Store the posted JSON array as the complete order history."""
    try:
        orders = await request.json()
    except ValueError:
        return error_response("Invalid JSON")
    if not isinstance(orders, list):
        return error_response("Invalid data format")
    if not store.save(ORDERS, orders):
        return error_response("Failed to save orders", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"success": True}


@router.get("/orders/search", summary="Previous orders of a customer")
async def search_orders(
    phone: str = Query(..., description="Customer mobile number, any common format"),
    store=Depends(get_store),
):
    return [o.to_dict() for o in history.orders_for_phone(_load_orders(store), phone)]


@router.get("/orders/recent", summary="Most recent orders")
async def recent_orders(
    limit: int = Query(20, ge=1, le=500),
    store=Depends(get_store),
):
    return [o.to_dict() for o in history.recent_orders(_load_orders(store), limit)]


@router.post("/orders/{order_id}/settle", summary="Mark an order fully paid")
async def settle_order(order_id: str, store=Depends(get_store)):
    records = store.load(ORDERS)
    index = _find_raw(records, order_id)

    settled = history.settle_order(FinalizedOrder.from_dict(records[index]))
    record = {
        **records[index],
        "deposit": settled.deposit,
        "remainingAmount": settled.remaining_amount,
    }
    records[index] = record

    if not store.save(ORDERS, records):
        return error_response("Failed to save orders", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return record


@router.delete("/orders/{order_id}", summary="Delete an order")
async def delete_order(order_id: str, store=Depends(get_store)):
    records = store.load(ORDERS)
    index = _find_raw(records, order_id)
    del records[index]

    if not store.save(ORDERS, records):
        return error_response("Failed to save orders", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"success": True}


@router.get("/stats", summary="Dashboard statistics")
async def dashboard_stats(store=Depends(get_store)):
    orders = _load_orders(store)
    stats = compute_stats(orders)
    return {
        **stats.to_dict(),
        "recent_orders": [o.to_dict() for o in history.recent_orders(orders, 5)],
        "unpaid": [o.to_dict() for o in unpaid_orders_by_remaining(orders)],
    }
