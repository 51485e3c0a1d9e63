"""
Order history operations.

The history is append-only: orders are committed newest-first and are
never recomputed afterwards. Settling is the one permitted adjustment.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence, Tuple

from .models import FinalizedOrder, OrderDraft
from .values import normalize_phone, parse_money


def commit_order(
    orders: Sequence[FinalizedOrder], order: FinalizedOrder
) -> Tuple[FinalizedOrder, ...]:
    """Put a freshly finalized order at the front of the history."""
    return (order, *orders)


def settle_order(order: OrderDraft) -> OrderDraft:
    """Mark an order fully paid.

    Sets ``deposit`` to the stored total and zeroes the remaining amount
    directly. Nothing is recomputed or revalidated.
    """
    return replace(order, deposit=order.total_amount, remaining_amount=0)


def find_order(orders: Sequence[FinalizedOrder], order_id: str) -> Optional[FinalizedOrder]:
    for order in orders:
        if order.id == order_id:
            return order
    return None


def settle_in_history(
    orders: Sequence[FinalizedOrder], order_id: str
) -> Tuple[FinalizedOrder, ...]:
    return tuple(settle_order(o) if o.id == order_id else o for o in orders)


def delete_order(
    orders: Sequence[FinalizedOrder], order_id: str
) -> Tuple[FinalizedOrder, ...]:
    return tuple(o for o in orders if o.id != order_id)


def newest_first(orders: Sequence[FinalizedOrder]) -> Tuple[FinalizedOrder, ...]:
    return tuple(sorted(orders, key=lambda o: o.created_at or "", reverse=True))


def recent_orders(
    orders: Sequence[FinalizedOrder], limit: int = 20
) -> Tuple[FinalizedOrder, ...]:
    return newest_first(orders)[:limit]


def orders_for_phone(
    orders: Sequence[FinalizedOrder], phone: str
) -> Tuple[FinalizedOrder, ...]:
    """Previous orders of one customer, matched on the normalized mobile number."""
    wanted = normalize_phone(phone)
    if not wanted:
        return ()
    return newest_first(
        [o for o in orders if normalize_phone(o.customer.phone) == wanted]
    )


def remaining_of(order: OrderDraft) -> int:
    """Outstanding balance; falls back to total minus deposit for legacy records.

    Stored amounts are parsed, so hand-edited records with string or null
    values still yield a number.
    """
    if order.remaining_amount is None:
        return parse_money(order.total_amount) - parse_money(order.deposit)
    return parse_money(order.remaining_amount)
