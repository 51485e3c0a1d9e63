"""
Order-draft engine.

A draft moves Unbound -> Bound (valid customer) -> Finalizable (non-empty
cart) -> Finalized. Every function here returns a new draft and leaves its
argument untouched; derived amounts (``total_price``, ``total_amount``,
``remaining_amount``) are always recomputed, never trusted from input.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from .models import (
    Customer,
    EngineResult,
    ErrorKind,
    FinalizedOrder,
    LineItem,
    OrderDraft,
    Product,
)
from .values import (
    is_valid_phone,
    new_id,
    normalize_phone,
    now_iso,
    parse_money,
    parse_quantity,
)


def create_draft() -> OrderDraft:
    """Fresh draft: no customer, empty cart, zero totals."""
    stamp = now_iso()
    return OrderDraft(
        id=new_id("ord"),
        customer=Customer(created_at=stamp),
        created_at=stamp,
    )


def set_customer(draft: OrderDraft, last_name: Any, phone: Any) -> EngineResult[OrderDraft]:
    """Bind a customer to the draft (Unbound -> Bound)."""
    clean_last_name = "" if last_name is None else str(last_name).strip()
    clean_phone = normalize_phone(phone)

    if not clean_last_name:
        return EngineResult.failure(ErrorKind.LAST_NAME_REQUIRED)
    if not is_valid_phone(clean_phone):
        return EngineResult.failure(ErrorKind.PHONE_INVALID)

    customer = replace(draft.customer, last_name=clean_last_name, phone=clean_phone)
    return EngineResult.success(replace(draft, customer=customer))


def recompute(draft: OrderDraft) -> OrderDraft:
    """Re-derive every amount from quantities, unit prices and the deposit.

    Quantities and prices are re-parsed so imported or hand-edited data is
    normalized too. Idempotent.
    """
    items = []
    total = 0
    for item in draft.items:
        quantity = parse_quantity(item.quantity)
        unit_price = parse_money(item.unit_price)
        row_total = quantity * unit_price
        total += row_total
        items.append(
            replace(item, quantity=quantity, unit_price=unit_price, total_price=row_total)
        )

    deposit = parse_money(draft.deposit)
    return replace(
        draft,
        items=tuple(items),
        total_amount=total,
        deposit=deposit,
        remaining_amount=max(0, total - deposit),
    )


def add_item(draft: OrderDraft, product: Product, quantity: Any = 1) -> OrderDraft:
    """Add ``quantity`` of ``product``, merging into an existing row for it.

    New rows snapshot the product's name, price and description. Callers
    must make sure the product exists.
    """
    qty = parse_quantity(quantity)

    existing = next((it for it in draft.items if it.product_id == product.id), None)
    if existing is not None:
        merged = parse_quantity(parse_quantity(existing.quantity) + qty)
        items = tuple(
            replace(it, quantity=merged) if it.id == existing.id else it
            for it in draft.items
        )
    else:
        # Stored catalogs are not validated, so the snapshot price is parsed too
        unit_price = parse_money(product.price)
        items = draft.items + (
            LineItem(
                id=new_id("item"),
                product_id=product.id,
                name=product.name,
                quantity=qty,
                unit_price=unit_price,
                total_price=unit_price * qty,
                description=product.description or "",
            ),
        )

    return recompute(replace(draft, items=items))


def update_item_quantity(draft: OrderDraft, item_id: str, quantity: Any) -> OrderDraft:
    """Set a row's quantity. Unknown ``item_id`` returns ``draft`` itself."""
    if draft.find_item(item_id) is None:
        return draft

    qty = parse_quantity(quantity)
    items = tuple(
        replace(it, quantity=qty) if it.id == item_id else it for it in draft.items
    )
    return recompute(replace(draft, items=items))


def remove_item(draft: OrderDraft, item_id: str) -> OrderDraft:
    """Drop a row. Unknown ``item_id`` returns ``draft`` itself."""
    if draft.find_item(item_id) is None:
        return draft
    items = tuple(it for it in draft.items if it.id != item_id)
    return recompute(replace(draft, items=items))


def set_deposit(draft: OrderDraft, deposit: Any) -> OrderDraft:
    return recompute(replace(draft, deposit=deposit))


def set_description(draft: OrderDraft, description: Any) -> OrderDraft:
    return replace(draft, description="" if description is None else str(description))


def validate_for_finalize(draft: OrderDraft) -> EngineResult[FinalizedOrder]:
    """Check a draft and produce the finalized order.

    Order of checks decides which error surfaces: last name, phone, cart,
    positive total, deposit not above total.
    """
    last_name = (draft.customer.last_name or "").strip()
    phone = (draft.customer.phone or "").strip()

    if not last_name:
        return EngineResult.failure(ErrorKind.LAST_NAME_REQUIRED)
    if not is_valid_phone(phone):
        return EngineResult.failure(ErrorKind.PHONE_INVALID)
    if not draft.items:
        return EngineResult.failure(ErrorKind.CART_EMPTY)

    final = recompute(draft)
    if not final.total_amount > 0:
        return EngineResult.failure(ErrorKind.PRICE_MUST_BE_POSITIVE)
    if final.deposit > final.total_amount:
        return EngineResult.failure(ErrorKind.DEPOSIT_EXCEEDS_TOTAL)

    final = replace(final, description=(draft.description or "").strip())
    return EngineResult.success(FinalizedOrder.from_draft(final))
