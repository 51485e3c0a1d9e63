"""
Product operations: validated creation, partial updates and catalog helpers.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .models import UNSET, EngineResult, ErrorKind, Product, ProductPatch
from .values import new_id, now_iso, parse_money


def _clean_text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _check(name: str, price: int) -> Optional[ErrorKind]:
    if not name:
        return ErrorKind.PRODUCT_NAME_REQUIRED
    if not price > 0:
        return ErrorKind.PRICE_MUST_BE_POSITIVE
    return None


def create_product(
    name: Any,
    price: Any,
    description: Any = "",
    image_data_url: Any = "",
) -> EngineResult[Product]:
    """Build a new Product from raw form input.

    The name and description are trimmed, the price goes through
    ``parse_money`` and must end up strictly positive.
    """
    clean_name = _clean_text(name)
    clean_price = parse_money(price)

    error = _check(clean_name, clean_price)
    if error:
        return EngineResult.failure(error)

    stamp = now_iso()
    return EngineResult.success(
        Product(
            id=new_id("prod"),
            name=clean_name,
            price=clean_price,
            description=_clean_text(description),
            image_data_url="" if image_data_url is None else str(image_data_url),
            created_at=stamp,
            updated_at=stamp,
        )
    )


def update_product(
    existing: Product,
    patch: Union[ProductPatch, Mapping[str, Any]],
) -> EngineResult[Product]:
    """Apply a partial update and revalidate.

    Only fields present in ``patch`` change; an explicit ``None`` is scrubbed
    through the same rules as creation (so it usually fails validation).
    ``id`` and ``created_at`` are never touched; ``updated_at`` is bumped on
    success.
    """
    if not isinstance(patch, ProductPatch):
        patch = ProductPatch.from_dict(patch)

    # Kept values are normalized too; stored records may hold raw strings or null
    changes = {"price": parse_money(existing.price)}
    if patch.name is not UNSET:
        changes["name"] = _clean_text(patch.name)
    if patch.price is not UNSET:
        changes["price"] = parse_money(patch.price)
    if patch.description is not UNSET:
        changes["description"] = _clean_text(patch.description)
    if patch.image_data_url is not UNSET:
        changes["image_data_url"] = "" if patch.image_data_url is None else str(patch.image_data_url)

    candidate = replace(existing, **changes)

    error = _check(candidate.name, candidate.price)
    if error:
        return EngineResult.failure(error)

    return EngineResult.success(replace(candidate, updated_at=now_iso()))


# ---------------------------------------------------------------------------
# Catalog helpers
# ---------------------------------------------------------------------------

def find_product(products: Sequence[Product], product_id: str) -> Optional[Product]:
    for product in products:
        if product.id == product_id:
            return product
    return None


def upsert_product(products: Sequence[Product], product: Product) -> Tuple[Product, ...]:
    """Replace the product with the same id in place, or prepend a new one."""
    if find_product(products, product.id) is None:
        return (product, *products)
    return tuple(product if p.id == product.id else p for p in products)


def delete_product(products: Sequence[Product], product_id: str) -> Tuple[Product, ...]:
    # Line items keep their own snapshot, so existing orders are unaffected.
    return tuple(p for p in products if p.id != product_id)


def sort_for_display(products: Sequence[Product]) -> Tuple[Product, ...]:
    """Most recently updated first."""
    return tuple(sorted(products, key=lambda p: p.updated_at or "", reverse=True))


def sort_for_selection(products: Sequence[Product]) -> Tuple[Product, ...]:
    """Alphabetical by name, for product pickers."""
    return tuple(sorted(products, key=lambda p: (p.name or "").casefold()))
