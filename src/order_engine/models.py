"""
Order Engine Data Models
Typed records for products, customers, line items and orders.

Field names in ``to_dict`` / ``from_dict`` are the persisted JSON contract
(camelCase). ``from_dict`` does not coerce numbers; ``drafts.recompute``
is the single place untrusted amounts are normalized.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Generic, Mapping, Optional, Tuple, TypeVar


T = TypeVar("T")


# ---------------------------------------------------------------------------
# Errors and results
# ---------------------------------------------------------------------------

class ErrorKind(Enum):
    """Validation failures surfaced by engine operations."""
    PRODUCT_NAME_REQUIRED = "PRODUCT_NAME_REQUIRED"
    PRICE_MUST_BE_POSITIVE = "PRICE_MUST_BE_POSITIVE"
    LAST_NAME_REQUIRED = "LAST_NAME_REQUIRED"
    PHONE_INVALID = "PHONE_INVALID"
    CART_EMPTY = "CART_EMPTY"
    DEPOSIT_EXCEEDS_TOTAL = "DEPOSIT_EXCEEDS_TOTAL"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"


@dataclass(frozen=True)
class EngineResult(Generic[T]):
    """Success value or a single ErrorKind."""
    value: Optional[T] = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "EngineResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ErrorKind) -> "EngineResult[T]":
        return cls(error=error)

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"ok": False, "error": self.error.value}
        value = self.value.to_dict() if hasattr(self.value, "to_dict") else self.value
        return {"ok": True, "value": value}


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Product:
    """A catalog entry. ``id`` never changes after creation."""
    id: str
    name: str
    price: int
    description: str = ""
    image_data_url: str = ""
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
            "imageDataUrl": self.image_data_url,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Product":
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            price=data.get("price", 0),
            description=str(data.get("description") or ""),
            image_data_url=str(data.get("imageDataUrl") or ""),
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
        )


class _Unset:
    """Marker for patch fields that were not supplied."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

_PATCH_KEYS = {
    "name": "name",
    "price": "price",
    "description": "description",
    "imageDataUrl": "image_data_url",
}


@dataclass(frozen=True)
class ProductPatch:
    """Partial product update. Fields left as UNSET keep the existing value."""
    name: Any = UNSET
    price: Any = UNSET
    description: Any = UNSET
    image_data_url: Any = UNSET

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProductPatch":
        """Build a patch from a wire-shaped mapping; only present keys are set."""
        kwargs = {attr: data[key] for key, attr in _PATCH_KEYS.items() if key in data}
        return cls(**kwargs)

    def present_fields(self) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(self) if getattr(self, f.name) is not UNSET)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Customer:
    last_name: str = ""
    phone: str = ""
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lastName": self.last_name,
            "phone": self.phone,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Customer":
        data = data or {}
        return cls(
            last_name=str(data.get("lastName") or ""),
            phone=str(data.get("phone") or ""),
            created_at=str(data.get("createdAt") or ""),
        )


@dataclass(frozen=True)
class LineItem:
    """One cart row. ``name`` / ``unit_price`` are a snapshot of the product."""
    id: str
    product_id: str
    name: str
    quantity: int = 1
    unit_price: int = 0
    total_price: int = 0
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "productId": self.product_id,
            "name": self.name,
            "quantity": self.quantity,
            "unitPrice": self.unit_price,
            "totalPrice": self.total_price,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
        return cls(
            id=str(data.get("id") or ""),
            product_id=str(data.get("productId") or ""),
            name=str(data.get("name") or ""),
            quantity=data.get("quantity", 1),
            unit_price=data.get("unitPrice", 0),
            total_price=data.get("totalPrice", 0),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True)
class OrderDraft:
    """An order in progress. Engine functions return new drafts."""
    id: str
    customer: Customer = field(default_factory=Customer)
    items: Tuple[LineItem, ...] = ()
    total_amount: int = 0
    deposit: int = 0
    remaining_amount: Optional[int] = 0
    description: str = ""
    created_at: str = ""

    def find_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "customer": self.customer.to_dict(),
            "items": [item.to_dict() for item in self.items],
            "totalAmount": self.total_amount,
            "deposit": self.deposit,
            "remainingAmount": self.remaining_amount,
            "description": self.description,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        raw_items = data.get("items") or []
        return cls(
            id=str(data.get("id") or ""),
            customer=Customer.from_dict(data.get("customer")),
            items=tuple(LineItem.from_dict(it) for it in raw_items),
            total_amount=data.get("totalAmount", 0),
            deposit=data.get("deposit", 0),
            remaining_amount=data.get("remainingAmount"),
            description=str(data.get("description") or ""),
            created_at=str(data.get("createdAt") or ""),
        )


@dataclass(frozen=True)
class FinalizedOrder(OrderDraft):
    """A draft that passed ``validate_for_finalize``; append-only history."""

    @classmethod
    def from_draft(cls, draft: OrderDraft) -> "FinalizedOrder":
        return cls(**{f.name: getattr(draft, f.name) for f in fields(OrderDraft)})
