"""
Shop Session
Caller-owned context holding the catalog, the order history and the
current draft. Loads and saves whole collections through a record store.
"""
from typing import Any, Optional, Tuple

from order_engine import drafts, history
from order_engine.models import (
    EngineResult,
    ErrorKind,
    FinalizedOrder,
    OrderDraft,
    Product,
    ProductPatch,
)
from order_engine.products import (
    create_product,
    delete_product,
    find_product,
    update_product,
    upsert_product,
)
from storage.record_store import ORDERS, PRODUCTS, StoreWriteError
from utils.logger import get_logger


class ShopSession:
    """
    State for one operator: products, orders and the draft being built

    Methods that write raise StoreWriteError when the store rejects the
    write; in-memory state then stays as it was before the call.
    """

    def __init__(self, store, logger=None):
        self.store = store
        self.logger = logger or get_logger()
        self.products: Tuple[Product, ...] = ()
        self.orders: Tuple[FinalizedOrder, ...] = ()
        self.draft: OrderDraft = drafts.create_draft()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self):
        """Reload both collections; call before mutating if staleness matters"""
        self.products = tuple(Product.from_dict(p) for p in self.store.load(PRODUCTS))
        self.orders = tuple(FinalizedOrder.from_dict(o) for o in self.store.load(ORDERS))
        return self

    def _commit_products(self, products: Tuple[Product, ...]):
        """Save, then adopt, the new catalog; memory is untouched on failure"""
        if not self.store.save(PRODUCTS, [p.to_dict() for p in products]):
            raise StoreWriteError("Failed to save products")
        self.products = products

    def _commit_orders(self, orders: Tuple[FinalizedOrder, ...]):
        """Save, then adopt, the new order history; memory is untouched on failure"""
        if not self.store.save(ORDERS, [o.to_dict() for o in orders]):
            raise StoreWriteError("Failed to save orders")
        self.orders = orders

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def add_product(self, name: Any, price: Any, description: Any = "",
                    image_data_url: Any = "") -> EngineResult[Product]:
        result = create_product(name, price, description, image_data_url)
        if result.ok:
            self._commit_products(upsert_product(self.products, result.value))
        return result

    def edit_product(self, product_id: str, patch: ProductPatch) -> EngineResult[Product]:
        existing = find_product(self.products, product_id)
        if existing is None:
            return EngineResult.failure(ErrorKind.PRODUCT_NOT_FOUND)
        result = update_product(existing, patch)
        if result.ok:
            self._commit_products(upsert_product(self.products, result.value))
        return result

    def remove_product(self, product_id: str) -> bool:
        if find_product(self.products, product_id) is None:
            return False
        self._commit_products(delete_product(self.products, product_id))
        return True

    # ------------------------------------------------------------------
    # Draft
    # ------------------------------------------------------------------

    def reset_draft(self) -> OrderDraft:
        self.draft = drafts.create_draft()
        return self.draft

    def set_customer(self, last_name: Any, phone: Any) -> EngineResult[OrderDraft]:
        result = drafts.set_customer(self.draft, last_name, phone)
        if result.ok:
            self.draft = result.value
        return result

    def add_to_cart(self, product_id: str, quantity: Any = 1) -> EngineResult[OrderDraft]:
        product = find_product(self.products, product_id)
        if product is None:
            return EngineResult.failure(ErrorKind.PRODUCT_NOT_FOUND)
        self.draft = drafts.add_item(self.draft, product, quantity)
        return EngineResult.success(self.draft)

    def change_quantity(self, item_id: str, quantity: Any) -> OrderDraft:
        self.draft = drafts.update_item_quantity(self.draft, item_id, quantity)
        return self.draft

    def remove_from_cart(self, item_id: str) -> OrderDraft:
        self.draft = drafts.remove_item(self.draft, item_id)
        return self.draft

    def set_payment(self, deposit: Any, description: Optional[str] = None) -> OrderDraft:
        self.draft = drafts.set_deposit(self.draft, deposit)
        if description is not None:
            self.draft = drafts.set_description(self.draft, description)
        return self.draft

    def finalize(self) -> EngineResult[FinalizedOrder]:
        """
        Validate the draft and commit it to the order history

        On failure nothing changes. On success the order is saved and a
        fresh draft replaces the old one.

        Raises:
            StoreWriteError: the order history could not be written; the
                draft is kept so the operator can retry
        """
        result = drafts.validate_for_finalize(self.draft)
        if not result.ok:
            self.logger.debug(
                f"Draft {self.draft.id} rejected: {result.error.value}", component="Orders"
            )
            return result

        order = result.value
        self._commit_orders(history.commit_order(self.orders, order))
        self.logger.log_order_finalized(
            order.id, len(order.items), order.total_amount, order.deposit
        )
        self.reset_draft()
        return result

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def settle(self, order_id: str) -> Optional[FinalizedOrder]:
        if history.find_order(self.orders, order_id) is None:
            return None
        self._commit_orders(history.settle_in_history(self.orders, order_id))
        return history.find_order(self.orders, order_id)

    def clear_orders(self):
        self._commit_orders(())
