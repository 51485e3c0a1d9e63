"""
Order Engine - catalog, cart and order-draft computation
Pure data transformations for the shop: products, drafts, totals,
finalization and the order history.

This package performs no I/O. Persistence lives in ``storage`` and the
HTTP surface in ``api``.
"""

__version__ = "1.0.0"
