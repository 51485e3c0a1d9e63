"""
Export routes - JSON backups of both collections, order CSVs, and JSON import.
Downloads are sent as attachments named like ``orders_2026-01-31.json``.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response

from api.dependencies import error_response, get_store
from exports.json_transfer import ImportFormatError, default_export_filename, export_json, import_json
from exports.order_csv_exporter import OrderCSVExporter
from storage.record_store import COLLECTIONS, ORDERS, PRODUCTS
from utils.logger import get_logger

router = APIRouter()


def _attachment(content: str, filename: str, media_type: str) -> Response:
    return Response(
        content=content.encode('utf-8'),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ═══════════════════════════════════════════════════════════════════
# JSON backups
# ═══════════════════════════════════════════════════════════════════

@router.get("/exports/orders.json", summary="Download the order history as JSON")
async def export_orders_json(store=Depends(get_store)):
    orders = store.load(ORDERS)
    if not orders:
        return error_response("No orders to export")
    return _attachment(
        export_json(orders), default_export_filename('orders'), "application/json"
    )


@router.get("/exports/products.json", summary="Download the product catalog as JSON")
async def export_products_json(store=Depends(get_store)):
    products = store.load(PRODUCTS)
    if not products:
        return error_response("No products to export")
    return _attachment(
        export_json(products), default_export_filename('products'), "application/json"
    )


# ═══════════════════════════════════════════════════════════════════
# CSV
# ═══════════════════════════════════════════════════════════════════

@router.get("/exports/orders.csv", summary="Download the order list as CSV")
async def export_orders_csv(store=Depends(get_store)):
    orders = store.load(ORDERS)
    if not orders:
        return error_response("No orders to export")
    # BOM so spreadsheet tools detect UTF-8
    content = '\ufeff' + OrderCSVExporter().orders_to_csv(orders)
    return _attachment(
        content, default_export_filename('orders', 'csv'), "text/csv; charset=utf-8"
    )


@router.get("/exports/orders-summary.csv", summary="Download per-size order summary as CSV")
async def export_orders_summary_csv(store=Depends(get_store)):
    """
    One row per order with a quantity column for each print size
    (3x4, 2x3, 4x6, retake, large) plus the payment figures.
    """
    orders = store.load(ORDERS)
    if not orders:
        return error_response("No orders to export")
    content = '\ufeff' + OrderCSVExporter().orders_to_summary_csv(orders)
    return _attachment(
        content, default_export_filename('orders_summary', 'csv'), "text/csv; charset=utf-8"
    )


# ═══════════════════════════════════════════════════════════════════
# Import
# ═══════════════════════════════════════════════════════════════════

@router.post("/imports/{kind}", summary="Replace a collection from a JSON backup")
async def import_collection(kind: str, request: Request, store=Depends(get_store)):
    """
    Replace ``products`` or ``orders`` with the posted JSON array.

    The body is the raw content of a file produced by the JSON export.
    """
    if kind not in COLLECTIONS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown collection: {kind}")

    try:
        records = import_json(await request.body())
    except ImportFormatError as e:
        return error_response(str(e))

    if not store.save(kind, records):
        return error_response(f"Failed to save {kind}", status.HTTP_500_INTERNAL_SERVER_ERROR)

    get_logger().info(f"Imported {len(records)} {kind}", component="Import")
    return {"success": True, "count": len(records)}
