"""
Order CSV Exporter
Generates lossy CSV projections of the order history:
  - Orders list (ORDER_CSV_COLUMNS): one row per order, items as JSON
  - Orders summary (ORDER_SUMMARY_COLUMNS): quantities per print size,
    amounts and balance, for spreadsheet use

Neither format is meant to be imported back; use the JSON export for that.
"""
import csv
import io
import json
import math
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional

import config
from utils.logger import get_logger

from .json_transfer import ExportError, default_export_filename

ORDER_CSV_COLUMNS = ['id', 'date', 'lastName', 'phone', 'totalAmount', 'items']

ORDER_SUMMARY_COLUMNS = [
    'lastName',
    'phone',
    'qty_3x4',
    'qty_2x3',
    'qty_4x6',
    'qty_retake',
    'qty_large',
    'totalAmount',
    'deposit',
    'remainingAmount',
    'description',
    'date',
]

# Print-size buckets counted in the summary, in column order
ITEM_TYPES = ['3x4', '2x3', '4x6', 'retake', 'large']


def classify_item(name: Any) -> str:
    """Map a line item name to a print-size bucket ('other' when unknown)."""
    n = str(name or '').lower().replace('×', 'x')
    n = ''.join(n.split())
    if '3x4' in n or '3٭4' in n or '3در4' in n:
        return '3x4'
    if '2x3' in n or '2در3' in n or '2٭3' in n:
        return '2x3'
    if '4x6' in n or '6x4' in n or '4در6' in n:
        return '4x6'
    if 'مجدد' in n or 'retake' in n:
        return 'retake'
    if 'بزرگ' in n or 'large' in n:
        return 'large'
    return 'other'


def _number(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number == int(number) else number


def _as_record(order: Any) -> Mapping[str, Any]:
    return order.to_dict() if hasattr(order, 'to_dict') else order


class OrderCSVExporter:
    """Export order records (wire-shaped dicts or FinalizedOrder) to CSV."""

    def __init__(self, output_dir: Optional[str] = None):
        self.output_dir = output_dir or config.EXPORT_FOLDER
        self.logger = get_logger()

    @staticmethod
    def _render(header: List[str], rows: Iterable[List[Any]]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(header)
        for row in rows:
            writer.writerow(['' if v is None else v for v in row])
        return buffer.getvalue()

    def orders_to_csv(self, orders: Iterable[Any]) -> str:
        """One row per order; the items column holds name/quantity/unitPrice JSON."""
        rows = []
        for order in map(_as_record, orders):
            customer = order.get('customer') or {}
            items = [
                {
                    'name': it.get('name'),
                    'quantity': it.get('quantity'),
                    'unitPrice': it.get('unitPrice'),
                }
                for it in order.get('items') or []
            ]
            rows.append([
                order.get('id'),
                order.get('createdAt'),
                customer.get('lastName'),
                customer.get('phone'),
                order.get('totalAmount'),
                json.dumps(items, ensure_ascii=False, separators=(',', ':')),
            ])
        return self._render(ORDER_CSV_COLUMNS, rows)

    def orders_to_summary_csv(self, orders: Iterable[Any]) -> str:
        """One row per order with quantities counted per print size."""
        rows = []
        for order in map(_as_record, orders):
            customer = order.get('customer') or {}
            counters: Dict[str, float] = {t: 0 for t in ITEM_TYPES}
            items = order.get('items')
            for it in items if isinstance(items, list) else []:
                kind = classify_item(it.get('name'))
                if kind in counters:
                    counters[kind] += _number(it.get('quantity'))

            total = _number(order.get('totalAmount'))
            deposit = _number(order.get('deposit'))
            if order.get('remainingAmount') is not None:
                remaining = _number(order.get('remainingAmount'))
            else:
                remaining = max(0, total - deposit)

            rows.append([
                customer.get('lastName', ''),
                customer.get('phone', ''),
                *[counters[t] for t in ITEM_TYPES],
                total,
                deposit,
                remaining,
                order.get('description', ''),
                order.get('createdAt', ''),
            ])
        return self._render(ORDER_SUMMARY_COLUMNS, rows)

    def export_orders(
        self, orders: List[Any], summary: bool = False, output_path: Optional[str] = None
    ) -> str:
        """
        Write the orders CSV to disk

        Args:
            orders: Order records
            summary: Write the per-size summary instead of the plain list
            output_path: Target file; defaults to EXPORT_FOLDER/orders_<date>.csv

        Returns:
            Path of the written file
        """
        if not orders:
            raise ExportError("No orders to export")

        content = self.orders_to_summary_csv(orders) if summary else self.orders_to_csv(orders)
        if not output_path:
            os.makedirs(self.output_dir, exist_ok=True)
            name = 'orders_summary' if summary else 'orders'
            output_path = os.path.join(self.output_dir, default_export_filename(name, 'csv'))

        with open(output_path, 'w', newline='', encoding='utf-8-sig') as csvfile:
            csvfile.write(content)

        self.logger.info(
            f"Orders CSV export ({len(orders)} rows): {output_path}", component="Export"
        )
        return output_path
