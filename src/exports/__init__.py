"""
Exports module for PhotoTools POS
Contains JSON transfer helpers and CSV exporters
"""

from .json_transfer import (
    ExportError,
    ImportFormatError,
    default_export_filename,
    export_json,
    import_json,
)
from .order_csv_exporter import OrderCSVExporter

__all__ = [
    'ExportError',
    'ImportFormatError',
    'OrderCSVExporter',
    'default_export_filename',
    'export_json',
    'import_json',
]
