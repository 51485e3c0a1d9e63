"""
JSON export / import of product and order collections.

Export followed by import reproduces the same list of records. Payloads
that are not a JSON array are rejected here, before they reach the store
or the engine.
"""
import json
from datetime import datetime, timezone
from typing import Any, Dict, List


class ExportError(Exception):
    """Raised when there is nothing to export."""


class ImportFormatError(ValueError):
    """Raised for import payloads that are not a JSON array."""


def default_export_filename(kind: str, extension: str = 'json') -> str:
    """e.g. ``orders_2026-01-31.json``"""
    date = datetime.now(timezone.utc).strftime('%Y-%m-%d')
    return f"{kind}_{date}.{extension}"


def _as_record(record: Any) -> Dict[str, Any]:
    return record.to_dict() if hasattr(record, 'to_dict') else record


def export_json(records: List[Any]) -> str:
    """Serialize records (dicts or engine models) as indented JSON text."""
    return json.dumps([_as_record(r) for r in records], indent=2, ensure_ascii=False)


def import_json(text: Any) -> List[Dict[str, Any]]:
    """
    Parse an import file

    Args:
        text: File content as str or bytes

    Returns:
        The list of records

    Raises:
        ImportFormatError: Invalid JSON, or JSON that is not an array
    """
    if isinstance(text, (bytes, bytearray)):
        text = text.decode('utf-8-sig')
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ImportFormatError(f"Invalid JSON file: {e}") from e
    if not isinstance(data, list):
        raise ImportFormatError("Invalid data format")
    return data
