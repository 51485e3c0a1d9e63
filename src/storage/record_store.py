"""
Record Store
JSON-file backed persistence for the product and order collections.

Every write replaces the whole collection (load full list, transform,
save full list back). Across processes the last writer wins.
"""
import json
import os
import tempfile
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

import config
from utils.logger import get_logger

PRODUCTS = 'products'
ORDERS = 'orders'
COLLECTIONS = (PRODUCTS, ORDERS)


class StoreError(Exception):
    """Base class for record store failures."""


class UnknownCollectionError(StoreError, KeyError):
    """Raised for a collection name other than products/orders."""


class InvalidPayloadError(StoreError, ValueError):
    """Raised when a save payload is not a list of records."""


class StoreWriteError(StoreError):
    """Raised by callers when a collection could not be written."""


class RecordStore(Protocol):
    def load(self, kind: str) -> List[Dict[str, Any]]: ...

    def save(self, kind: str, records: List[Dict[str, Any]]) -> bool: ...


class JsonRecordStore:
    """Stores each collection as a pretty-printed JSON array on disk."""

    def __init__(self, data_dir: Optional[str] = None, logger=None):
        self.data_dir = Path(data_dir or config.DATA_DIR)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.logger = logger or get_logger()
        self.lock = Lock()
        self._files = {
            PRODUCTS: self.data_dir / config.PRODUCTS_FILE_NAME,
            ORDERS: self.data_dir / config.ORDERS_FILE_NAME,
        }
        for path in self._files.values():
            self._ensure_file(path)

    @staticmethod
    def _ensure_file(path: Path):
        if not path.exists():
            path.write_text('[]', encoding='utf-8')

    def path_for(self, kind: str) -> Path:
        try:
            return self._files[kind]
        except KeyError:
            raise UnknownCollectionError(f"Unknown collection: {kind}") from None

    def load(self, kind: str) -> List[Dict[str, Any]]:
        """
        Load the full snapshot of a collection

        Unreadable or non-array content is treated as an empty collection.
        """
        path = self.path_for(kind)
        with self.lock:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except FileNotFoundError:
                return []
            except (OSError, ValueError) as e:
                self.logger.warning(f"Could not read {path}: {e}", component="Store")
                return []

        if not isinstance(data, list):
            self.logger.warning(f"{path} does not hold a JSON array, ignoring", component="Store")
            return []
        return data

    def save(self, kind: str, records: List[Dict[str, Any]]) -> bool:
        """
        Replace a collection with ``records``

        Returns:
            True on success, False if the file could not be written
        """
        path = self.path_for(kind)
        if not isinstance(records, list):
            raise InvalidPayloadError("Invalid data format")

        with self.lock:
            tmp_path = None
            try:
                # Write to a sibling temp file, then swap it in atomically
                fd, tmp_path = tempfile.mkstemp(dir=str(self.data_dir), suffix='.tmp')
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(records, f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, path)
            except (OSError, TypeError, ValueError) as e:
                self.logger.error(f"Failed to save {kind} to {path}: {e}", component="Store")
                if tmp_path and os.path.exists(tmp_path):
                    os.remove(tmp_path)
                return False

        self.logger.log_store_write(kind, len(records), path)
        return True
