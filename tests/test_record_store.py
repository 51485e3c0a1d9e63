"""
Tests for the JSON-file record store.
All test artifacts use temp directories and are cleaned up after.
"""
import json
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock

# Ensure src/ is on path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / 'src'))

from storage.record_store import (
    ORDERS,
    PRODUCTS,
    InvalidPayloadError,
    JsonRecordStore,
    UnknownCollectionError,
)


class TestJsonRecordStore(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp(prefix="pos_store_test_")
        self.logger = MagicMock()
        self.store = JsonRecordStore(data_dir=self.temp_dir, logger=self.logger)

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_missing_files_created_empty(self):
        for kind in (PRODUCTS, ORDERS):
            path = self.store.path_for(kind)
            self.assertTrue(path.exists())
            self.assertEqual(json.loads(path.read_text(encoding='utf-8')), [])
            self.assertEqual(self.store.load(kind), [])

    def test_save_then_load(self):
        records = [{"id": "p1", "name": "عکس ۴x6", "price": 50000}]
        self.assertTrue(self.store.save(PRODUCTS, records))
        self.assertEqual(self.store.load(PRODUCTS), records)
        self.logger.log_store_write.assert_called_once()

    def test_non_ascii_written_verbatim(self):
        self.store.save(PRODUCTS, [{"name": "عکس"}])
        self.assertIn("عکس", self.store.path_for(PRODUCTS).read_text(encoding='utf-8'))

    def test_save_rejects_non_list(self):
        with self.assertRaises(InvalidPayloadError):
            self.store.save(ORDERS, {"id": "o1"})

    def test_unknown_collection(self):
        with self.assertRaises(UnknownCollectionError):
            self.store.load("customers")
        with self.assertRaises(KeyError):
            self.store.save("customers", [])

    def test_corrupt_file_loads_empty(self):
        self.store.path_for(ORDERS).write_text("{not json", encoding='utf-8')
        self.assertEqual(self.store.load(ORDERS), [])
        self.logger.warning.assert_called()

    def test_non_array_file_loads_empty(self):
        self.store.path_for(ORDERS).write_text('{"id": 1}', encoding='utf-8')
        self.assertEqual(self.store.load(ORDERS), [])

    def test_failed_save_keeps_previous_content(self):
        self.store.save(ORDERS, [{"id": "o1"}])
        self.assertFalse(self.store.save(ORDERS, [{"bad": object()}]))
        self.assertEqual(self.store.load(ORDERS), [{"id": "o1"}])
        leftovers = [f for f in os.listdir(self.temp_dir) if f.endswith('.tmp')]
        self.assertEqual(leftovers, [])
        self.logger.error.assert_called()

    def test_existing_files_are_kept(self):
        self.store.save(PRODUCTS, [{"id": "p1"}])
        reopened = JsonRecordStore(data_dir=self.temp_dir, logger=self.logger)
        self.assertEqual(reopened.load(PRODUCTS), [{"id": "p1"}])


if __name__ == '__main__':
    unittest.main()
