"""
Tests for the FastAPI service using TestClient.
All test artifacts use temp directories and are cleaned up after.
"""
import importlib
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

ENV_KEYS = ["DATA_DIR", "STATIC_DIR", "FEATURE_SMS_ENABLED", "DRAFT_MAX_OPEN"]


class ApiTestCase(unittest.TestCase):
    """Creates an app backed by a fresh data directory."""

    sms_enabled = "true"

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp(prefix="pos_api_test_")

        # Set config before importing
        os.environ["DATA_DIR"] = os.path.join(self.temp_dir, "data")
        os.environ["STATIC_DIR"] = os.path.join(self.temp_dir, "no_static")
        os.environ["FEATURE_SMS_ENABLED"] = self.sms_enabled

        import config
        importlib.reload(config)

        self._reset_state()

        from api.main import create_app
        from fastapi.testclient import TestClient
        self.app = create_app()
        self.client = TestClient(self.app)

    def tearDown(self):
        self._reset_state()
        shutil.rmtree(self.temp_dir, ignore_errors=True)
        for key in ENV_KEYS:
            os.environ.pop(key, None)

    @staticmethod
    def _reset_state():
        import api.dependencies as deps
        from api.routes import draft_routes, sms_routes
        deps._store = None
        draft_routes._drafts.clear()
        draft_routes._last_used.clear()
        sms_routes._relay = None

    def _create_product(self, name="4x6", price="50,000"):
        response = self.client.post("/api/products/create", json={"name": name, "price": price})
        self.assertEqual(response.status_code, 201)
        return response.json()

    def _finalized_order(self, deposit=0):
        product = self._create_product()
        draft = self.client.post("/api/drafts").json()
        base = f"/api/drafts/{draft['id']}"
        self.client.put(f"{base}/customer", json={"lastName": "Smith", "phone": "09123456789"})
        self.client.post(f"{base}/items", json={"productId": product["id"], "quantity": 2})
        self.client.put(f"{base}/deposit", json={"deposit": deposit})
        response = self.client.post(f"{base}/finalize")
        self.assertEqual(response.status_code, 200)
        return response.json()


class TestRootAndHealth(ApiTestCase):

    def test_root(self):
        response = self.client.get("/api")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["service"], "PhotoTools POS API")

    def test_health(self):
        data = self.client.get("/health").json()
        self.assertEqual(data["status"], "healthy")
        self.assertEqual(data["components"]["store"], "ok")
        self.assertEqual(data["components"]["sms"], "enabled")


class TestCollectionEndpoints(ApiTestCase):

    def test_empty_collections(self):
        self.assertEqual(self.client.get("/api/products").json(), [])
        self.assertEqual(self.client.get("/api/orders").json(), [])

    def test_replace_and_read(self):
        records = [{"id": "p1", "name": "3x4", "price": 20000}]
        response = self.client.post("/api/products", json=records)
        self.assertEqual(response.json(), {"success": True})
        self.assertEqual(self.client.get("/api/products").json(), records)

    def test_non_array_rejected(self):
        response = self.client.post("/api/orders", json={"id": "o1"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid data format"})

    def test_invalid_json_rejected(self):
        response = self.client.post(
            "/api/products", content="{oops", headers={"Content-Type": "application/json"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid JSON"})


class TestProductEndpoints(ApiTestCase):

    def test_create_validates(self):
        response = self.client.post("/api/products/create", json={"name": " ", "price": "1000"})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json(), {"error": "PRODUCT_NAME_REQUIRED"})

    def test_create_edit_delete(self):
        product = self._create_product()
        self.assertEqual(product["price"], 50000)

        response = self.client.patch(f"/api/products/{product['id']}", json={"price": "60000"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["price"], 60000)
        self.assertEqual(response.json()["name"], "4x6")

        response = self.client.patch(f"/api/products/{product['id']}", json={"price": "0"})
        self.assertEqual(response.json(), {"error": "PRICE_MUST_BE_POSITIVE"})

        self.assertEqual(self.client.delete(f"/api/products/{product['id']}").status_code, 200)
        self.assertEqual(self.client.get("/api/products").json(), [])
        self.assertEqual(self.client.delete(f"/api/products/{product['id']}").status_code, 404)

    def test_stored_raw_price(self):
        # Records written through the collection endpoint are not validated
        self.client.post("/api/products", json=[
            {"id": "s", "name": "string price", "price": "5000"},
            {"id": "n", "name": "null price", "price": None},
        ])
        response = self.client.patch("/api/products/s", json={"name": "renamed"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["price"], 5000)

        response = self.client.patch("/api/products/n", json={"name": "renamed"})
        self.assertEqual(response.json(), {"error": "PRICE_MUST_BE_POSITIVE"})

        draft = self.client.post("/api/drafts").json()
        response = self.client.post(f"/api/drafts/{draft['id']}/items", json={"productId": "n"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["totalAmount"], 0)

    def test_edit_keeps_other_records(self):
        others = [
            {"id": "a", "name": "3x4", "price": "20000", "note": "keep"},
            {"id": "b", "name": "4x6", "price": 50000},
        ]
        self.client.post("/api/products", json=others)
        self.client.patch("/api/products/b", json={"price": 60000})
        stored = self.client.get("/api/products").json()
        self.assertEqual(stored[0], others[0])
        self.assertEqual(stored[1]["price"], 60000)

    def test_sorted(self):
        self.client.post("/api/products", json=[
            {"id": "a", "name": "old", "price": 1, "updatedAt": "2024-01-01T00:00:00.000Z"},
            {"id": "b", "name": "new", "price": 1, "updatedAt": "2024-06-01T00:00:00.000Z"},
        ])
        names = [p["name"] for p in self.client.get("/api/products/sorted").json()]
        self.assertEqual(names, ["new", "old"])


class TestDraftEndpoints(ApiTestCase):

    def test_full_flow(self):
        order = self._finalized_order(deposit="40,000")
        self.assertEqual(order["totalAmount"], 100000)
        self.assertEqual(order["deposit"], 40000)
        self.assertEqual(order["remainingAmount"], 60000)

        stored = self.client.get("/api/orders").json()
        self.assertEqual(stored[0]["id"], order["id"])
        self.assertEqual(self.client.get(f"/api/drafts/{order['id']}").status_code, 404)

    def test_customer_validation(self):
        draft = self.client.post("/api/drafts").json()
        response = self.client.put(
            f"/api/drafts/{draft['id']}/customer", json={"lastName": "Smith", "phone": "123"}
        )
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json(), {"error": "PHONE_INVALID"})

    def test_merge_and_quantity_edit(self):
        product = self._create_product()
        draft = self.client.post("/api/drafts").json()
        base = f"/api/drafts/{draft['id']}"
        self.client.post(f"{base}/items", json={"productId": product["id"], "quantity": "2"})
        data = self.client.post(f"{base}/items", json={"productId": product["id"], "quantity": "3"}).json()
        self.assertEqual(len(data["items"]), 1)
        self.assertEqual(data["totalAmount"], 250000)

        item_id = data["items"][0]["id"]
        data = self.client.patch(f"{base}/items/{item_id}", json={"quantity": 1}).json()
        self.assertEqual(data["totalAmount"], 50000)
        data = self.client.delete(f"{base}/items/{item_id}").json()
        self.assertEqual(data["items"], [])

    def test_unknown_product(self):
        draft = self.client.post("/api/drafts").json()
        response = self.client.post(f"/api/drafts/{draft['id']}/items", json={"productId": "nope"})
        self.assertEqual(response.status_code, 404)

    def test_finalize_errors_keep_draft(self):
        draft = self.client.post("/api/drafts").json()
        response = self.client.post(f"/api/drafts/{draft['id']}/finalize")
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json(), {"error": "LAST_NAME_REQUIRED"})
        self.assertEqual(self.client.get(f"/api/drafts/{draft['id']}").status_code, 200)

    def test_deposit_exceeds_total(self):
        product = self._create_product()
        draft = self.client.post("/api/drafts").json()
        base = f"/api/drafts/{draft['id']}"
        self.client.put(f"{base}/customer", json={"lastName": "Smith", "phone": "09123456789"})
        self.client.post(f"{base}/items", json={"productId": product["id"]})
        self.client.put(f"{base}/deposit", json={"deposit": 90000})
        response = self.client.post(f"{base}/finalize")
        self.assertEqual(response.json(), {"error": "DEPOSIT_EXCEEDS_TOTAL"})

    def test_open_draft_cap(self):
        os.environ["DRAFT_MAX_OPEN"] = "2"
        import config
        importlib.reload(config)

        ids = [self.client.post("/api/drafts").json()["id"] for _ in range(2)]
        # Touching the first makes the second the least recently used
        self.client.get(f"/api/drafts/{ids[0]}")
        self.client.post("/api/drafts")

        self.assertEqual(self.client.get(f"/api/drafts/{ids[0]}").status_code, 200)
        self.assertEqual(self.client.get(f"/api/drafts/{ids[1]}").status_code, 404)

    def test_idle_draft_dropped(self):
        from api.routes import draft_routes
        idle = self.client.post("/api/drafts").json()["id"]
        active = self.client.post("/api/drafts").json()["id"]
        draft_routes._last_used[idle] = float("-inf")

        self.client.post("/api/drafts")

        self.assertEqual(self.client.get(f"/api/drafts/{idle}").status_code, 404)
        self.assertEqual(self.client.get(f"/api/drafts/{active}").status_code, 200)

    def test_discard(self):
        draft = self.client.post("/api/drafts").json()
        self.assertEqual(self.client.delete(f"/api/drafts/{draft['id']}").status_code, 200)
        self.assertEqual(self.client.delete(f"/api/drafts/{draft['id']}").status_code, 404)


class TestOrderEndpoints(ApiTestCase):

    LEGACY = {
        "id": "o1", "totalAmount": "500", "deposit": 0, "note": "keep",
        "customer": {"lastName": "A", "phone": "09123456789"},
    }
    CURRENT = {
        "id": "o2", "totalAmount": 1000, "deposit": 100, "remainingAmount": 900,
        "customer": {"lastName": "B", "phone": "09351234567"},
    }

    def test_settle(self):
        order = self._finalized_order(deposit=10000)
        response = self.client.post(f"/api/orders/{order['id']}/settle")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["deposit"], 100000)
        self.assertEqual(response.json()["remainingAmount"], 0)
        self.assertEqual(self.client.post("/api/orders/missing/settle").status_code, 404)

    def test_search_recent_and_delete(self):
        order = self._finalized_order()
        found = self.client.get("/api/orders/search", params={"phone": "+989123456789"}).json()
        self.assertEqual([o["id"] for o in found], [order["id"]])
        self.assertEqual(len(self.client.get("/api/orders/recent").json()), 1)

        self.assertEqual(self.client.delete(f"/api/orders/{order['id']}").status_code, 200)
        self.assertEqual(self.client.get("/api/orders").json(), [])

    def test_stats(self):
        self._finalized_order(deposit=30000)
        data = self.client.get("/api/stats").json()
        self.assertEqual(data["total_orders"], 1)
        self.assertEqual(data["today_orders"], 1)
        self.assertEqual(data["remaining_amount"], 70000)
        self.assertEqual(len(data["unpaid"]), 1)

    def test_settle_keeps_other_records(self):
        self.client.post("/api/orders", json=[self.LEGACY, self.CURRENT])
        response = self.client.post("/api/orders/o2/settle")
        self.assertEqual(response.status_code, 200)

        stored = self.client.get("/api/orders").json()
        self.assertEqual(stored[0], self.LEGACY)
        self.assertEqual(stored[1]["deposit"], 1000)
        self.assertEqual(stored[1]["remainingAmount"], 0)

    def test_delete_keeps_other_records(self):
        self.client.post("/api/orders", json=[self.LEGACY, self.CURRENT])
        self.assertEqual(self.client.delete("/api/orders/o2").status_code, 200)
        self.assertEqual(self.client.get("/api/orders").json(), [self.LEGACY])

    def test_failed_save_reported(self):
        from api.dependencies import get_store
        store = MagicMock()
        store.load.return_value = [dict(self.CURRENT)]
        store.save.return_value = False
        self.app.dependency_overrides[get_store] = lambda: store

        response = self.client.post("/api/orders/o2/settle")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Failed to save orders"})
        self.assertEqual(self.client.delete("/api/orders/o2").status_code, 500)

        response = self.client.post("/api/products/create", json={"name": "4x6", "price": "1000"})
        self.assertEqual(response.status_code, 500)

    def test_stats_with_string_amounts(self):
        self.client.post("/api/orders", json=[self.LEGACY, {**self.CURRENT, "remainingAmount": "900"}])
        response = self.client.get("/api/stats")
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total_revenue"], 1500)
        self.assertEqual(data["remaining_amount"], 1400)
        self.assertEqual([o["id"] for o in data["unpaid"]], ["o2", "o1"])


class TestExportEndpoints(ApiTestCase):

    def test_empty_export_rejected(self):
        response = self.client.get("/api/exports/orders.csv")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "No orders to export"})

    def test_json_export_import_round_trip(self):
        self._finalized_order()
        response = self.client.get("/api/exports/orders.json")
        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment", response.headers["content-disposition"])
        exported = response.content

        self.client.post("/api/orders", json=[])
        response = self.client.post("/api/imports/orders", content=exported)
        self.assertEqual(response.json(), {"success": True, "count": 1})
        self.assertEqual(self.client.get("/api/orders").json(), json.loads(exported))

    def test_csv_exports(self):
        self._finalized_order()
        response = self.client.get("/api/exports/orders.csv")
        self.assertTrue(response.content.startswith(b'\xef\xbb\xbf'))
        self.assertIn(b"id,date,lastName,phone,totalAmount,items", response.content)

        response = self.client.get("/api/exports/orders-summary.csv")
        self.assertIn(b"qty_4x6", response.content)
        self.assertIn('.csv"', response.headers["content-disposition"])

    def test_import_rejects_bad_payloads(self):
        response = self.client.post("/api/imports/products", content=b'{"id": 1}')
        self.assertEqual(response.json(), {"error": "Invalid data format"})
        response = self.client.post("/api/imports/products", content=b'{oops')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.post("/api/imports/customers", content=b'[]').status_code, 404)


class TestSmsEndpoint(ApiTestCase):

    def test_missing_fields(self):
        response = self.client.post("/api/send-sms", json={"userName": "shop"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Missing required fields"})

    def test_relayed(self):
        from api.routes import sms_routes
        from notifications.sms_relay import SmsRelay

        session = MagicMock()
        session.post.return_value.json.return_value = {"Result": 0}
        sms_routes._relay = SmsRelay(session=session)

        response = self.client.post("/api/send-sms", json={
            "userName": "shop", "password": "secret", "fromNumber": "3000",
            "toNumbers": "09123456789", "messageContent": "Ready",
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "response": {"Result": 0}})


class TestSmsDisabled(ApiTestCase):

    sms_enabled = "false"

    def test_forbidden(self):
        response = self.client.post("/api/send-sms", json={})
        self.assertEqual(response.status_code, 403)


if __name__ == '__main__':
    unittest.main()
