import io
import unittest

import pandas as pd

from stockbook.models import InventoryItem, Notification, NotificationType, Role
from tests.helpers import ApiTestCase


class InventoryListTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user()
        self.headers = self.headers_for(self.user)
        self.make_item(name="Laptop", sku="LAP-1", category="Electronics", quantity=15, price=1299.99, reorder_level=5)
        self.make_item(name="Chair", sku="CHR-1", category="Furniture", quantity=3, price=249.99, reorder_level=3)
        self.make_item(name="Lamp", sku="LMP-1", category="Office Supplies", quantity=0, price=49.99, reorder_level=10,
                       supplier="Lighting Solutions Inc.")

    def test_list_defaults_to_newest_first(self) -> None:
        res = self.client.get("/api/inventory/", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        body = res.json()
        self.assertEqual(body["total"], 3)
        self.assertEqual(body["count"], 3)
        self.assertEqual(body["pagination"], {"page": 1, "limit": 10, "total": 3, "pages": 1})
        self.assertEqual([i["name"] for i in body["data"]], ["Lamp", "Chair", "Laptop"])

    def test_item_shape(self) -> None:
        res = self.client.get("/api/inventory/", headers=self.headers, params={"search": "lap"})
        item = res.json()["data"][0]
        self.assertEqual(item["sku"], "LAP-1")
        self.assertEqual(item["price"], 1299.99)
        self.assertEqual(item["reorderLevel"], 5)
        self.assertEqual(item["minimumStockLevel"], 5)
        self.assertEqual(item["stockStatus"], "in_stock")
        self.assertEqual(item["tags"], [])

    def test_filters(self) -> None:
        res = self.client.get("/api/inventory/", headers=self.headers, params={"category": "Furniture"})
        self.assertEqual([i["name"] for i in res.json()["data"]], ["Chair"])

        res = self.client.get("/api/inventory/", headers=self.headers, params={"lowStock": "true", "sort": "name"})
        self.assertEqual([i["name"] for i in res.json()["data"]], ["Chair", "Lamp"])

        res = self.client.get("/api/inventory/", headers=self.headers, params={"search": "lighting"})
        self.assertEqual([i["name"] for i in res.json()["data"]], ["Lamp"])

    def test_sort_and_pagination(self) -> None:
        res = self.client.get("/api/inventory/", headers=self.headers, params={"sort": "-price", "limit": 2})
        body = res.json()
        self.assertEqual([i["name"] for i in body["data"]], ["Laptop", "Chair"])
        self.assertEqual(body["pagination"]["pages"], 2)

        res = self.client.get("/api/inventory/", headers=self.headers, params={"sort": "-price", "limit": 2, "page": 2})
        self.assertEqual([i["name"] for i in res.json()["data"]], ["Lamp"])

    def test_invalid_sort_and_limit(self) -> None:
        res = self.client.get("/api/inventory/", headers=self.headers, params={"sort": "secret"})
        self.assertEqual(res.status_code, 400)

        res = self.client.get("/api/inventory/", headers=self.headers, params={"limit": 500})
        self.assertEqual(res.status_code, 422)

    def test_catalogs(self) -> None:
        res = self.client.get("/api/inventory/categories", headers=self.headers)
        self.assertIn("Electronics", res.json()["data"])
        res = self.client.get("/api/inventory/units", headers=self.headers)
        self.assertIn("piece", res.json()["data"])

    def test_requires_auth(self) -> None:
        res = self.client.get("/api/inventory/")
        self.assertEqual(res.status_code, 401)


class InventoryWriteTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.manager = self.make_user(Role.MANAGER)
        self.headers = self.headers_for(self.manager)

    def test_create_item_generates_sku(self) -> None:
        res = self.client.post("/api/inventory/", headers=self.headers, json={
            "name": "  Desk  ", "category": "Furniture", "quantity": 4, "price": 120.5, "minimumStockLevel": 2,
        })
        self.assertEqual(res.status_code, 201)
        data = res.json()["data"]
        self.assertEqual(data["name"], "Desk")
        self.assertEqual(data["sku"], f"SKU-{data['id']:06d}")
        self.assertEqual(data["reorderLevel"], 2)

    def test_create_validation(self) -> None:
        res = self.client.post("/api/inventory/", headers=self.headers, json={"name": "Bad", "quantity": -1})
        self.assertEqual(res.status_code, 422)

        res = self.client.post("/api/inventory/", headers=self.headers, json={"name": "Bad", "category": "Weapons"})
        self.assertEqual(res.status_code, 422)

        res = self.client.post("/api/inventory/", headers=self.headers, json={"name": "   "})
        self.assertEqual(res.status_code, 422)

    def test_duplicate_sku(self) -> None:
        self.make_item(sku="DUP-1")
        res = self.client.post("/api/inventory/", headers=self.headers, json={"name": "Other", "sku": "DUP-1"})
        self.assertEqual(res.status_code, 400)

    def test_plain_user_cannot_write(self) -> None:
        user = self.make_user()
        res = self.client.post("/api/inventory/", headers=self.headers_for(user), json={"name": "Nope"})
        self.assertEqual(res.status_code, 403)

    def test_update_item(self) -> None:
        item = self.make_item(name="Mouse", quantity=10, reorder_level=2)
        res = self.client.put(f"/api/inventory/{item.id}", headers=self.headers, json={"price": 19.99, "tags": ["usb"]})
        self.assertEqual(res.status_code, 200)
        data = res.json()["data"]
        self.assertEqual(data["price"], 19.99)
        self.assertEqual(data["tags"], ["usb"])
        self.assertEqual(data["quantity"], 10)

    def test_update_crossing_reorder_level_creates_notification(self) -> None:
        item = self.make_item(name="Mouse", quantity=10, reorder_level=2)
        self.client.put(f"/api/inventory/{item.id}", headers=self.headers, json={"quantity": 2})
        self.client.put(f"/api/inventory/{item.id}", headers=self.headers, json={"quantity": 1})
        self.client.put(f"/api/inventory/{item.id}", headers=self.headers, json={"quantity": 0})

        notifications = self.db.query(Notification).order_by(Notification.id).all()
        self.assertEqual(
            [n.type for n in notifications],
            [NotificationType.LOW_STOCK, NotificationType.OUT_OF_STOCK],
        )
        self.assertEqual(notifications[0].item_id, item.id)

    def test_delete_is_admin_only(self) -> None:
        item = self.make_item()
        res = self.client.delete(f"/api/inventory/{item.id}", headers=self.headers)
        self.assertEqual(res.status_code, 403)

        admin = self.make_user(Role.ADMIN)
        res = self.client.delete(f"/api/inventory/{item.id}", headers=self.headers_for(admin))
        self.assertEqual(res.status_code, 200)

        res = self.client.get(f"/api/inventory/{item.id}", headers=self.headers)
        self.assertEqual(res.status_code, 404)

    def test_delete_detaches_notifications(self) -> None:
        item = self.make_item(name="Mouse", quantity=10, reorder_level=2)
        self.client.put(f"/api/inventory/{item.id}", headers=self.headers, json={"quantity": 0})

        admin = self.make_user(Role.ADMIN)
        res = self.client.delete(f"/api/inventory/{item.id}", headers=self.headers_for(admin))
        self.assertEqual(res.status_code, 200)

        self.db.expire_all()
        notification = self.db.query(Notification).one()
        self.assertIsNone(notification.item_id)

    def test_generated_sku_skips_taken_code(self) -> None:
        res = self.client.post("/api/inventory/", headers=self.headers, json={"name": "A", "sku": "SKU-000002"})
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["data"]["id"], 1)

        res = self.client.post("/api/inventory/", headers=self.headers, json={"name": "B"})
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.json()["data"]["sku"], "SKU-000002-2")


class InventorySpreadsheetTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.manager = self.make_user(Role.MANAGER)
        self.headers = self.headers_for(self.manager)

    def test_export_csv(self) -> None:
        self.make_item(name="Laptop", sku="LAP-1", tags=["work", "pc"])
        res = self.client.get("/api/inventory/export", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.headers["content-type"].startswith("text/csv"))

        df = pd.read_csv(io.BytesIO(res.content))
        self.assertEqual(list(df["SKU"]), ["LAP-1"])
        self.assertEqual(df.loc[0, "Tags"], "work, pc")

    def test_export_xlsx(self) -> None:
        self.make_item(name="Laptop", sku="LAP-1")
        res = self.client.get("/api/inventory/export", headers=self.headers, params={"format": "xlsx"})
        self.assertEqual(res.status_code, 200)
        df = pd.read_excel(io.BytesIO(res.content), engine="openpyxl")
        self.assertEqual(list(df["Name"]), ["Laptop"])

    def test_import_creates_updates_and_counts_failures(self) -> None:
        existing = self.make_item(name="Old Laptop", sku="LAP-1", quantity=1)
        csv = (
            "SKU,Name,Category,Quantity,Price,Reorder Level,Tags\n"
            "LAP-1,Laptop,Electronics,20,999.5,5,\"work, pc\"\n"
            "NEW-1,Keyboard,Electronics,7,25,2,\n"
            "BAD-1,Broken,Weapons,1,1,0,\n"
        )
        res = self.client.post(
            "/api/inventory/import",
            headers=self.headers,
            files={"file": ("inventory.csv", csv.encode("utf-8"), "text/csv")},
        )
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"success": True, "created": 1, "updated": 1, "failed": 1})

        updated = self.reload(existing)
        self.assertEqual(updated.name, "Laptop")
        self.assertEqual(updated.quantity, 20)
        self.assertEqual(updated.tags, ["work", "pc"])
        self.assertIsNotNone(self.db.query(InventoryItem).filter(InventoryItem.sku == "NEW-1").first())
        self.assertIsNone(self.db.query(InventoryItem).filter(InventoryItem.sku == "BAD-1").first())

    def test_import_rejects_unknown_format(self) -> None:
        res = self.client.post(
            "/api/inventory/import",
            headers=self.headers,
            files={"file": ("inventory.txt", b"hello", "text/plain")},
        )
        self.assertEqual(res.status_code, 400)


if __name__ == "__main__":
    unittest.main()
