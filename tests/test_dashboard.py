import unittest

from stockbook.models import Notification, NotificationType, Role
from tests.helpers import ApiTestCase


class DashboardTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user()
        self.manager = self.make_user(Role.MANAGER)
        self.laptop = self.make_item(name="Laptop", quantity=10, price=1000, reorder_level=3)
        self.mouse = self.make_item(name="Mouse", quantity=4, price=20, reorder_level=5)
        self.cable = self.make_item(name="Cable", quantity=0, price=5, reorder_level=2)

    def sell(self, item, quantity, **fields):
        payload = {"customer": "ACME", "items": [{"product": item.id, "quantity": quantity}]}
        payload.update(fields)
        res = self.client.post("/api/sales/", headers=self.headers_for(self.user), json=payload)
        self.assertEqual(res.status_code, 201)
        return res.json()["data"]

    def test_summary(self) -> None:
        self.sell(self.laptop, 1)
        self.sell(self.mouse, 2)
        self.sell(self.laptop, 1, status="Cancelled")

        res = self.client.get("/api/dashboard/summary", headers=self.headers_for(self.user))
        self.assertEqual(res.status_code, 200)
        data = res.json()["data"]
        self.assertEqual(data["totalItems"], 3)
        self.assertEqual(data["totalQuantity"], 11)
        self.assertEqual(data["totalInventoryValue"], 9040.0)
        self.assertEqual(data["todaySalesCount"], 2)
        self.assertEqual(data["todaySalesTotal"], 1040.0)
        self.assertEqual(data["monthSalesCount"], 2)
        self.assertEqual(data["lowStockCount"], 2)
        self.assertEqual(data["outOfStockCount"], 1)

    def test_low_stock_list(self) -> None:
        res = self.client.get("/api/dashboard/low-stock", headers=self.headers_for(self.user))
        self.assertEqual([i["name"] for i in res.json()["data"]], ["Cable", "Mouse"])

    def test_recent_sales(self) -> None:
        first = self.sell(self.laptop, 1)
        second = self.sell(self.laptop, 1)
        res = self.client.get("/api/dashboard/recent-sales", headers=self.headers_for(self.user))
        self.assertEqual([s["id"] for s in res.json()["data"]], [second["id"], first["id"]])

    def test_top_selling(self) -> None:
        self.sell(self.laptop, 1)
        self.sell(self.mouse, 3)
        self.sell(self.laptop, 5, status="Cancelled")

        res = self.client.get("/api/dashboard/top-selling", headers=self.headers_for(self.user))
        self.assertEqual(res.status_code, 403)

        res = self.client.get("/api/dashboard/top-selling", headers=self.headers_for(self.manager))
        self.assertEqual(res.status_code, 200)
        data = res.json()["data"]
        self.assertEqual(data[0]["item"]["name"], "Mouse")
        self.assertEqual(data[0]["totalQuantity"], 3)
        self.assertEqual(data[0]["totalRevenue"], 60.0)
        self.assertEqual(data[1]["item"]["id"], self.laptop.id)
        self.assertEqual(data[1]["totalQuantity"], 1)


class NotificationTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.make_user()
        self.headers = self.headers_for(self.user)
        item = self.make_item(name="Mouse")
        for i, notif_type in enumerate([NotificationType.LOW_STOCK, NotificationType.OUT_OF_STOCK]):
            self.db.add(Notification(type=notif_type, message=f"alert {i}", item_id=item.id))
        self.db.commit()

    def test_list_notifications(self) -> None:
        res = self.client.get("/api/dashboard/notifications", headers=self.headers)
        data = res.json()["data"]
        self.assertEqual(len(data), 2)
        self.assertEqual(data[0]["message"], "alert 1")
        self.assertEqual(data[0]["type"], "outOfStock")
        self.assertFalse(data[0]["read"])
        self.assertIn("item", data[0])

    def test_mark_one_and_all_read(self) -> None:
        first_id = self.db.query(Notification).order_by(Notification.id).first().id
        res = self.client.put(f"/api/dashboard/notifications/{first_id}/read", headers=self.headers)
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()["data"]["read"])

        res = self.client.put("/api/dashboard/notifications/read-all", headers=self.headers)
        self.assertEqual(res.json()["data"]["updated"], 1)

        self.db.expire_all()
        self.assertEqual(self.db.query(Notification).filter(Notification.read == False).count(), 0)

    def test_mark_unknown_notification(self) -> None:
        res = self.client.put("/api/dashboard/notifications/999/read", headers=self.headers)
        self.assertEqual(res.status_code, 404)


if __name__ == "__main__":
    unittest.main()
