import unittest

from starlette.websockets import WebSocketDisconnect

from stockbook.models import Role
from stockbook.security import create_user_token
from stockbook.utils.stock_alerts import notifier
from tests.helpers import ApiTestCase


class NotificationSocketTests(ApiTestCase):
    def test_invalid_token_is_rejected(self) -> None:
        with self.assertRaises(WebSocketDisconnect) as ctx:
            with self.client.websocket_connect("/ws/notifications?token=bogus") as ws:
                ws.receive_json()
        self.assertEqual(ctx.exception.code, 1008)

    def test_receives_stock_alerts(self) -> None:
        manager = self.make_user(Role.MANAGER)
        item = self.make_item(name="Mouse", quantity=10, reorder_level=3)
        token = create_user_token(manager)

        with self.client.websocket_connect(f"/ws/notifications?token={token}") as ws:
            self.assertEqual(notifier.subscriber_count, 1)
            res = self.client.put(
                f"/api/inventory/{item.id}",
                headers=self.headers_for(manager),
                json={"quantity": 0},
            )
            self.assertEqual(res.status_code, 200)

            message = ws.receive_json()
            self.assertEqual(message["event"], "outOfStock")
            self.assertEqual(message["data"]["item"], item.id)
            self.assertEqual(message["data"]["message"], "Mouse is out of stock")

        self.assertEqual(notifier.subscriber_count, 0)

    def test_closing_with_pending_events_unsubscribes(self) -> None:
        token = create_user_token(self.make_user())

        with self.assertLogs("stockbook.routers.realtime", level="INFO") as logs:
            with self.client.websocket_connect(f"/ws/notifications?token={token}"):
                notifier.publish({"event": "lowStock", "data": {"message": "Mouse is running low"}})
                notifier.publish({"event": "outOfStock", "data": {"message": "Mouse is out of stock"}})

        self.assertEqual(notifier.subscriber_count, 0)
        self.assertTrue(any("unsubscribed" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
