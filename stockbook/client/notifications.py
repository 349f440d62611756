from typing import List

from .base import ApiSession, Store

STOCK_EVENTS = ("lowStock", "outOfStock")


class NotificationStore(Store):
    def __init__(self, api: ApiSession):
        super().__init__(api)
        self.notifications: List[dict] = []
        self.unread_count = 0

    def fetch(self):
        def call():
            self.notifications = self.api.get("/api/dashboard/notifications")["data"]
            self.unread_count = sum(1 for n in self.notifications if not n["read"])
            return self.notifications

        return self._run("Fetch notifications", call)

    def mark_as_read(self, notification_id: int):
        def call():
            updated = self.api.put(f"/api/dashboard/notifications/{notification_id}/read")["data"]
            was_unread = False
            for n in self.notifications:
                if n["id"] == notification_id:
                    was_unread = not n["read"]
                    n["read"] = True
            if was_unread:
                self.unread_count = max(0, self.unread_count - 1)
            return updated

        return self._run("Mark notification as read", call)

    def mark_all_as_read(self) -> bool:
        def call():
            self.api.put("/api/dashboard/notifications/read-all")
            for n in self.notifications:
                n["read"] = True
            self.unread_count = 0
            return True

        return self._run("Mark all notifications as read", call, failed=False)

    def handle_event(self, message: dict) -> bool:
        """Mensaje del websocket: una alerta de stock recarga la lista."""
        if message.get("event") not in STOCK_EVENTS:
            return False
        self.fetch()
        return True
