"""
Alertas de stock bajo / agotado.

Las alertas se guardan como `Notification` y, una vez confirmada la
transacción, se publican a los suscriptores del canal en tiempo real
(`/ws/notifications`). El notificador no depende de un event loop propio:
cada suscriptor registra su loop y la publicación usa
`call_soon_threadsafe`, así funciona desde endpoints síncronos (threadpool),
desde tareas async y desde scripts.
"""
import asyncio
import logging
import threading
from typing import List, Optional

from sqlalchemy.orm import Session

from stockbook.models import InventoryItem, Notification, NotificationType
from stockbook.schemas.dashboard import NotificationRead

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, loop: asyncio.AbstractEventLoop):
        self.loop = loop
        self.queue: "asyncio.Queue[dict]" = asyncio.Queue()

    async def get(self) -> dict:
        return await self.queue.get()


class Notifier:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: List[Subscription] = []

    def subscribe(self) -> Subscription:
        subscription = Subscription(asyncio.get_running_loop())
        with self._lock:
            self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def publish(self, event: dict) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            if subscription.loop.is_closed():
                self.unsubscribe(subscription)
                continue
            subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, event)


notifier = Notifier()


def check_stock_level(db: Session, item: InventoryItem, previous_quantity: Optional[int]) -> Optional[Notification]:
    """
    Registra una notificación si la cantidad acaba de cruzar al estado
    agotado o de stock bajo. No hace commit.
    """
    quantity = item.quantity
    if quantity <= 0:
        if previous_quantity is not None and previous_quantity <= 0:
            return None
        notif_type = NotificationType.OUT_OF_STOCK
        message = f"{item.name} is out of stock"
    elif quantity <= item.reorder_level:
        if previous_quantity is not None and 0 < previous_quantity <= item.reorder_level:
            return None
        notif_type = NotificationType.LOW_STOCK
        message = f"{item.name} is running low on stock ({quantity} left, reorder level {item.reorder_level})"
    else:
        return None

    notification = Notification(type=notif_type, message=message, item_id=item.id)
    db.add(notification)
    logger.info("Stock alert for item %s: %s", item.id, notif_type.value)
    return notification


def publish_notifications(notifications: List[Notification]) -> None:
    """Publica notificaciones ya confirmadas (con id asignado)."""
    for notification in notifications:
        payload = NotificationRead.model_validate(notification).model_dump(mode="json", by_alias=True)
        notifier.publish({"event": notification.type.value, "data": payload})
