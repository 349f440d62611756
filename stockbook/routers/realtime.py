import asyncio
import logging

from fastapi import APIRouter, Depends, WebSocket, status
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.security import get_user_from_token
from stockbook.utils.stock_alerts import Subscription, notifier

logger = logging.getLogger(__name__)

router = APIRouter()


async def _forward_events(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        event = await subscription.get()
        await websocket.send_json(event)


@router.websocket("/ws/notifications")
async def notifications_socket(websocket: WebSocket, token: str = "", db: Session = Depends(get_db)):
    """Canal en tiempo real con eventos lowStock / outOfStock."""
    user = get_user_from_token(db, token)
    user_id = user.id if user else None
    # La conexión puede durar horas: liberamos la sesión en cuanto validamos el token
    db.close()

    if user_id is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # Suscribimos antes de aceptar para no perder eventos del primer instante
    subscription = notifier.subscribe()
    await websocket.accept()
    logger.info("User %s subscribed to notifications", user_id)

    forward = asyncio.create_task(_forward_events(websocket, subscription))
    try:
        # El cliente no envía nada útil; solo esperamos el cierre
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        forward.cancel()
        try:
            await forward
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning("Notification delivery to user %s failed: %s", user_id, e)
        notifier.unsubscribe(subscription)
        logger.info("User %s unsubscribed from notifications", user_id)
