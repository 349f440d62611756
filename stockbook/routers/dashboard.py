#stockbook/routers/dashboard.py
from datetime import datetime, time, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.models import InventoryItem, Notification, Role, Sale, SaleItem, SaleStatus, User
from stockbook.schemas.common import DataResponse
from stockbook.schemas.dashboard import DashboardSummary, NotificationRead, TopSellingItem
from stockbook.schemas.inventory import InventoryItemRead
from stockbook.schemas.sales import SaleRead
from stockbook.crud.sales import to_money
from stockbook.security import get_current_user, require_roles

router = APIRouter()

LOW_STOCK_LIMIT = 10
RECENT_SALES_LIMIT = 5
TOP_SELLING_LIMIT = 5
NOTIFICATIONS_LIMIT = 50


def _sales_totals(db: Session, since: datetime):
    row = db.query(
        func.count(Sale.id).label("count"),
        func.sum(Sale.total).label("total"),
    ).filter(
        Sale.created_at >= since,
        Sale.status != SaleStatus.CANCELLED,
    ).first()
    return float(to_money(row.total or 0)), row.count or 0


@router.get("/summary", response_model=DataResponse[DashboardSummary])
def get_summary(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Tarjetas del dashboard: inventario, ventas de hoy / del mes y alertas."""
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    today_start = datetime.combine(now.date(), time.min)
    month_start = today_start.replace(day=1)

    # 1. Inventario
    inventory = db.query(
        func.count(InventoryItem.id).label("items"),
        func.sum(InventoryItem.quantity).label("quantity"),
        func.sum(InventoryItem.quantity * InventoryItem.price).label("value"),
    ).first()

    # 2. Alertas
    # Incluye los agotados (cantidad 0 siempre está en o bajo el nivel de reorden)
    low_stock_count = db.query(func.count(InventoryItem.id)).filter(
        InventoryItem.quantity <= InventoryItem.reorder_level,
    ).scalar()
    out_of_stock_count = db.query(func.count(InventoryItem.id)).filter(InventoryItem.quantity <= 0).scalar()

    # 3. Ventas
    today_total, today_count = _sales_totals(db, today_start)
    month_total, month_count = _sales_totals(db, month_start)

    return {
        "success": True,
        "data": {
            "total_items": inventory.items or 0,
            "total_quantity": inventory.quantity or 0,
            "total_inventory_value": float(to_money(inventory.value or 0)),
            "today_sales_total": today_total,
            "today_sales_count": today_count,
            "month_sales_total": month_total,
            "month_sales_count": month_count,
            "low_stock_count": low_stock_count or 0,
            "out_of_stock_count": out_of_stock_count or 0,
        },
    }


@router.get("/low-stock", response_model=DataResponse[List[InventoryItemRead]])
def get_low_stock(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = db.query(InventoryItem).filter(
        InventoryItem.quantity <= InventoryItem.reorder_level
    ).order_by(InventoryItem.quantity.asc(), InventoryItem.name.asc()).limit(LOW_STOCK_LIMIT).all()
    return {"success": True, "data": items}


@router.get("/recent-sales", response_model=DataResponse[List[SaleRead]])
def get_recent_sales(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sales = db.query(Sale).order_by(desc(Sale.created_at), desc(Sale.id)).limit(RECENT_SALES_LIMIT).all()
    return {"success": True, "data": sales}


@router.get("/top-selling", response_model=DataResponse[List[TopSellingItem]])
def get_top_selling(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    """Productos más vendidos por cantidad (sin ventas canceladas)."""
    total_qty = func.sum(SaleItem.quantity).label("qty")
    rows = db.query(
        SaleItem.product_id,
        func.max(SaleItem.name).label("name"),
        total_qty,
        func.sum(SaleItem.subtotal).label("revenue"),
    ).join(Sale).filter(
        Sale.status != SaleStatus.CANCELLED
    ).group_by(SaleItem.product_id).order_by(desc("qty"), SaleItem.product_id).limit(TOP_SELLING_LIMIT).all()

    skus = {}
    product_ids = [r.product_id for r in rows if r.product_id is not None]
    if product_ids:
        skus = dict(db.query(InventoryItem.id, InventoryItem.sku).filter(InventoryItem.id.in_(product_ids)).all())

    return {
        "success": True,
        "data": [
            {
                "item": {"id": r.product_id, "name": r.name, "sku": skus.get(r.product_id)},
                "total_quantity": int(r.qty or 0),
                "total_revenue": float(to_money(r.revenue or 0)),
            }
            for r in rows
        ],
    }


# --- NOTIFICACIONES ---
@router.get("/notifications", response_model=DataResponse[List[NotificationRead]])
def get_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notifications = db.query(Notification).order_by(
        desc(Notification.created_at), desc(Notification.id)
    ).limit(NOTIFICATIONS_LIMIT).all()
    return {"success": True, "data": notifications}


@router.put("/notifications/read-all")
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    updated = db.query(Notification).filter(Notification.read == False).update(
        {Notification.read: True}, synchronize_session=False
    )
    db.commit()
    return {"success": True, "data": {"updated": updated}}


@router.put("/notifications/{notification_id}/read", response_model=DataResponse[NotificationRead])
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    notification = db.query(Notification).filter(Notification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail=f"Notification {notification_id} not found")
    notification.read = True
    db.commit()
    db.refresh(notification)
    return {"success": True, "data": notification}
