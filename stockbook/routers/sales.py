# stockbook/routers/sales.py
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.models import Role, Sale, SaleStatus, User
from stockbook.schemas.common import DataResponse, ListResponse
from stockbook.schemas.sales import SaleCreate, SaleRead, SalesStats, SaleUpdate
from stockbook.crud.sales import apply_stock_delta, build_lines, compute_total, diff_effects, stock_effect, to_money
from stockbook.security import get_current_user, require_roles
from stockbook.utils.folios import get_next_invoice_number
from stockbook.utils.listing import MAX_PAGE_SIZE, apply_sort, list_payload, paginate
from stockbook.utils.pdf_generator import generate_invoice_pdf
from stockbook.utils.stock_alerts import publish_notifications

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_COLUMNS = {
    "createdAt": Sale.created_at,
    "total": Sale.total,
    "customer": Sale.customer,
    "status": Sale.status,
    "invoiceNumber": Sale.invoice_number,
}

PERIOD_DAYS = {"day": 1, "week": 7, "month": 30, "year": 365}


def _utc_now() -> datetime:
    # Las fechas se guardan en UTC sin zona (CURRENT_TIMESTAMP)
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _get_sale_or_404(db: Session, sale_id: int) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise HTTPException(status_code=404, detail=f"Sale {sale_id} not found")
    return sale


# --- 1. LISTAR ---
@router.get("/", response_model=ListResponse[SaleRead])
def read_sales(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    status_filter: Optional[SaleStatus] = Query(None, alias="status"),
    search: str = "",
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    sort: str = "-createdAt",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(Sale)
    if status_filter is not None:
        query = query.filter(Sale.status == status_filter)
    if search:
        query = query.filter(Sale.customer.ilike(f"%{search.strip()}%"))
    if start_date:
        query = query.filter(Sale.created_at >= _day_start(start_date))
    if end_date:
        query = query.filter(Sale.created_at < _day_start(end_date + timedelta(days=1)))

    query = apply_sort(query, sort, SORT_COLUMNS, Sale.id)
    sales, pagination = paginate(query, page, limit)
    return list_payload(sales, pagination)


# --- 2. ESTADÍSTICAS ---
@router.get("/stats", response_model=DataResponse[SalesStats])
def read_sales_stats(
    period: str = Query("month", pattern="^(day|week|month|year)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Totales del periodo (últimos N días, incluyendo hoy). Las ventas canceladas no suman."""
    end_day = _utc_now().date()
    start_day = end_day - timedelta(days=PERIOD_DAYS[period] - 1)
    since = _day_start(start_day)

    in_period = db.query(Sale).filter(Sale.created_at >= since)
    active = in_period.filter(Sale.status != SaleStatus.CANCELLED)

    totals = active.with_entities(
        func.count(Sale.id).label("count"),
        func.sum(Sale.total).label("total"),
    ).first()
    count = totals.count or 0
    revenue = to_money(totals.total or 0)

    by_status = {s.value: 0 for s in SaleStatus}
    for sale_status, n in in_period.with_entities(Sale.status, func.count(Sale.id)).group_by(Sale.status).all():
        by_status[sale_status.value] = n

    by_payment = {
        method.value: float(to_money(total or 0))
        for method, total in active.with_entities(Sale.payment_method, func.sum(Sale.total)).group_by(Sale.payment_method).all()
    }

    day_col = func.date(Sale.created_at)
    daily = [
        {"date": day, "total": float(to_money(total or 0)), "count": n}
        for day, total, n in active.with_entities(day_col, func.sum(Sale.total), func.count(Sale.id))
        .group_by(day_col)
        .order_by(day_col)
        .all()
    ]

    return {
        "success": True,
        "data": {
            "period": period,
            "start_date": start_day,
            "end_date": end_day,
            "total_revenue": float(revenue),
            "sales_count": count,
            "average_sale": float(to_money(revenue / count)) if count else 0.0,
            "by_status": by_status,
            "by_payment_method": by_payment,
            "daily": daily,
        },
    }


# --- 3. LEER POR ID ---
@router.get("/{sale_id}", response_model=DataResponse[SaleRead])
def read_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": _get_sale_or_404(db, sale_id)}


# --- 4. CREAR ---
@router.post("/", response_model=DataResponse[SaleRead], status_code=status.HTTP_201_CREATED)
def create_sale(
    sale_in: SaleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Registra la venta y descuenta el stock.
    El total siempre se recalcula a partir de las líneas.
    """
    lines = build_lines(db, sale_in.items)
    notifications = apply_stock_delta(db, stock_effect(lines, sale_in.status))

    sale = Sale(
        invoice_number=get_next_invoice_number(db),
        customer=sale_in.customer,
        items=lines,
        total=compute_total(lines),
        payment_method=sale_in.payment_method,
        status=sale_in.status,
        notes=sale_in.notes,
        created_by_id=current_user.id,
    )
    db.add(sale)
    db.commit()
    db.refresh(sale)

    publish_notifications(notifications)
    logger.info("Sale %s created by user %s, total %s", sale.invoice_number, current_user.id, sale.total)
    return {"success": True, "data": sale}


# --- 5. ACTUALIZAR ---
@router.put("/{sale_id}", response_model=DataResponse[SaleRead])
def update_sale(
    sale_id: int,
    sale_in: SaleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    """Revierte el efecto de stock anterior y aplica el nuevo (líneas y/o estatus)."""
    sale = _get_sale_or_404(db, sale_id)
    old_effect = stock_effect(sale.items, sale.status)

    new_lines = build_lines(db, sale_in.items) if sale_in.items is not None else None
    new_status = sale_in.status or sale.status
    new_effect = stock_effect(new_lines if new_lines is not None else sale.items, new_status)

    notifications = apply_stock_delta(db, diff_effects(old_effect, new_effect))

    if new_lines is not None:
        sale.items = new_lines
        sale.total = compute_total(new_lines)
    sale.status = new_status
    if sale_in.customer is not None:
        sale.customer = sale_in.customer
    if sale_in.payment_method is not None:
        sale.payment_method = sale_in.payment_method
    if "notes" in sale_in.model_fields_set:
        sale.notes = sale_in.notes

    db.commit()
    db.refresh(sale)

    publish_notifications(notifications)
    logger.info("Sale %s updated by user %s", sale.invoice_number, current_user.id)
    return {"success": True, "data": sale}


# --- 6. ELIMINAR (devuelve el stock) ---
@router.delete("/{sale_id}")
def delete_sale(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    sale = _get_sale_or_404(db, sale_id)
    apply_stock_delta(db, diff_effects(stock_effect(sale.items, sale.status), {}))
    db.delete(sale)
    db.commit()
    logger.info("Sale %s deleted by user %s", sale_id, current_user.id)
    return {"success": True, "data": {}}


# --- 7. FACTURA PDF ---
@router.get("/{sale_id}/invoice")
def download_invoice(
    sale_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    sale = _get_sale_or_404(db, sale_id)
    pdf_bytes = generate_invoice_pdf(sale)
    filename = f"invoice-{sale.invoice_number or sale.id}.pdf"
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
