# stockbook/routers/inventory.py
import io
import logging

import pandas as pd
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import StreamingResponse
from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from stockbook.database import get_db
from stockbook.models import CATEGORIES, UNITS, InventoryItem, Role, User
from stockbook.schemas.common import DataResponse, ListResponse
from stockbook.schemas.inventory import (
    ImportResult, InventoryItemCreate, InventoryItemRead, InventoryItemUpdate,
)
from stockbook.crud.inventory import create_item, delete_item, get_item, get_item_by_sku, sku_taken
from stockbook.security import get_current_user, require_roles
from stockbook.utils.listing import MAX_PAGE_SIZE, apply_sort, list_payload, paginate
from stockbook.utils.stock_alerts import check_stock_level, publish_notifications

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_COLUMNS = {
    "name": InventoryItem.name,
    "sku": InventoryItem.sku,
    "category": InventoryItem.category,
    "quantity": InventoryItem.quantity,
    "price": InventoryItem.price,
    "cost": InventoryItem.cost,
    "reorderLevel": InventoryItem.reorder_level,
    "createdAt": InventoryItem.created_at,
    "updatedAt": InventoryItem.updated_at,
}

# Columnas de la hoja de cálculo (exportación/importación)
SHEET_COLUMNS = [
    ("SKU", "sku"),
    ("Name", "name"),
    ("Category", "category"),
    ("Description", "description"),
    ("Quantity", "quantity"),
    ("Unit", "unit"),
    ("Price", "price"),
    ("Cost", "cost"),
    ("Supplier", "supplier"),
    ("Reorder Level", "reorder_level"),
    ("Tags", "tags"),
]


# -----------------------------
# Helpers
# -----------------------------
def _get_item_or_404(db: Session, item_id: int) -> InventoryItem:
    item = get_item(db, item_id)
    if not item:
        raise HTTPException(status_code=404, detail=f"Inventory item {item_id} not found")
    return item


def _normalize_column(name) -> str:
    return "".join(ch for ch in str(name).lower() if ch.isalnum())


def _cell(row, key: str):
    """Valor de la celda o None si está vacía / NaN."""
    val = row.get(key)
    if val is None:
        return None
    if isinstance(val, float) and pd.isna(val):
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val or val.lower() == "nan":
            return None
    return val


def _row_to_fields(row) -> dict:
    fields = {}
    for _, attr in SHEET_COLUMNS:
        val = _cell(row, _normalize_column(attr))
        if val is None:
            continue
        if attr == "tags":
            val = [t.strip() for t in str(val).split(",") if t.strip()]
        elif attr in ("quantity", "reorder_level"):
            val = int(float(val))
        elif attr in ("price", "cost"):
            val = float(val)
        else:
            val = str(val)
        fields[attr] = val
    return fields


# -----------------------------
# 0. Catálogos
# -----------------------------
@router.get("/categories")
def read_categories(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": CATEGORIES}


@router.get("/units")
def read_units(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": UNITS}


# -----------------------------
# 1. Listar
# -----------------------------
@router.get("/", response_model=ListResponse[InventoryItemRead])
def read_inventory(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_SIZE),
    search: str = "",
    category: str = "",
    low_stock: bool = Query(False, alias="lowStock"),
    sort: str = "-createdAt",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    query = db.query(InventoryItem)

    if search:
        s = f"%{search.strip()}%"
        query = query.filter(
            or_(
                InventoryItem.name.ilike(s),
                InventoryItem.sku.ilike(s),
                InventoryItem.description.ilike(s),
                InventoryItem.supplier.ilike(s),
            )
        )
    if category:
        query = query.filter(InventoryItem.category == category)
    if low_stock:
        query = query.filter(InventoryItem.quantity <= InventoryItem.reorder_level)

    query = apply_sort(query, sort, SORT_COLUMNS, InventoryItem.id)
    items, pagination = paginate(query, page, limit)
    return list_payload(items, pagination)


# -----------------------------
# 2. Exportar (CSV / Excel)
# -----------------------------
@router.get("/export")
def export_inventory(
    format: str = Query("csv", pattern="^(csv|xlsx)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items = db.query(InventoryItem).order_by(InventoryItem.name.asc(), InventoryItem.id.asc()).all()

    data = []
    for item in items:
        row = {}
        for header, attr in SHEET_COLUMNS:
            val = getattr(item, attr)
            if attr == "tags":
                val = ", ".join(val or [])
            elif attr in ("price", "cost"):
                val = float(val or 0)
            row[header] = val
        data.append(row)

    df = pd.DataFrame(data, columns=[header for header, _ in SHEET_COLUMNS])

    output = io.BytesIO()
    if format == "xlsx":
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Inventory")
        media_type = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    else:
        output.write(df.to_csv(index=False).encode("utf-8"))
        media_type = "text/csv"
    output.seek(0)

    headers = {"Content-Disposition": f'attachment; filename="inventory.{format}"'}
    return StreamingResponse(output, media_type=media_type, headers=headers)


# -----------------------------
# 3. Carga masiva
# -----------------------------
@router.post("/import", response_model=ImportResult)
async def import_inventory(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    filename = (file.filename or "").lower()
    is_csv = filename.endswith(".csv")
    is_excel = filename.endswith((".xlsx", ".xlsm"))
    if not (is_csv or is_excel):
        raise HTTPException(status_code=400, detail="Invalid file format. Use CSV or Excel (.xlsx).")

    contents = await file.read()
    if not contents:
        raise HTTPException(status_code=400, detail="Empty file")

    try:
        if is_csv:
            df = pd.read_csv(io.BytesIO(contents))
        else:
            df = pd.read_excel(io.BytesIO(contents), engine="openpyxl")
    except (ValueError, pd.errors.ParserError) as e:
        raise HTTPException(status_code=400, detail=f"Could not read file: {e}")

    df.columns = [_normalize_column(c) for c in df.columns]

    created_count = 0
    updated_count = 0
    failed_count = 0
    notifications = []

    for index, row in df.iterrows():
        try:
            fields = _row_to_fields(row)
            if not fields:
                continue

            # Validamos la fila completa antes de tocar la sesión
            existing = get_item_by_sku(db, fields["sku"]) if fields.get("sku") else None
            if existing:
                changes = InventoryItemUpdate(**fields).model_dump(exclude_unset=True)
            else:
                data = InventoryItemCreate(**fields).model_dump()
        except (ValidationError, ValueError) as e:
            logger.warning("Import row %s failed: %s", index + 2, e)
            failed_count += 1
            continue

        if existing:
            previous = existing.quantity
            for field, value in changes.items():
                setattr(existing, field, value)
            item = existing
            updated_count += 1
        else:
            item = create_item(db, data, created_by_id=current_user.id)
            previous = None
            created_count += 1

        if item.quantity != previous:
            notification = check_stock_level(db, item, previous)
            if notification is not None:
                notifications.append(notification)

    db.commit()
    publish_notifications(notifications)
    logger.info("Inventory import: %s created, %s updated, %s failed", created_count, updated_count, failed_count)
    return {"success": True, "created": created_count, "updated": updated_count, "failed": failed_count}


# -----------------------------
# 4. CRUD
# -----------------------------
@router.get("/{item_id}", response_model=DataResponse[InventoryItemRead])
def read_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {"success": True, "data": _get_item_or_404(db, item_id)}


@router.post("/", response_model=DataResponse[InventoryItemRead], status_code=status.HTTP_201_CREATED)
def create_inventory_item(
    item_in: InventoryItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    if sku_taken(db, item_in.sku):
        raise HTTPException(status_code=400, detail=f"SKU '{item_in.sku}' already exists")

    item = create_item(db, item_in.model_dump(), created_by_id=current_user.id)
    notification = check_stock_level(db, item, None)
    db.commit()
    db.refresh(item)

    if notification is not None:
        publish_notifications([notification])
    logger.info("Created inventory item %s (%s)", item.id, item.sku)
    return {"success": True, "data": item}


@router.put("/{item_id}", response_model=DataResponse[InventoryItemRead])
def update_inventory_item(
    item_id: int,
    item_in: InventoryItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN, Role.MANAGER)),
):
    item = _get_item_or_404(db, item_id)
    update_data = item_in.model_dump(exclude_unset=True)

    if update_data.get("sku") and sku_taken(db, update_data["sku"], exclude_id=item_id):
        raise HTTPException(status_code=400, detail=f"SKU '{update_data['sku']}' already exists")

    previous = item.quantity
    for field, value in update_data.items():
        # name/category/unit no aceptan null; el resto sí se puede limpiar
        if value is None and field in ("name", "category", "unit", "quantity", "price", "cost", "reorder_level", "tags", "sku"):
            continue
        setattr(item, field, value)

    notification = None
    if item.quantity != previous:
        notification = check_stock_level(db, item, previous)

    db.commit()
    db.refresh(item)
    if notification is not None:
        publish_notifications([notification])
    logger.info("Updated inventory item %s", item_id)
    return {"success": True, "data": item}


@router.delete("/{item_id}")
def delete_inventory_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(Role.ADMIN)),
):
    item = _get_item_or_404(db, item_id)
    delete_item(db, item)
    db.commit()
    logger.info("Deleted inventory item %s", item_id)
    return {"success": True, "data": {}}
