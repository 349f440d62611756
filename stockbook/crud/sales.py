from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from fastapi import HTTPException
from sqlalchemy.orm import Session

from stockbook.models import InventoryItem, Notification, SaleItem, SaleStatus
from stockbook.schemas.sales import SaleItemCreate
from stockbook.utils.stock_alerts import check_stock_level

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)


def stock_effect(lines: List[SaleItem], status: SaleStatus) -> Dict[int, int]:
    """Unidades que la venta retira del inventario, por producto. Las canceladas no retiran nada."""
    effect: Dict[int, int] = defaultdict(int)
    if status == SaleStatus.CANCELLED:
        return effect
    for line in lines:
        if line.product_id is not None:
            effect[line.product_id] += line.quantity
    return effect


def build_lines(db: Session, items_in: List[SaleItemCreate]) -> List[SaleItem]:
    """Crea las líneas con subtotal = cantidad x precio (el precio por omisión es el del inventario)."""
    lines = []
    for position, item_in in enumerate(items_in):
        product = db.query(InventoryItem).filter(InventoryItem.id == item_in.product).first()
        if not product:
            raise HTTPException(status_code=404, detail=f"Inventory item {item_in.product} not found")

        price = to_money(item_in.price if item_in.price is not None else product.price)
        lines.append(SaleItem(
            product_id=product.id,
            position=position,
            name=product.name,
            quantity=item_in.quantity,
            price=price,
            subtotal=to_money(price * item_in.quantity),
        ))
    return lines


def compute_total(lines: List[SaleItem]) -> Decimal:
    return sum((to_money(line.subtotal) for line in lines), Decimal("0.00"))


def apply_stock_delta(db: Session, delta: Dict[int, int]) -> List[Notification]:
    """
    Aplica el cambio de stock (positivo = salida, negativo = devolución).
    Valida todo antes de modificar para no dejar cambios a medias.
    """
    changes = {pid: qty for pid, qty in delta.items() if qty}
    if not changes:
        return []

    items = {
        item.id: item
        for item in db.query(InventoryItem).filter(InventoryItem.id.in_(changes.keys())).all()
    }

    for product_id, qty in changes.items():
        item = items.get(product_id)
        if item is None:
            # Producto eliminado: no hay stock que mover
            continue
        if qty > 0 and item.quantity < qty:
            raise HTTPException(
                status_code=400,
                detail=f"Insufficient stock for {item.name}. Available: {item.quantity}, requested: {qty}",
            )

    notifications = []
    for product_id, qty in changes.items():
        item = items.get(product_id)
        if item is None:
            continue
        previous = item.quantity
        item.quantity = previous - qty
        if qty > 0:
            notification = check_stock_level(db, item, previous)
            if notification is not None:
                notifications.append(notification)
    return notifications


def diff_effects(old: Dict[int, int], new: Dict[int, int]) -> Dict[int, int]:
    delta: Dict[int, int] = defaultdict(int)
    for product_id, qty in new.items():
        delta[product_id] += qty
    for product_id, qty in old.items():
        delta[product_id] -= qty
    return delta
