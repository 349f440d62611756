from typing import Optional
from sqlalchemy.orm import Session
from stockbook.models import InventoryItem, Notification, SaleItem


def get_item(db: Session, item_id: int) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.id == item_id).first()


def get_item_by_sku(db: Session, sku: str) -> Optional[InventoryItem]:
    return db.query(InventoryItem).filter(InventoryItem.sku == sku).first()


def sku_taken(db: Session, sku: Optional[str], exclude_id: Optional[int] = None) -> bool:
    if not sku:
        return False
    query = db.query(InventoryItem.id).filter(InventoryItem.sku == sku)
    if exclude_id is not None:
        query = query.filter(InventoryItem.id != exclude_id)
    return query.first() is not None


def default_sku(db: Session, item: InventoryItem) -> str:
    """SKU-000001 a partir del id; si ya lo usa otro artículo se agrega un sufijo libre."""
    base = f"SKU-{item.id:06d}"
    sku = base
    suffix = 1
    while sku_taken(db, sku, exclude_id=item.id):
        suffix += 1
        sku = f"{base}-{suffix}"
    return sku


def create_item(db: Session, data: dict, created_by_id: Optional[int] = None) -> InventoryItem:
    """
    Inserta el artículo; si no trae SKU se genera a partir del id.
    No hace commit.
    """
    item = InventoryItem(created_by_id=created_by_id, **data)
    db.add(item)
    db.flush()  # Para obtener el ID
    if not item.sku:
        item.sku = default_sku(db, item)
        db.flush()
    return item


def delete_item(db: Session, item: InventoryItem) -> None:
    """
    Elimina el artículo y desliga las líneas de venta y notificaciones que lo
    referencian (SQLite no aplica ON DELETE SET NULL y reutiliza ids).
    No hace commit.
    """
    db.query(SaleItem).filter(SaleItem.product_id == item.id).update(
        {SaleItem.product_id: None}, synchronize_session=False
    )
    db.query(Notification).filter(Notification.item_id == item.id).update(
        {Notification.item_id: None}, synchronize_session=False
    )
    db.delete(item)
