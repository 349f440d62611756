from sqlalchemy.orm import Session
from sqlalchemy import func
from stockbook.models import Sale

INVOICE_PREFIX = "INV"


def get_next_invoice_number(db: Session, prefix: str = INVOICE_PREFIX) -> str:
    """
    Obtiene el siguiente número de factura consecutivo (INV-000001, INV-000002...).
    Toma el mayor número existente con el prefijo y le suma 1.
    """
    last = db.query(func.max(Sale.invoice_number)).filter(
        Sale.invoice_number.like(f"{prefix}-%")
    ).scalar()

    next_number = 1
    if last:
        next_number = int(last.split("-", 1)[1]) + 1
    return f"{prefix}-{next_number:06d}"
