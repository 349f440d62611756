from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import Field, field_validator

from stockbook.models import PaymentMethod, SaleStatus
from stockbook.schemas.common import CamelModel


def _clean_customer(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("Customer name is required")
    return value


# --- Entrada ---
class SaleItemCreate(CamelModel):
    product: int
    quantity: int = Field(ge=1)
    # Si no se envía, se toma el precio actual del inventario
    price: Optional[float] = Field(default=None, ge=0)


class SaleCreate(CamelModel):
    customer: str
    items: List[SaleItemCreate] = Field(min_length=1)
    payment_method: PaymentMethod = PaymentMethod.CASH
    status: SaleStatus = SaleStatus.COMPLETED
    notes: Optional[str] = None

    check_customer = field_validator("customer")(_clean_customer)


class SaleUpdate(CamelModel):
    customer: Optional[str] = None
    items: Optional[List[SaleItemCreate]] = Field(default=None, min_length=1)
    payment_method: Optional[PaymentMethod] = None
    status: Optional[SaleStatus] = None
    notes: Optional[str] = None

    check_customer = field_validator("customer")(_clean_customer)


# --- Salida ---
class SaleItemRead(CamelModel):
    product_id: Optional[int] = Field(default=None, serialization_alias="product")
    name: str
    quantity: int
    price: float
    subtotal: float


class SaleRead(CamelModel):
    id: int
    invoice_number: Optional[str] = None
    customer: str
    items: List[SaleItemRead] = []
    total: float
    payment_method: PaymentMethod
    status: SaleStatus
    notes: Optional[str] = None
    created_by_id: Optional[int] = Field(default=None, serialization_alias="createdBy")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DailySales(CamelModel):
    date: date
    total: float
    count: int


class SalesStats(CamelModel):
    period: str
    start_date: date
    end_date: date
    total_revenue: float
    sales_count: int
    average_sale: float
    by_status: Dict[str, int]
    by_payment_method: Dict[str, float]
    daily: List[DailySales]
