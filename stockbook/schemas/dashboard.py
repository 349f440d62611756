from datetime import datetime
from typing import Optional
from pydantic import Field

from stockbook.models import NotificationType
from stockbook.schemas.common import CamelModel


class DashboardSummary(CamelModel):
    total_items: int
    total_quantity: int
    total_inventory_value: float
    today_sales_total: float
    today_sales_count: int
    month_sales_total: float
    month_sales_count: int
    low_stock_count: int
    out_of_stock_count: int


class TopSellingProduct(CamelModel):
    id: Optional[int] = None
    name: str
    sku: Optional[str] = None


class TopSellingItem(CamelModel):
    item: TopSellingProduct
    total_quantity: int
    total_revenue: float


class NotificationRead(CamelModel):
    id: int
    type: NotificationType
    message: str
    item_id: Optional[int] = Field(default=None, serialization_alias="item")
    read: bool
    created_at: Optional[datetime] = None
