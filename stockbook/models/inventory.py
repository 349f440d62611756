import enum
from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from stockbook.database import Base


class StockStatus(str, enum.Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


CATEGORIES = [
    "Electronics",
    "Furniture",
    "Office Supplies",
    "Clothing",
    "Food",
    "Beverages",
    "Other",
]

UNITS = ["piece", "kg", "liter", "box", "pack", "set", "pair", "meter", "unit"]


class InventoryItem(Base):
    __tablename__ = "inventory_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    sku = Column(String, unique=True, index=True, nullable=True)
    category = Column(String, index=True, default="Other", nullable=False)
    description = Column(String, nullable=True)

    quantity = Column(Integer, default=0, nullable=False)
    unit = Column(String, default="piece", nullable=False)
    price = Column(Numeric(10, 2), default=0, nullable=False)
    cost = Column(Numeric(10, 2), default=0, nullable=False)
    supplier = Column(String, nullable=True)
    reorder_level = Column(Integer, default=0, nullable=False)
    tags = Column(JSON, default=list)

    created_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    created_by = relationship("User")

    @property
    def stock_status(self) -> StockStatus:
        if self.quantity <= 0:
            return StockStatus.OUT_OF_STOCK
        if self.quantity <= self.reorder_level:
            return StockStatus.LOW_STOCK
        return StockStatus.IN_STOCK
