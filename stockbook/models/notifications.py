import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from stockbook.database import Base


class NotificationType(str, enum.Enum):
    LOW_STOCK = "lowStock"
    OUT_OF_STOCK = "outOfStock"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(Enum(NotificationType, values_callable=lambda e: [m.value for m in e]), nullable=False)
    message = Column(String, nullable=False)
    item_id = Column(Integer, ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
