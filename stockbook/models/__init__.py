# stockbook/models/__init__.py

# 1. Base declarativa
from stockbook.database import Base

# 2. Usuarios y roles
from .users import User, Role

# 3. Inventario
from .inventory import InventoryItem, StockStatus, CATEGORIES, UNITS

# 4. Ventas
from .sales import Sale, SaleItem, SaleStatus, PaymentMethod

# 5. Notificaciones de stock
from .notifications import Notification, NotificationType
