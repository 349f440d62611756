from .base import ApiError, ApiSession
from .auth import AuthStore
from .inventory import InventoryStore
from .sales import SalesStore
from .users import UsersStore
from .notifications import NotificationStore
from .dashboard import DashboardStore
from .forms import SaleDraft, validate_inventory_item, validate_user
