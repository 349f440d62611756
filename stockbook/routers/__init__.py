# stockbook/routers/__init__.py

# Expone los módulos para que "from stockbook.routers import users" funcione
from . import auth
from . import users
from . import inventory
from . import sales
from . import dashboard
from . import realtime
