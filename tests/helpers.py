import unittest

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from stockbook.crud.inventory import create_item
from stockbook.crud.users import create_user
from stockbook.database import get_db
from stockbook.main import app
from stockbook.models import Base, InventoryItem, Role, User
from stockbook.security import create_user_token

# Base de datos en memoria compartida por todas las sesiones de la prueba
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

PASSWORD = "secret123"


class ApiTestCase(unittest.TestCase):
    """Crea las tablas para cada prueba y expone un TestClient y fábricas de datos."""

    def setUp(self) -> None:
        Base.metadata.create_all(bind=engine)
        self.db = TestingSessionLocal()
        self.client = TestClient(app)
        self._user_seq = 0

    def tearDown(self) -> None:
        self.db.close()
        Base.metadata.drop_all(bind=engine)

    def make_user(self, role: Role = Role.USER, email: str = None, password: str = PASSWORD, **extra) -> User:
        self._user_seq += 1
        return create_user(
            self.db,
            name=extra.pop("name", f"{role.value.title()} {self._user_seq}"),
            email=email or f"{role.value}{self._user_seq}@example.com",
            password=password,
            role=role,
            **extra,
        )

    def headers_for(self, user: User) -> dict:
        return {"Authorization": f"Bearer {create_user_token(user)}"}

    def make_item(self, **fields) -> InventoryItem:
        data = {
            "name": "Widget",
            "category": "Other",
            "quantity": 10,
            "unit": "piece",
            "price": 5,
            "cost": 2,
            "reorder_level": 2,
            "tags": [],
        }
        data.update(fields)
        item = create_item(self.db, data)
        self.db.commit()
        self.db.refresh(item)
        return item

    def reload(self, obj):
        self.db.expire_all()
        return self.db.get(type(obj), obj.id)
