import unittest

from stockbook.config import settings
from stockbook.init_db import SAMPLE_ITEMS, init_db
from stockbook.models import InventoryItem, Role, User
from tests.helpers import ApiTestCase


class SeedTests(ApiTestCase):
    def test_seed_is_idempotent(self) -> None:
        self.assertEqual(init_db(self.db), len(SAMPLE_ITEMS))
        self.assertEqual(init_db(self.db), 0)

        admin = self.db.query(User).one()
        self.assertEqual(admin.email, settings.admin_email)
        self.assertEqual(admin.role, Role.ADMIN)
        self.assertEqual(self.db.query(InventoryItem).count(), len(SAMPLE_ITEMS))

        laptop = self.db.query(InventoryItem).filter(InventoryItem.name == "Laptop - Dell XPS 13").one()
        self.assertTrue(laptop.sku.startswith("SKU-"))
        self.assertEqual(laptop.created_by_id, admin.id)

    def test_seeded_admin_can_login(self) -> None:
        init_db(self.db)
        res = self.client.post("/api/auth/login", json={
            "email": settings.admin_email, "password": settings.admin_password,
        })
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["role"], "admin")


if __name__ == "__main__":
    unittest.main()
