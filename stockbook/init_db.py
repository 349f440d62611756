import logging

from stockbook.config import settings
from stockbook.database import SessionLocal, engine
from stockbook.models import Base, InventoryItem, Role
from stockbook.crud.inventory import create_item
from stockbook.crud.users import create_user, get_user_by_email

logger = logging.getLogger(__name__)

SAMPLE_ITEMS = [
    {
        "name": "Laptop - Dell XPS 13",
        "description": "High-performance laptop with 13-inch display, Intel Core i7, 16GB RAM, 512GB SSD",
        "category": "Electronics",
        "price": 1299.99,
        "quantity": 15,
        "unit": "piece",
        "supplier": "Dell Inc.",
        "reorder_level": 5,
    },
    {
        "name": "Smartphone - Samsung Galaxy S21",
        "description": "Latest Samsung smartphone with 6.2-inch display, 8GB RAM, 128GB storage",
        "category": "Electronics",
        "price": 899.99,
        "quantity": 25,
        "unit": "piece",
        "supplier": "Samsung Electronics",
        "reorder_level": 8,
    },
    {
        "name": "Office Chair - Ergonomic",
        "description": "Adjustable ergonomic office chair with lumbar support and breathable mesh",
        "category": "Furniture",
        "price": 249.99,
        "quantity": 10,
        "unit": "piece",
        "supplier": "Office Supplies Co.",
        "reorder_level": 3,
    },
    {
        "name": "Wireless Headphones - Sony WH-1000XM4",
        "description": "Noise-cancelling wireless headphones with 30-hour battery life",
        "category": "Electronics",
        "price": 349.99,
        "quantity": 20,
        "unit": "piece",
        "supplier": "Sony Corporation",
        "reorder_level": 5,
    },
    {
        "name": "Desk Lamp - LED",
        "description": "Adjustable LED desk lamp with multiple brightness levels and color temperatures",
        "category": "Office Supplies",
        "price": 49.99,
        "quantity": 30,
        "unit": "piece",
        "supplier": "Lighting Solutions Inc.",
        "reorder_level": 10,
    },
]


def init_db(db=None):
    """Crea las tablas, el usuario admin y el inventario de ejemplo (solo lo que falte)."""
    Base.metadata.create_all(bind=engine if db is None else db.get_bind())
    own_session = db is None
    if own_session:
        db = SessionLocal()

    try:
        # 1. USUARIO ADMIN
        admin = get_user_by_email(db, settings.admin_email)
        if not admin:
            admin = create_user(
                db,
                name=settings.admin_name,
                email=settings.admin_email,
                password=settings.admin_password,
                role=Role.ADMIN,
            )
            logger.info("Admin user '%s' created", admin.email)
        else:
            logger.info("Admin user '%s' already exists", admin.email)

        # 2. INVENTARIO DE EJEMPLO
        created = 0
        for data in SAMPLE_ITEMS:
            if db.query(InventoryItem).filter(InventoryItem.name == data["name"]).first():
                continue
            create_item(db, dict(data, tags=[]), created_by_id=admin.id)
            created += 1
        db.commit()
        logger.info("Sample inventory: %s items created", created)
        return created
    finally:
        if own_session:
            db.close()


def main():
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(message)s")
    logger.info("--- Seeding database ---")
    init_db()
    logger.info("--- Done ---")


if __name__ == "__main__":
    main()
