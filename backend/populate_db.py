import logging

from config import settings
from database import SessionLocal, init_db
from models.users import Role
from services.product_service import ProductService
from services.stock_service import StockService
from services.user_service import UserService
from services.warehouse_service import WarehouseService

logger = logging.getLogger(__name__)

# Sample catalogue: (name, description, unit, price, category, min_quantity, max_quantity)
SAMPLE_PRODUCTS = [
    ("Laptop", "Business laptop 15 inch", "pcs", 3499.99, "Electronics", 5, 50),
    ("T-Shirt", "Cotton t-shirt, size M", "pcs", 39.90, "Clothing", None, None),
]

SAMPLE_WAREHOUSES = [
    ("Main Warehouse", "ul. Magazynowa 1, Warszawa"),
    ("Secondary Warehouse", "ul. Portowa 12, Gdansk"),
]

# Opening stock per (product name, warehouse name)
OPENING_STOCK = {
    ("Laptop", "Main Warehouse"): 20,
    ("T-Shirt", "Main Warehouse"): 150,
    ("T-Shirt", "Secondary Warehouse"): 8,
}


def ensure_admin(session):
    """Creates the initial administrator from settings unless it already exists."""
    users = UserService(session)
    admin = users.get_by_username(settings.ADMIN_USERNAME)
    if admin is None:
        admin = users.create_user(
            settings.ADMIN_USERNAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD, role=Role.ADMIN
        )
        logger.info("Created administrator account %r", admin.username)
    return admin


def seed_sample_data(session, admin):
    products_service = ProductService(session)
    warehouses_service = WarehouseService(session)

    if products_service.count() or warehouses_service.count():
        logger.info("Database already contains catalogue data. Skipping seed.")
        return

    logger.info("Seeding database with sample data...")
    products = {}
    for name, description, unit, price, category, min_q, max_q in SAMPLE_PRODUCTS:
        products[name] = products_service.create_product(
            name, unit, price, category, description=description, min_quantity=min_q, max_quantity=max_q
        )

    warehouses = {}
    for name, address in SAMPLE_WAREHOUSES:
        warehouses[name] = warehouses_service.create_warehouse(name, address)

    stock = StockService(session)
    for (product_name, warehouse_name), quantity in OPENING_STOCK.items():
        stock.import_stock(
            products[product_name].id, warehouses[warehouse_name].id, quantity, admin.id, "Opening stock"
        )
    logger.info("Database seeding completed successfully.")


def populate_database():
    """Main execution function to populate database."""
    init_db()
    session = SessionLocal()
    try:
        admin = ensure_admin(session)
        seed_sample_data(session, admin)
    except Exception:
        logger.exception("An error occurred while seeding the database.")
        raise
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    populate_database()
