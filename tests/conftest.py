"""
Pytest fixtures for the warehouse API test suite.

Every test runs against a fresh in-memory SQLite database: tables are created
before the test and dropped afterwards. The ``client`` fixture overrides
``get_db`` so HTTP requests share the test's session.
"""
import os

# Must be set before config / database are imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine, get_db
from models.users import Role
from services.product_service import ProductService
from services.user_service import UserService
from services.warehouse_service import WarehouseService
from utils.locks import KeyedLock
from utils.tokenJWT import create_access_token

PASSWORD = "secret123"


@pytest.fixture
def session():
    import models.product  # noqa: F401
    import models.warehouse  # noqa: F401
    import models.stock  # noqa: F401
    import models.users  # noqa: F401
    import models.log  # noqa: F401

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def locks():
    return KeyedLock()


def make_user(session, username, role=Role.EMPLOYEE, is_active=True):
    return UserService(session).create_user(
        username, f"{username}@warehouse.com", PASSWORD, role=role, is_active=is_active
    )


@pytest.fixture
def user(session):
    return make_user(session, "employee")


@pytest.fixture
def manager(session):
    return make_user(session, "manager", role=Role.MANAGER)


@pytest.fixture
def admin(session):
    return make_user(session, "admin", role=Role.ADMIN)


@pytest.fixture
def product(session):
    return ProductService(session).create_product("Laptop", "pcs", 3499.99, "Electronics", description="15 inch")


@pytest.fixture
def other_product(session):
    return ProductService(session).create_product("T-Shirt", "pcs", 39.9, "Clothing")


@pytest.fixture
def warehouse(session):
    return WarehouseService(session).create_warehouse("Main Warehouse", "ul. Magazynowa 1, Warszawa")


@pytest.fixture
def other_warehouse(session):
    return WarehouseService(session).create_warehouse("Secondary Warehouse", "ul. Portowa 12, Gdansk")


@pytest.fixture
def client(session):
    from main import app

    def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


def auth_headers(user):
    token = create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}
