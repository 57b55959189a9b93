"""
Stock verbs running against a file-backed SQLite database, so separate
sessions really see each other's commits.
"""
import threading
from contextlib import contextmanager

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base
from exceptions import InsufficientStockError, PreconditionFailedError
from models.stock import StockItem, StockTransaction
from services.product_service import ProductService
from services.stock_service import StockService
from services.warehouse_service import WarehouseService
from utils.locks import KeyedLock

from conftest import make_user


@pytest.fixture
def session_factory(tmp_path):
    import models.product  # noqa: F401
    import models.warehouse  # noqa: F401
    import models.stock  # noqa: F401
    import models.users  # noqa: F401
    import models.log  # noqa: F401

    engine = create_engine(
        f"sqlite:///{tmp_path / 'stock.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def pair(session_factory):
    """Ids of a product, a warehouse and a user committed to the shared file."""
    db = session_factory()
    try:
        product = ProductService(db).create_product("Laptop", "pcs", 3499.99, "Electronics")
        warehouse = WarehouseService(db).create_warehouse("Main Warehouse", "ul. Magazynowa 1")
        user = make_user(db, "employee")
        return product.id, warehouse.id, user.id
    finally:
        db.close()


class InterleavingLock(KeyedLock):
    """Runs ``before_acquire`` once, just before the first caller takes its lock."""

    def __init__(self, before_acquire):
        super().__init__()
        self.before_acquire = before_acquire

    @contextmanager
    def hold(self, key):
        before, self.before_acquire = self.before_acquire, None
        if before is not None:
            before()
        with super().hold(key):
            yield


def stock_state(session_factory):
    db = session_factory()
    try:
        items = db.query(StockItem).all()
        return [item.quantity for item in items], db.query(StockTransaction).count()
    finally:
        db.close()


def test_delete_rechecks_quantity_after_concurrent_import(session_factory, pair):
    product_id, warehouse_id, user_id = pair
    db = session_factory()
    try:
        item = StockService(db).create_stock_item(product_id, warehouse_id, 0)

        def import_from_another_session():
            other = session_factory()
            try:
                StockService(other, locks=KeyedLock()).import_stock(product_id, warehouse_id, 5, user_id)
            finally:
                other.close()

        service = StockService(db, locks=InterleavingLock(import_from_another_session))
        with pytest.raises(PreconditionFailedError):
            service.delete_stock_item(item.id)
    finally:
        db.close()

    assert stock_state(session_factory) == ([5], 1)


def test_parallel_exports_never_oversell(session_factory, pair):
    product_id, warehouse_id, user_id = pair
    locks = KeyedLock()

    db = session_factory()
    try:
        StockService(db, locks=locks).import_stock(product_id, warehouse_id, 10, user_id)
    finally:
        db.close()

    outcomes = []
    guard = threading.Lock()
    start = threading.Barrier(8)

    def worker():
        db = session_factory()
        try:
            start.wait()
            try:
                StockService(db, locks=locks).export_stock(product_id, warehouse_id, 3, user_id)
                outcome = "ok"
            except InsufficientStockError:
                outcome = "rejected"
            with guard:
                outcomes.append(outcome)
        finally:
            db.close()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["ok"] * 3 + ["rejected"] * 5
    # One Import plus one transaction per accepted Export
    assert stock_state(session_factory) == ([1], 4)
    assert len(locks) == 0
