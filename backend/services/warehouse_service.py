# backend/services/warehouse_service.py
import logging

from sqlalchemy.orm import Session

from exceptions import ConflictError, NotFoundError, PreconditionFailedError
from models.stock import StockItem, StockTransaction
from models.warehouse import Warehouse
from repositories.stock import StockItemRepository, StockTransactionRepository
from repositories.warehouse import WarehouseRepository
from services.base import unit_of_work

logger = logging.getLogger(__name__)


class WarehouseService:
    def __init__(self, db: Session):
        self.db = db
        self.warehouses = WarehouseRepository(db)
        self.stock_items = StockItemRepository(db)
        self.transactions = StockTransactionRepository(db)

    def get_warehouse(self, warehouse_id) -> Warehouse:
        warehouse = self.warehouses.get(warehouse_id)
        if warehouse is None:
            raise NotFoundError("Warehouse", warehouse_id)
        return warehouse

    def list_warehouses(self, q=None):
        return self.warehouses.search(term=q)

    def create_warehouse(self, name, address) -> Warehouse:
        warehouse = Warehouse.create(name, address)
        if self.warehouses.get_by_name(warehouse.name) is not None:
            raise ConflictError("name", warehouse.name, message=f"Warehouse with name '{warehouse.name}' already exists")

        with unit_of_work(self.db, "name", warehouse.name):
            self.warehouses.add(warehouse)
        logger.info("Created warehouse %s (%s)", warehouse.id, warehouse.name)
        return warehouse

    def update_warehouse(self, warehouse_id, name, address) -> Warehouse:
        warehouse = self.get_warehouse(warehouse_id)
        duplicate = self.warehouses.get_by_name(name or "")
        if duplicate is not None and duplicate.id != warehouse.id:
            raise ConflictError("name", name.strip(), message=f"Another warehouse named '{name.strip()}' already exists")

        with unit_of_work(self.db, "name", name):
            warehouse.update(name, address)
            self.warehouses.update(warehouse)
        logger.info("Updated warehouse %s", warehouse_id)
        return warehouse

    def delete_warehouse(self, warehouse_id) -> None:
        warehouse = self.get_warehouse(warehouse_id)
        if not self.can_delete_warehouse(warehouse_id):
            raise PreconditionFailedError("Cannot delete warehouse that has stock items or stock transactions")
        with unit_of_work(self.db):
            self.warehouses.delete(warehouse)
        logger.info("Deleted warehouse %s", warehouse_id)

    def can_delete_warehouse(self, warehouse_id) -> bool:
        return (
            self.stock_items.count(StockItem.warehouse_id == warehouse_id) == 0
            and self.transactions.count(StockTransaction.warehouse_id == warehouse_id) == 0
        )

    def get_warehouse_stock(self, warehouse_id):
        self.get_warehouse(warehouse_id)
        return self.stock_items.filter(warehouse_id=warehouse_id)

    def exists(self, warehouse_id) -> bool:
        return self.warehouses.exists(warehouse_id)

    def count(self) -> int:
        return self.warehouses.count()
