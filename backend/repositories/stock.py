# backend/repositories/stock.py
from sqlalchemy.orm import joinedload

from models.stock import StockItem, StockTransaction
from repositories.base import Repository


class StockItemRepository(Repository[StockItem]):
    model = StockItem

    def query(self):
        # Product is needed for per-product thresholds and display names
        return self.db.query(StockItem).options(
            joinedload(StockItem.product), joinedload(StockItem.warehouse)
        )

    def get_for_pair(self, product_id, warehouse_id, for_update=False):
        query = self.db.query(StockItem).filter(
            StockItem.product_id == product_id,
            StockItem.warehouse_id == warehouse_id,
        )
        if for_update:
            # Row lock on PostgreSQL; SQLite ignores FOR UPDATE
            query = query.with_for_update().populate_existing()
        return query.first()

    def filter(self, product_id=None, warehouse_id=None):
        query = self.query()
        if product_id is not None:
            query = query.filter(StockItem.product_id == product_id)
        if warehouse_id is not None:
            query = query.filter(StockItem.warehouse_id == warehouse_id)
        return query.order_by(StockItem.id.asc()).all()


class StockTransactionRepository(Repository[StockTransaction]):
    model = StockTransaction

    def query(self):
        return self.db.query(StockTransaction).options(
            joinedload(StockTransaction.product),
            joinedload(StockTransaction.warehouse),
            joinedload(StockTransaction.user),
        )

    def filtered(self, product_id=None, warehouse_id=None, user_id=None, type=None, date_from=None, date_to=None):
        query = self.query()
        if product_id is not None:
            query = query.filter(StockTransaction.product_id == product_id)
        if warehouse_id is not None:
            query = query.filter(StockTransaction.warehouse_id == warehouse_id)
        if user_id is not None:
            query = query.filter(StockTransaction.user_id == user_id)
        if type is not None:
            query = query.filter(StockTransaction.type == type)
        if date_from is not None:
            query = query.filter(StockTransaction.transaction_date >= date_from)
        if date_to is not None:
            query = query.filter(StockTransaction.transaction_date <= date_to)
        return query.order_by(StockTransaction.transaction_date.desc(), StockTransaction.id.desc())
