# backend/services/stock_service.py
"""
Stock levels and the stock transaction log.

This is the only place where stock quantities change. Every Import, Export
and Adjustment follows the same protocol:

1. validate the product, warehouse and user exist;
2. take the in-process lock for the (product, warehouse) pair;
3. read the StockItem row (``SELECT ... FOR UPDATE``), creating it lazily;
4. apply the bounded mutation and add a StockTransaction;
5. commit both writes together, then release the lock.

An Export that would drive stock below zero is rejected before anything is
written, so a failed export never leaves a transaction behind.
"""
import logging
from contextlib import contextmanager
from datetime import timezone

from sqlalchemy.orm import Session

from exceptions import (
    ConflictError,
    InsufficientStockError,
    InvalidArgumentError,
    NotFoundError,
    PreconditionFailedError,
)
from models.stock import StockItem, StockTransaction, TransactionType
from repositories.product import ProductRepository
from repositories.stock import StockItemRepository, StockTransactionRepository
from repositories.users import UserRepository
from repositories.warehouse import WarehouseRepository
from services.base import unit_of_work
from utils.locks import KeyedLock, stock_locks

logger = logging.getLogger(__name__)

DEFAULT_REASONS = {
    TransactionType.IMPORT: "Stock import",
    TransactionType.EXPORT: "Stock export",
    TransactionType.ADJUSTMENT: "Stock adjustment",
}


class StockService:
    def __init__(self, db: Session, locks: KeyedLock = None):
        self.db = db
        self.locks = locks if locks is not None else stock_locks
        self.stock_items = StockItemRepository(db)
        self.transactions = StockTransactionRepository(db)
        self.products = ProductRepository(db)
        self.warehouses = WarehouseRepository(db)
        self.users = UserRepository(db)

    # ------------------------------------------------------------------
    # Stock items
    # ------------------------------------------------------------------

    def get_stock_item(self, stock_item_id) -> StockItem:
        item = self.stock_items.get(stock_item_id)
        if item is None:
            raise NotFoundError("StockItem", stock_item_id)
        return item

    def list_stock_items(self, product_id=None, warehouse_id=None):
        return self.stock_items.filter(product_id=product_id, warehouse_id=warehouse_id)

    def create_stock_item(self, product_id, warehouse_id, quantity=0) -> StockItem:
        self._validate_product(product_id)
        self._validate_warehouse(warehouse_id)
        item = StockItem.create(product_id, warehouse_id, quantity)

        with self._unit_of_work(product_id, warehouse_id):
            if self.stock_items.get_for_pair(product_id, warehouse_id, for_update=True) is not None:
                raise ConflictError(
                    "stock_item",
                    f"{product_id}/{warehouse_id}",
                    message=f"Stock item for product {product_id} in warehouse {warehouse_id} already exists",
                )
            self.stock_items.add(item)

        logger.info("Created stock item %s for product=%s warehouse=%s qty=%s",
                    item.id, product_id, warehouse_id, quantity)
        return item

    def delete_stock_item(self, stock_item_id) -> None:
        item = self.get_stock_item(stock_item_id)
        product_id, warehouse_id = item.product_id, item.warehouse_id

        # The quantity must be read under the pair lock; an Import may have landed since
        with self._unit_of_work(product_id, warehouse_id):
            item = self.stock_items.get_for_pair(product_id, warehouse_id, for_update=True)
            if item is None:
                raise NotFoundError("StockItem", stock_item_id)
            if item.quantity > 0:
                raise PreconditionFailedError(
                    f"Stock item {stock_item_id} still holds {item.quantity} units; adjust it to 0 first"
                )
            self.stock_items.delete(item)
        logger.info("Deleted stock item %s", stock_item_id)

    # Item-level shortcuts; each goes through a logged verb
    def add_stock(self, stock_item_id, amount, user_id, reason=None) -> StockTransaction:
        item = self.get_stock_item(stock_item_id)
        return self.import_stock(item.product_id, item.warehouse_id, amount, user_id, reason)

    def remove_stock(self, stock_item_id, amount, user_id, reason=None) -> StockTransaction:
        item = self.get_stock_item(stock_item_id)
        return self.export_stock(item.product_id, item.warehouse_id, amount, user_id, reason)

    def set_stock_quantity(self, stock_item_id, quantity, user_id, reason=None) -> StockTransaction:
        item = self.get_stock_item(stock_item_id)
        return self.adjust_stock(item.product_id, item.warehouse_id, quantity, user_id, reason)

    # ------------------------------------------------------------------
    # Business operations
    # ------------------------------------------------------------------

    def import_stock(self, product_id, warehouse_id, quantity, user_id, reason=None) -> StockTransaction:
        if quantity is None or quantity <= 0:
            raise InvalidArgumentError("quantity", "must be positive")
        self._validate_references(product_id, warehouse_id, user_id)

        with self._unit_of_work(product_id, warehouse_id):
            item = self.stock_items.get_for_pair(product_id, warehouse_id, for_update=True)
            if item is None:
                self.stock_items.add(StockItem.create(product_id, warehouse_id, quantity))
            else:
                item.add_quantity(quantity)
            transaction = self._record(product_id, warehouse_id, TransactionType.IMPORT, quantity, reason, user_id)

        logger.info("Import product=%s warehouse=%s qty=%s user=%s tx=%s",
                    product_id, warehouse_id, quantity, user_id, transaction.id)
        return transaction

    def export_stock(self, product_id, warehouse_id, quantity, user_id, reason=None) -> StockTransaction:
        if quantity is None or quantity <= 0:
            raise InvalidArgumentError("quantity", "must be positive")
        self._validate_references(product_id, warehouse_id, user_id)

        with self._unit_of_work(product_id, warehouse_id):
            item = self.stock_items.get_for_pair(product_id, warehouse_id, for_update=True)
            available = item.quantity if item is not None else 0
            if available < quantity:
                logger.warning("Export rejected product=%s warehouse=%s requested=%s available=%s",
                               product_id, warehouse_id, quantity, available)
                raise InsufficientStockError(product_id, warehouse_id, quantity, available)

            transaction = self._record(product_id, warehouse_id, TransactionType.EXPORT, quantity, reason, user_id)
            item.remove_quantity(quantity)

        logger.info("Export product=%s warehouse=%s qty=%s user=%s tx=%s",
                    product_id, warehouse_id, quantity, user_id, transaction.id)
        return transaction

    def adjust_stock(self, product_id, warehouse_id, quantity, user_id, reason=None) -> StockTransaction:
        """Set stock for the pair to exactly ``quantity`` and log the delta."""
        if quantity is None or quantity < 0:
            raise InvalidArgumentError("quantity", "cannot be negative")
        self._validate_references(product_id, warehouse_id, user_id)

        with self._unit_of_work(product_id, warehouse_id):
            item = self.stock_items.get_for_pair(product_id, warehouse_id, for_update=True)
            current = item.quantity if item is not None else 0
            delta = quantity - current

            transaction = self._record(product_id, warehouse_id, TransactionType.ADJUSTMENT, delta, reason, user_id)
            if item is None:
                self.stock_items.add(StockItem.create(product_id, warehouse_id, quantity))
            else:
                item.update_quantity(quantity)

        logger.info("Adjustment product=%s warehouse=%s %s -> %s user=%s tx=%s",
                    product_id, warehouse_id, current, quantity, user_id, transaction.id)
        return transaction

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def get_available_stock(self, product_id, warehouse_id) -> int:
        item = self.stock_items.get_for_pair(product_id, warehouse_id)
        return item.quantity if item is not None else 0

    def has_sufficient_stock(self, product_id, warehouse_id, required_quantity) -> bool:
        return self.get_available_stock(product_id, warehouse_id) >= required_quantity

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def get_low_stock_items(self):
        return [item for item in self.stock_items.filter() if item.is_low()]

    def get_over_stock_items(self):
        return [item for item in self.stock_items.filter() if item.is_over()]

    def get_stock_summary_by_warehouse(self, warehouse_id) -> dict:
        self._validate_warehouse(warehouse_id)
        items = self.stock_items.filter(warehouse_id=warehouse_id)
        return {
            "warehouse_id": warehouse_id,
            "total_products": len(items),
            "total_quantity": sum(item.quantity for item in items),
            "low_stock_items": sum(1 for item in items if item.is_low()),
            "over_stock_items": sum(1 for item in items if item.is_over()),
        }

    def count_stock_items(self) -> int:
        return self.stock_items.count()

    def count_transactions(self) -> int:
        return self.transactions.count()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def get_transaction(self, transaction_id) -> StockTransaction:
        transaction = self.transactions.get(transaction_id)
        if transaction is None:
            raise NotFoundError("StockTransaction", transaction_id)
        return transaction

    def list_transactions(
        self,
        product_id=None,
        warehouse_id=None,
        user_id=None,
        type=None,
        date_from=None,
        date_to=None,
        page=1,
        page_size=None,
    ):
        """Return ``(items, total)``, newest first.

        ``page_size=None`` returns every matching transaction.
        """
        if date_from is not None and date_to is not None and date_from > date_to:
            raise InvalidArgumentError("date_from", "must not be after date_to")
        query = self.transactions.filtered(
            product_id=product_id,
            warehouse_id=warehouse_id,
            user_id=user_id,
            type=TransactionType.parse(type) if type is not None else None,
            date_from=_as_utc(date_from),
            date_to=_as_utc(date_to),
        )
        total = query.count()
        if page_size is not None:
            query = query.offset((page - 1) * page_size).limit(page_size)
        return query.all(), total

    def amend_transaction(self, transaction_id, reason, quantity) -> StockTransaction:
        """Administrative correction of a logged transaction.

        Stock levels are not touched; use an Adjustment to change stock.
        """
        transaction = self.get_transaction(transaction_id)
        previous = (transaction.reason, transaction.quantity)
        with self._unit_of_work():
            transaction.update(reason, quantity)
            self.transactions.update(transaction)
        logger.warning("Transaction %s amended: reason/quantity %r -> %r",
                       transaction_id, previous, (reason, quantity))
        return transaction

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record(self, product_id, warehouse_id, type, quantity, reason, user_id) -> StockTransaction:
        transaction = StockTransaction.create(
            product_id, warehouse_id, type, quantity, reason or DEFAULT_REASONS[type], user_id
        )
        return self.transactions.add(transaction)

    @contextmanager
    def _unit_of_work(self, product_id=None, warehouse_id=None):
        """Hold the pair lock (if any) across the writes and the single commit."""
        if product_id is None:
            with unit_of_work(self.db):
                yield
            return

        # A unique-pair violation means another process created the item between our read and write
        with self.locks.hold((product_id, warehouse_id)), unit_of_work(
            self.db,
            "stock_item",
            f"{product_id}/{warehouse_id}",
            conflict_message="Stock changed concurrently, please retry",
        ):
            yield

    def _validate_references(self, product_id, warehouse_id, user_id):
        self._validate_product(product_id)
        self._validate_warehouse(warehouse_id)
        self._validate_user(user_id)

    def _validate_product(self, product_id):
        if not self.products.exists(product_id):
            raise NotFoundError("Product", product_id)

    def _validate_warehouse(self, warehouse_id):
        if not self.warehouses.exists(warehouse_id):
            raise NotFoundError("Warehouse", warehouse_id)

    def _validate_user(self, user_id):
        if not self.users.exists(user_id):
            raise NotFoundError("User", user_id)


def _as_utc(value):
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)
