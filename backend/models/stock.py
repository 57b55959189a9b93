# backend/models/stock.py
import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Integer, String, ForeignKey, DateTime, Enum, CheckConstraint, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from config import settings
from database import Base
from exceptions import InvalidArgumentError, InsufficientStockError


# Kind of stock movement; the value is the string stored in the database
class TransactionType(str, enum.Enum):
    IMPORT = "Import"
    EXPORT = "Export"
    ADJUSTMENT = "Adjustment"

    @classmethod
    def parse(cls, value):
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError("type", f"must be one of {', '.join(t.value for t in cls)}") from None


# Current on-hand quantity of one product in one warehouse
class StockItem(Base):
    __tablename__ = "stock_items"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product")
    warehouse = relationship("Warehouse", back_populates="stock_items")

    __table_args__ = (
        # One row per (product, warehouse): this table is the current level, not a log
        UniqueConstraint("product_id", "warehouse_id", name="uq_stockitem_product_warehouse"),
    )

    @classmethod
    def create(cls, product_id, warehouse_id, quantity):
        if quantity is None or quantity < 0:
            raise InvalidArgumentError("quantity", "cannot be negative")
        return cls(product_id=product_id, warehouse_id=warehouse_id, quantity=quantity)

    def add_quantity(self, amount):
        if amount is None or amount <= 0:
            raise InvalidArgumentError("amount", "must be positive")
        self.quantity += amount

    def remove_quantity(self, amount):
        if amount is None or amount <= 0:
            raise InvalidArgumentError("amount", "must be positive")
        if self.quantity - amount < 0:
            raise InsufficientStockError(self.product_id, self.warehouse_id, amount, self.quantity)
        self.quantity -= amount

    def update_quantity(self, new_quantity):
        if new_quantity is None or new_quantity < 0:
            raise InvalidArgumentError("quantity", "cannot be negative")
        self.quantity = new_quantity

    @property
    def low_threshold(self):
        if self.product is not None and self.product.min_quantity is not None:
            return self.product.min_quantity
        return settings.LOW_STOCK_THRESHOLD

    @property
    def over_threshold(self):
        if self.product is not None and self.product.max_quantity is not None:
            return self.product.max_quantity
        return settings.OVER_STOCK_THRESHOLD

    def is_low(self, threshold=None):
        return self.quantity < (self.low_threshold if threshold is None else threshold)

    def is_over(self, threshold=None):
        return self.quantity > (self.over_threshold if threshold is None else threshold)


# Append-only audit record of a quantity-affecting event.
# Import/Export store the moved magnitude; Adjustment stores the signed delta.
class StockTransaction(Base):
    __tablename__ = "stock_transactions"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id", ondelete="RESTRICT"), nullable=False, index=True)
    type = Column(
        Enum(
            TransactionType,
            name="transaction_type",
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        index=True,
    )
    quantity = Column(Integer, nullable=False)
    reason = Column(String(500), nullable=True)
    transaction_date = Column(DateTime(timezone=True), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True)

    product = relationship("Product")
    warehouse = relationship("Warehouse")
    user = relationship("User")

    @classmethod
    def create(cls, product_id, warehouse_id, type, quantity, reason, user_id):
        return cls(
            product_id=product_id,
            warehouse_id=warehouse_id,
            type=TransactionType.parse(type),
            quantity=quantity,
            reason=reason,
            transaction_date=datetime.now(timezone.utc),
            user_id=user_id,
        )

    # Administrative correction only; normal flow never mutates a transaction
    def update(self, reason, quantity):
        self.reason = reason
        self.quantity = quantity
