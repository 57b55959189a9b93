# backend/schemas/stock.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from models.stock import TransactionType


# Stock level of one product in one warehouse, enriched with display names
class StockItemResponse(BaseModel):
    id: int
    product_id: int
    warehouse_id: int
    quantity: int
    is_low: bool
    is_over: bool
    product_name: Optional[str] = None
    product_unit: Optional[str] = None
    warehouse_name: Optional[str] = None

    @classmethod
    def from_item(cls, item):
        return cls(
            id=item.id,
            product_id=item.product_id,
            warehouse_id=item.warehouse_id,
            quantity=item.quantity,
            is_low=item.is_low(),
            is_over=item.is_over(),
            product_name=item.product.name if item.product else None,
            product_unit=item.product.unit if item.product else None,
            warehouse_name=item.warehouse.name if item.warehouse else None,
        )


class StockItemCreate(BaseModel):
    product_id: int
    warehouse_id: int
    quantity: int = Field(0, ge=0)


# Body for item-level add/remove
class StockAmount(BaseModel):
    amount: int = Field(..., ge=1)
    reason: Optional[str] = Field(None, max_length=500)


# Body for item-level absolute set
class StockQuantity(BaseModel):
    quantity: int = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=500)


# Import / Export: quantity is the moved magnitude
class StockMovementCreate(BaseModel):
    product_id: int
    warehouse_id: int
    quantity: int = Field(..., ge=1)
    reason: Optional[str] = Field(None, max_length=500)


# Adjustment: quantity is the target level, not a delta
class StockAdjustmentCreate(BaseModel):
    product_id: int
    warehouse_id: int
    quantity: int = Field(..., ge=0)
    reason: Optional[str] = Field(None, max_length=500)


class StockTransactionResponse(BaseModel):
    id: int
    product_id: int
    warehouse_id: int
    type: TransactionType
    quantity: int
    reason: Optional[str] = None
    transaction_date: datetime
    user_id: int
    product_name: Optional[str] = None
    warehouse_name: Optional[str] = None
    username: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_transaction(cls, tx):
        return cls(
            id=tx.id,
            product_id=tx.product_id,
            warehouse_id=tx.warehouse_id,
            type=tx.type,
            quantity=tx.quantity,
            reason=tx.reason,
            transaction_date=tx.transaction_date,
            user_id=tx.user_id,
            product_name=tx.product.name if tx.product else None,
            warehouse_name=tx.warehouse.name if tx.warehouse else None,
            username=tx.user.username if tx.user else None,
        )


# Paginated transaction history
class StockTransactionPage(BaseModel):
    items: List[StockTransactionResponse]
    total: int
    page: int
    page_size: int


# Administrative correction of a logged transaction
class StockTransactionAmend(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
    quantity: int


class StockAvailability(BaseModel):
    product_id: int
    warehouse_id: int
    available: int
    required: Optional[int] = None
    sufficient: Optional[bool] = None
