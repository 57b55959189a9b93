# backend/schemas/warehouse.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from datetime import datetime


class WarehouseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(WarehouseBase):
    pass


class WarehouseOut(WarehouseBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WarehouseList(BaseModel):
    items: List[WarehouseOut]
    total: int


# Aggregated stock figures for one warehouse
class WarehouseSummary(BaseModel):
    warehouse_id: int
    total_products: int
    total_quantity: int
    low_stock_items: int
    over_stock_items: int
