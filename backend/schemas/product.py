# backend/schemas/product.py
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Shared attributes for create and update requests
class ProductBase(ORMBase):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)
    unit: str = Field(..., min_length=1, max_length=50)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    # Per-product alert thresholds; empty means the global defaults apply
    min_quantity: Optional[int] = Field(None, ge=0)
    max_quantity: Optional[int] = Field(None, ge=0)


class ProductCreate(ProductBase):
    pass


# Full replacement of editable fields (PUT)
class ProductUpdate(ProductBase):
    pass


class ProductOut(ProductBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProductList(ORMBase):
    items: List[ProductOut]
    total: int
