# backend/models/product.py
from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint, func
from database import Base
from exceptions import InvalidArgumentError

# Model Product
# A catalogue entry stocked in one or more warehouses.
# min_quantity / max_quantity optionally override the global low/over stock thresholds.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(String(1000), nullable=True)
    unit = Column(String(50), nullable=False)
    price = Column(Float, CheckConstraint("price >= 0"), nullable=False, default=0)
    category = Column(String(100), nullable=False, index=True)

    min_quantity = Column(Integer, CheckConstraint("min_quantity >= 0"), nullable=True)
    max_quantity = Column(Integer, CheckConstraint("max_quantity >= 0"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @classmethod
    def create(cls, name, description, unit, price, category, min_quantity=None, max_quantity=None):
        product = cls()
        product.update(name, description, unit, price, category, min_quantity, max_quantity)
        return product

    def update(self, name, description, unit, price, category, min_quantity=None, max_quantity=None):
        name = (name or "").strip()
        if not name:
            raise InvalidArgumentError("name", "must not be empty")
        if not (unit or "").strip():
            raise InvalidArgumentError("unit", "must not be empty")
        if not (category or "").strip():
            raise InvalidArgumentError("category", "must not be empty")
        if price is None or price < 0:
            raise InvalidArgumentError("price", "must be zero or positive")
        for field, value in (("min_quantity", min_quantity), ("max_quantity", max_quantity)):
            if value is not None and value < 0:
                raise InvalidArgumentError(field, "must be zero or positive")
        if min_quantity is not None and max_quantity is not None and min_quantity > max_quantity:
            raise InvalidArgumentError("min_quantity", "must not exceed max_quantity")

        self.name = name
        self.description = description
        self.unit = unit.strip()
        self.price = price
        self.category = category.strip()
        self.min_quantity = min_quantity
        self.max_quantity = max_quantity
