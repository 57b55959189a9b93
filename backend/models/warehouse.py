# backend/models/warehouse.py
from sqlalchemy import Column, Integer, String, DateTime, func
from sqlalchemy.orm import relationship
from database import Base
from exceptions import InvalidArgumentError

# Represents a physical storage location holding stock items
class Warehouse(Base):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), unique=True, nullable=False, index=True)
    address = Column(String(500), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    stock_items = relationship("StockItem", back_populates="warehouse", passive_deletes="all")

    @classmethod
    def create(cls, name, address):
        warehouse = cls()
        warehouse.update(name, address)
        return warehouse

    def update(self, name, address):
        name = (name or "").strip()
        if not name:
            raise InvalidArgumentError("name", "must not be empty")
        if not (address or "").strip():
            raise InvalidArgumentError("address", "must not be empty")
        self.name = name
        self.address = address.strip()
