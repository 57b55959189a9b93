# backend/repositories/warehouse.py
from sqlalchemy import func

from models.warehouse import Warehouse
from repositories.base import Repository


class WarehouseRepository(Repository[Warehouse]):
    model = Warehouse

    def get_by_name(self, name):
        return self.get_by(func.lower(Warehouse.name) == name.strip().lower())

    def search(self, term=None):
        query = self.query()
        if term:
            like = f"%{term.strip()}%"
            query = query.filter(Warehouse.name.ilike(like) | Warehouse.address.ilike(like))
        return query.order_by(Warehouse.name.asc()).all()
