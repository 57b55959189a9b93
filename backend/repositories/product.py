# backend/repositories/product.py
from sqlalchemy import func, or_

from models.product import Product
from repositories.base import Repository


class ProductRepository(Repository[Product]):
    model = Product

    def get_by_name(self, name):
        return self.get_by(func.lower(Product.name) == name.strip().lower())

    def search(self, term=None, category=None):
        query = self.query()
        if category:
            query = query.filter(func.lower(Product.category) == category.strip().lower())
        if term:
            like = f"%{term.strip()}%"
            query = query.filter(or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.category.ilike(like),
            ))
        return query.order_by(Product.name.asc()).all()

    def categories(self):
        rows = self.db.query(Product.category).distinct().order_by(Product.category.asc()).all()
        return [r[0] for r in rows if r[0]]
