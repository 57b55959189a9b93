# backend/services/product_service.py
import logging

from sqlalchemy.orm import Session

from exceptions import ConflictError, NotFoundError, PreconditionFailedError
from models.product import Product
from models.stock import StockItem, StockTransaction
from repositories.product import ProductRepository
from repositories.stock import StockItemRepository, StockTransactionRepository
from services.base import unit_of_work

logger = logging.getLogger(__name__)


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.products = ProductRepository(db)
        self.stock_items = StockItemRepository(db)
        self.transactions = StockTransactionRepository(db)

    def get_product(self, product_id) -> Product:
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def list_products(self, category=None, q=None):
        return self.products.search(term=q, category=category)

    def search_products(self, term):
        return self.products.search(term=term)

    def get_categories(self):
        return self.products.categories()

    def create_product(self, name, unit, price, category, description=None,
                       min_quantity=None, max_quantity=None) -> Product:
        product = Product.create(name, description, unit, price, category, min_quantity, max_quantity)
        if self.products.get_by_name(product.name) is not None:
            raise ConflictError("name", product.name, message=f"Product with name '{product.name}' already exists")

        with unit_of_work(self.db, "name", product.name):
            self.products.add(product)
        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def update_product(self, product_id, name, unit, price, category, description=None,
                       min_quantity=None, max_quantity=None) -> Product:
        product = self.get_product(product_id)
        duplicate = self.products.get_by_name(name or "")
        if duplicate is not None and duplicate.id != product.id:
            raise ConflictError("name", name.strip(), message=f"Another product named '{name.strip()}' already exists")

        with unit_of_work(self.db, "name", name):
            product.update(name, description, unit, price, category, min_quantity, max_quantity)
            self.products.update(product)
        logger.info("Updated product %s", product_id)
        return product

    def delete_product(self, product_id) -> None:
        product = self.get_product(product_id)
        if not self.can_delete_product(product_id):
            raise PreconditionFailedError("Cannot delete product that has stock items or stock transactions")
        with unit_of_work(self.db):
            self.products.delete(product)
        logger.info("Deleted product %s", product_id)

    def can_delete_product(self, product_id) -> bool:
        return (
            self.stock_items.count(StockItem.product_id == product_id) == 0
            and self.transactions.count(StockTransaction.product_id == product_id) == 0
        )

    def exists(self, product_id) -> bool:
        return self.products.exists(product_id)

    def count(self) -> int:
        return self.products.count()
