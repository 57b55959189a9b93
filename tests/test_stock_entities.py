import pytest

from config import settings
from exceptions import InsufficientStockError, InvalidArgumentError
from models.product import Product
from models.stock import StockItem, StockTransaction, TransactionType
from models.users import User, Role
from models.warehouse import Warehouse


def make_item(quantity, product=None):
    item = StockItem.create(product_id=1, warehouse_id=1, quantity=quantity)
    item.product = product
    return item


class TestStockItem:
    def test_create_rejects_negative_quantity(self):
        with pytest.raises(InvalidArgumentError):
            StockItem.create(1, 1, -1)

    def test_add_quantity(self):
        item = make_item(5)
        item.add_quantity(3)
        assert item.quantity == 8

    @pytest.mark.parametrize("amount", [0, -4])
    def test_add_quantity_requires_positive_amount(self, amount):
        item = make_item(5)
        with pytest.raises(InvalidArgumentError):
            item.add_quantity(amount)
        assert item.quantity == 5

    def test_remove_quantity(self):
        item = make_item(5)
        item.remove_quantity(5)
        assert item.quantity == 0

    def test_remove_quantity_never_goes_negative(self):
        item = make_item(5)
        with pytest.raises(InsufficientStockError) as exc_info:
            item.remove_quantity(6)
        assert item.quantity == 5
        assert exc_info.value.requested == 6
        assert exc_info.value.available == 5

    def test_update_quantity(self):
        item = make_item(5)
        item.update_quantity(0)
        assert item.quantity == 0
        with pytest.raises(InvalidArgumentError):
            item.update_quantity(-1)

    @pytest.mark.parametrize(
        "quantity, low, over",
        [(0, True, False), (9, True, False), (10, False, False), (100, False, False), (101, False, True)],
    )
    def test_default_thresholds(self, quantity, low, over):
        assert settings.LOW_STOCK_THRESHOLD == 10
        assert settings.OVER_STOCK_THRESHOLD == 100
        item = make_item(quantity)
        assert item.is_low() is low
        assert item.is_over() is over

    def test_explicit_threshold_wins(self):
        item = make_item(20)
        assert item.is_low(threshold=25)
        assert item.is_over(threshold=15)

    def test_product_thresholds_override_defaults(self):
        product = Product.create("Laptop", None, "pcs", 10.0, "Electronics", min_quantity=3, max_quantity=30)
        assert not make_item(5, product).is_low()
        assert make_item(2, product).is_low()
        assert make_item(31, product).is_over()


class TestStockTransaction:
    def test_create_stamps_date_and_coerces_type(self):
        tx = StockTransaction.create(1, 2, "Export", 20, "Shipment", 3)
        assert tx.type is TransactionType.EXPORT
        assert tx.transaction_date is not None
        assert tx.transaction_date.tzinfo is not None

    def test_unknown_type_is_rejected(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            StockTransaction.create(1, 2, "Transfer", 20, None, 3)
        assert exc_info.value.field == "type"
        assert "Import, Export, Adjustment" in exc_info.value.reason

    def test_type_values_are_stored_strings(self):
        assert [t.value for t in TransactionType] == ["Import", "Export", "Adjustment"]


class TestCatalogueEntities:
    def test_product_validation(self):
        with pytest.raises(InvalidArgumentError):
            Product.create("  ", None, "pcs", 1.0, "Misc")
        with pytest.raises(InvalidArgumentError):
            Product.create("Box", None, "pcs", -1.0, "Misc")
        with pytest.raises(InvalidArgumentError) as exc_info:
            Product.create("Box", None, "pcs", 1.0, "Misc", min_quantity=10, max_quantity=5)
        assert exc_info.value.field == "min_quantity"

    def test_product_strips_text(self):
        product = Product.create("  Box ", None, " pcs ", 1.0, " Misc ")
        assert (product.name, product.unit, product.category) == ("Box", "pcs", "Misc")

    def test_warehouse_requires_name_and_address(self):
        with pytest.raises(InvalidArgumentError):
            Warehouse.create("", "Somewhere 1")
        with pytest.raises(InvalidArgumentError):
            Warehouse.create("Main", " ")

    def test_user_normalises_email_and_role(self):
        user = User.create(" jan ", " Jan@Warehouse.com ", "hash", "Manager")
        assert user.username == "jan"
        assert user.email == "jan@warehouse.com"
        assert user.role is Role.MANAGER

    def test_user_rejects_unknown_role(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            User.create("jan", "jan@warehouse.com", "hash", "Owner")
        assert exc_info.value.field == "role"
