import pytest
from sqlalchemy.exc import IntegrityError

from exceptions import ConflictError, NotFoundError
from models.warehouse import Warehouse
from services.base import unit_of_work


def integrity_error():
    return IntegrityError("INSERT INTO stock_items ...", {}, Exception("UNIQUE constraint failed"))


def test_commits_the_block(session):
    with unit_of_work(session):
        session.add(Warehouse.create("Cold Store", "ul. Mrozna 3"))
    session.expunge_all()
    assert session.query(Warehouse).count() == 1


def test_integrity_error_becomes_conflict_with_message(session):
    with pytest.raises(ConflictError) as exc_info:
        with unit_of_work(session, "stock_item", "1/2", conflict_message="Stock changed concurrently, please retry"):
            raise integrity_error()
    assert str(exc_info.value) == "Stock changed concurrently, please retry"
    assert exc_info.value.details["field"] == "stock_item"


def test_integrity_error_without_field_propagates(session):
    with pytest.raises(IntegrityError):
        with unit_of_work(session):
            raise integrity_error()


def test_domain_error_rolls_back(session):
    with pytest.raises(NotFoundError):
        with unit_of_work(session):
            session.add(Warehouse.create("Cold Store", "ul. Mrozna 3"))
            session.flush()
            raise NotFoundError("Product", 1)
    assert session.query(Warehouse).count() == 0
