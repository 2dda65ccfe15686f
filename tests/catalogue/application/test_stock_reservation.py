"""Tests for the conditional stock decrement and multi-line reservation."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from catalogue.product import stock
from catalogue.product.product import Product
from shared.exceptions import InsufficientStockError, ObjectNotFoundError
from sqlalchemy.orm.exc import StaleDataError


class TestFindProduct:
    def test_find_existing_product(self, session_factory, make_product):
        product_id = make_product(name="Lamp", stock=4)
        with session_factory() as session:
            product = stock.find_product(session, product_id)
            assert product.name == "Lamp"
            assert stock.current_stock(session, product_id) == 4

    def test_missing_product_raises_not_found(self, session_factory):
        with session_factory() as session:
            with pytest.raises(ObjectNotFoundError):
                stock.find_product(session, "no-such-product")
            assert stock.current_stock(session, "no-such-product") is None


class TestConditionalDecrement:
    def test_decrements_when_enough_stock(self, session_factory, make_product, stock_of):
        product_id = make_product(stock=5)
        with session_factory.begin() as session:
            assert stock.conditional_decrement(session, product_id, 3) is True
        assert stock_of(product_id) == 2

    def test_decrement_to_exactly_zero(self, session_factory, make_product, stock_of):
        product_id = make_product(stock=2)
        with session_factory.begin() as session:
            assert stock.conditional_decrement(session, product_id, 2) is True
        assert stock_of(product_id) == 0

    def test_refuses_when_short(self, session_factory, make_product, stock_of):
        product_id = make_product(stock=1)
        with session_factory.begin() as session:
            assert stock.conditional_decrement(session, product_id, 2) is False
        assert stock_of(product_id) == 1

    def test_refuses_unknown_product(self, session_factory):
        with session_factory.begin() as session:
            assert stock.conditional_decrement(session, "ghost", 1) is False

    def test_bumps_version(self, session_factory, make_product):
        product_id = make_product(stock=5)
        with session_factory() as session:
            before = session.get(Product, product_id).version

        with session_factory.begin() as session:
            stock.conditional_decrement(session, product_id, 1)

        with session_factory() as session:
            assert session.get(Product, product_id).version == before + 1

    def test_rolled_back_with_transaction(self, session_factory, make_product, stock_of):
        product_id = make_product(stock=5)
        session = session_factory()
        try:
            session.begin()
            assert stock.conditional_decrement(session, product_id, 4) is True
            session.rollback()
        finally:
            session.close()
        assert stock_of(product_id) == 5

    def test_concurrent_decrements_never_oversell(self, session_factory, make_product, stock_of):
        product_id = make_product(stock=5)

        def attempt(_):
            with session_factory.begin() as session:
                return stock.conditional_decrement(session, product_id, 1)

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(20)))

        assert results.count(True) == 5
        assert stock_of(product_id) == 0


class TestReserve:
    def test_reserves_every_line(self, session_factory, make_product, stock_of):
        first = make_product(stock=3)
        second = make_product(stock=4)
        with session_factory.begin() as session:
            stock.reserve(session, [(first, 1), (second, 4)])
        assert stock_of(first) == 2
        assert stock_of(second) == 0

    def test_shortfall_names_the_product(self, session_factory, make_product):
        plenty = make_product(stock=10)
        scarce = make_product(stock=1)
        with pytest.raises(InsufficientStockError) as exc:
            with session_factory.begin() as session:
                stock.reserve(session, [(plenty, 1), (scarce, 2)])
        assert exc.value.product_id == scarce
        assert "stock" in exc.value.messages

    def test_shortfall_rolls_back_earlier_lines(self, session_factory, make_product, stock_of):
        plenty = make_product(stock=10, product_id="a-product")
        scarce = make_product(stock=1, product_id="b-product")
        with pytest.raises(InsufficientStockError):
            with session_factory.begin() as session:
                stock.reserve(session, [(scarce, 5), (plenty, 2)])
        assert stock_of(plenty) == 10
        assert stock_of(scarce) == 1

    def test_lines_reserved_in_product_id_order(self, session_factory, make_product, monkeypatch):
        make_product(product_id="p-c", stock=5)
        make_product(product_id="p-a", stock=5)
        make_product(product_id="p-b", stock=5)

        seen = []
        original = stock.conditional_decrement

        def recording(session, product_id, quantity):
            seen.append(product_id)
            return original(session, product_id, quantity)

        monkeypatch.setattr(stock, "conditional_decrement", recording)
        with session_factory.begin() as session:
            stock.reserve(session, [("p-c", 1), ("p-a", 1), ("p-b", 1)])

        assert seen == ["p-a", "p-b", "p-c"]


class TestOptimisticVersioning:
    def test_stale_restock_is_rejected(self, session_factory, make_product):
        product_id = make_product(stock=5)

        stale_session = session_factory()
        try:
            stale = stale_session.get(Product, product_id)
            stale_session.commit()

            # Another writer reserves stock, bumping the version
            with session_factory.begin() as session:
                stock.conditional_decrement(session, product_id, 1)

            stale.restock(10)
            with pytest.raises(StaleDataError):
                stale_session.commit()
        finally:
            stale_session.rollback()
            stale_session.close()
