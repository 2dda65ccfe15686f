import os
from decimal import Decimal
from pathlib import Path

import pytest
from app import create_app
from catalogue.product.product import Product
from catalogue.product.stock import current_stock
from fastapi.testclient import TestClient
from identity.auth import issue_token
from identity.customer.customer import Customer, CustomerRole
from notifications.channel.fake_email import FakeEmailAdapter
from notifications.notification.order_notifier import OrderNotifier
from shared.config import Settings
from shared.database import drop_db, make_engine, make_session_factory, setup_db


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        # Get the test file path relative to the tests directory
        test_path = Path(item.fspath)

        # Mark tests based on their directory
        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def settings(tmp_path):
    """Settings for a throwaway database.

    A SQLite file (not ``:memory:``) so that worker threads in the
    concurrency tests each get their own connection to the same data.
    ``STOREFRONT_TEST_DATABASE_URL`` points the suite at another server.
    """
    database_url = os.environ.get("STOREFRONT_TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'storefront.db'}"
    return Settings(
        env="test",
        database_url=database_url,
        sqlite_busy_timeout=15.0,
        jwt_secret="test-secret",
        email_adapter="fake",
        checkout_max_attempts=3,
        notification_workers=0,
    )


@pytest.fixture()
def engine(settings):
    engine = make_engine(settings)
    setup_db(engine)
    yield engine
    drop_db(engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture()
def fake_email():
    return FakeEmailAdapter()


@pytest.fixture()
def notifier(session_factory, fake_email):
    return OrderNotifier(session_factory, fake_email)


@pytest.fixture()
def make_product(session_factory):
    """Persist a product and return its id."""

    def _make(name="Widget", price="10.00", stock=10, product_id=None):
        with session_factory.begin() as session:
            product = Product.create(name=name, price=Decimal(price), stock=stock, product_id=product_id)
            session.add(product)
        return product.id

    return _make


@pytest.fixture()
def make_customer(session_factory):
    """Register a customer and return its id."""

    def _make(email="shopper@example.com", role=CustomerRole.CUSTOMER, name=None):
        with session_factory.begin() as session:
            customer = Customer.register(email=email, name=name, role=role)
            session.add(customer)
        return customer.id

    return _make


@pytest.fixture()
def stock_of(session_factory):
    def _stock(product_id):
        with session_factory() as session:
            return current_stock(session, product_id)

    return _stock


@pytest.fixture()
def token_for(settings):
    def _token(user_id, role=CustomerRole.CUSTOMER.value):
        return {"Authorization": f"Bearer {issue_token(settings, user_id, role=role)}"}

    return _token


@pytest.fixture()
def app(settings, engine, fake_email):
    return create_app(settings, email=fake_email)


@pytest.fixture()
def client(app):
    with TestClient(app) as client:
        yield client
