"""Storefront management CLI.

Creates and drops the database schema, seeds customers and products, and
issues bearer tokens for local testing.

Usage:
    python src/manage.py setup-db                         # Create all tables
    python src/manage.py drop-db                          # Drop all tables
    python src/manage.py create-customer a@b.com --admin  # Register a customer
    python src/manage.py add-product "T-Shirt" 19.99 --stock 10
    python src/manage.py issue-token <customer-id>        # Print a bearer token
"""

import argparse
import sys
from contextlib import contextmanager
from decimal import Decimal

from catalogue.product.product import Product
from identity.auth import issue_token
from identity.customer.customer import Customer, CustomerRole
from shared.config import get_settings
from shared.database import drop_db, make_engine, make_session_factory, setup_db


@contextmanager
def _engine(settings):
    engine = make_engine(settings)
    try:
        yield engine
    finally:
        engine.dispose()


def setup_database(settings):
    print(f"Creating schema on {settings.database_url}...")
    with _engine(settings) as engine:
        setup_db(engine)
    print("Done.")


def drop_database(settings):
    print(f"Dropping schema on {settings.database_url}...")
    with _engine(settings) as engine:
        drop_db(engine)
    print("Done.")


def create_customer(settings, email, name=None, admin=False):
    role = CustomerRole.ADMIN if admin else CustomerRole.CUSTOMER
    with _engine(settings) as engine, make_session_factory(engine).begin() as session:
        customer = Customer.register(email=email, name=name, role=role)
        session.add(customer)
    print(f"Customer {customer.email} ({customer.role}): {customer.id}")
    return customer


def add_product(settings, name, price, stock=0):
    with _engine(settings) as engine, make_session_factory(engine).begin() as session:
        product = Product.create(name=name, price=Decimal(price), stock=stock)
        session.add(product)
    print(f"Product {product.name} @ {product.price} (stock {product.stock}): {product.id}")
    return product


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    customer_parser = subparsers.add_parser("create-customer", help="Register a customer")
    customer_parser.add_argument("email")
    customer_parser.add_argument("--name", default=None)
    customer_parser.add_argument("--admin", action="store_true", help="Grant the admin role")

    product_parser = subparsers.add_parser("add-product", help="Add a product to the catalogue")
    product_parser.add_argument("name")
    product_parser.add_argument("price")
    product_parser.add_argument("--stock", type=int, default=0)

    token_parser = subparsers.add_parser("issue-token", help="Print a bearer token for a user")
    token_parser.add_argument("user_id")
    token_parser.add_argument(
        "--role",
        choices=[role.value for role in CustomerRole],
        default=CustomerRole.CUSTOMER.value,
    )

    args = parser.parse_args()
    settings = get_settings()

    if args.command == "setup-db":
        setup_database(settings)
    elif args.command == "drop-db":
        drop_database(settings)
    elif args.command == "create-customer":
        create_customer(settings, args.email, name=args.name, admin=args.admin)
    elif args.command == "add-product":
        add_product(settings, args.name, args.price, stock=args.stock)
    elif args.command == "issue-token":
        print(issue_token(settings, args.user_id, role=args.role))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
