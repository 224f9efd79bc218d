"""Makhana Store management CLI.

Provides commands to create and drop the database schema of every domain,
seed the default catalogue and register customers (including administrators).

Usage:
    python src/manage.py setup-db                  # Create all tables
    python src/manage.py drop-db                   # Drop all tables
    python src/manage.py seed                      # Insert the default products
    python src/manage.py create-customer --name "Asha" --email asha@example.com [--admin]
"""

import argparse
import sys

from shared.config import get_settings
from shared.logging import configure_logging

DOMAIN_NAMES = ["identity", "catalogue", "ordering"]


def _domains(names=None):
    from shared.database import init_domains

    domains = {domain.name: domain for domain in init_domains()}
    return {name: domains[name] for name in (names or DOMAIN_NAMES)}


def setup_databases(domains=None, seed=False):
    """Create database schemas for the specified (or all) domains."""
    from shared.database import setup_db

    for name, domain in _domains(domains).items():
        print(f"Creating {name} database schema...")
        setup_db(domain)
        print(f"  {name} schema ready.")

    if seed:
        seed_catalogue()

    print("Done.")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    from shared.database import drop_db

    for name, domain in _domains(domains).items():
        print(f"Dropping {name} database schema...")
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def seed_catalogue():
    from catalogue.product.seed import seed_products

    _domains(["catalogue"])
    created = seed_products()
    print(f"Seeded {created} product(s).")
    return created


def create_customer(name, email, admin=False):
    """Register a customer and print the access token they authenticate with."""
    from identity.customer.customer import CustomerRole
    from identity.customer.registration import RegisterCustomer

    identity = _domains(["identity"])["identity"]
    role = CustomerRole.ADMIN if admin else CustomerRole.CUSTOMER
    with identity.domain_context():
        registration = identity.process(
            RegisterCustomer(name=name, email=email, role=role.value), asynchronous=False
        )
    print(f"Created {role.value} {email.strip().lower()} ({registration.customer_id})")
    print(f"Access token: {registration.access_token}")
    return registration


def main(argv=None):
    parser = argparse.ArgumentParser(description="Makhana Store management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )
    setup_parser.add_argument("--seed", action="store_true", help="Also seed the default catalogue")

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    subparsers.add_parser("seed", help="Insert the default products into an empty catalogue")

    customer_parser = subparsers.add_parser("create-customer", help="Register a customer and print its token")
    customer_parser.add_argument("--name", required=True)
    customer_parser.add_argument("--email", required=True)
    customer_parser.add_argument("--admin", action="store_true", help="Grant the administrator role")

    args = parser.parse_args(argv)

    configure_logging(get_settings())

    if args.command == "setup-db":
        setup_databases(domains=args.domain, seed=args.seed)
    elif args.command == "drop-db":
        drop_databases(domains=args.domain)
    elif args.command == "seed":
        seed_catalogue()
    elif args.command == "create-customer":
        create_customer(args.name, args.email, admin=args.admin)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
