import os
import shutil
import tempfile
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from itertools import count
from pathlib import Path

import pytest

_TEST_DIR = tempfile.mkdtemp(prefix="makhana-tests-")


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Point every domain at a throwaway SQLite file and initialize them once.
    """
    os.environ["ENVIRONMENT"] = "test"
    os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DIR) / 'makhana-test.db'}"
    os.environ["SEED_CATALOGUE"] = "false"
    os.environ["LOG_DIR"] = _TEST_DIR

    from shared.config import get_settings
    from shared.database import init_domains

    get_settings.cache_clear()
    init_domains()


def pytest_sessionfinish(session, exitstatus):
    shutil.rmtree(_TEST_DIR, ignore_errors=True)


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session", autouse=True)
def setup_db():
    from shared.database import all_domains, drop_db, setup_db

    for domain in all_domains():
        setup_db(domain)

    yield

    for domain in all_domains():
        drop_db(domain)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    from shared.database import all_domains, reset_data

    for domain in all_domains():
        reset_data(domain)
        with domain.domain_context():
            current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Customers
# ---------------------------------------------------------------------------
_emails = count(1)


@pytest.fixture
def make_customer():
    """Register a customer; returns the ``Registration`` (id and raw token)."""
    from identity.customer.customer import CustomerRole
    from identity.customer.registration import RegisterCustomer
    from identity.domain import identity

    def _make(name="Test Customer", role=CustomerRole.CUSTOMER):
        email = f"customer-{next(_emails)}@example.com"
        with identity.domain_context():
            return identity.process(RegisterCustomer(name=name, email=email, role=role.value), asynchronous=False)

    return _make


@pytest.fixture
def customer(make_customer):
    return make_customer(name="Asha Rao")


@pytest.fixture
def other_customer(make_customer):
    return make_customer(name="Vikram Iyer")


@pytest.fixture
def admin(make_customer):
    from identity.customer.customer import CustomerRole

    return make_customer(name="Store Admin", role=CustomerRole.ADMIN)


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
def _stock(**fields):
    from catalogue.domain import catalogue
    from catalogue.product.product import Product

    with catalogue.domain_context():
        product = Product.create(**fields)
        catalogue.repository_for(Product).add(product)
    return product


@pytest.fixture
def peri_peri():
    return _stock(name="Peri Peri Makhana", flavor="Peri Peri", price=Decimal("299.00"), sku="PM-PP-100")


@pytest.fixture
def cheese():
    return _stock(name="Cheese Makhana", flavor="Cheese", price=Decimal("279.00"), sku="PM-CH-100")


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
@pytest.fixture
def make_coupon():
    from ordering.coupon.coupon import DiscountType
    from ordering.coupon.management import CreateCoupon, get_coupon
    from ordering.domain import ordering

    def _make(code, discount_type=DiscountType.PERCENTAGE, discount_value="10", **overrides):
        now = datetime.now(UTC)
        terms = {
            "code": code,
            "discount_type": DiscountType(discount_type).value,
            "discount_value": float(discount_value),
            "start_date": now - timedelta(days=1),
            "end_date": now + timedelta(days=30),
        }
        terms.update(overrides)
        for name in ("minimum_order_amount", "maximum_discount_amount"):
            if terms.get(name) is not None:
                terms[name] = float(terms[name])
        with ordering.domain_context():
            coupon_id = ordering.process(CreateCoupon(**terms), asynchronous=False)
            return get_coupon(coupon_id)

    return _make
