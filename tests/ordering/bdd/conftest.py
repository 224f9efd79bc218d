"""Shared BDD fixtures and step definitions for the Ordering domain."""

from datetime import UTC, datetime, timedelta

import pytest
from pytest_bdd import given, parsers, then

from ordering.cart.items import AddToCart, list_cart, submit
from ordering.coupon.coupon import DiscountType
from ordering.coupon.management import get_coupon_by_code


@pytest.fixture()
def error():
    """Container for the error a When step raised, if any."""
    return {"exc": None}


@pytest.fixture()
def products(peri_peri, cheese):
    return {product.name: product for product in (peri_peri, cheese)}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer with an empty cart", target_fixture="shopper")
def _(customer):
    return customer


@given(
    parsers.cfparse('a customer with {first:d} "{first_name}" and {second:d} "{second_name}" in the cart'),
    target_fixture="shopper",
)
def _(customer, products, first, first_name, second, second_name):
    for quantity, name in ((first, first_name), (second, second_name)):
        submit(AddToCart(customer_id=customer.customer_id, product_id=products[name].id, quantity=quantity))
    return customer


@given(parsers.cfparse('a {percent:d} percent coupon "{code}"'))
def _(make_coupon, percent, code):
    make_coupon(code, DiscountType.PERCENTAGE, str(percent))


@given(parsers.cfparse('a fixed coupon "{code}" worth {amount:d}'))
def _(make_coupon, code, amount):
    make_coupon(code, DiscountType.FIXED_AMOUNT, str(amount))


@given(parsers.cfparse('an expired {percent:d} percent coupon "{code}"'))
def _(make_coupon, percent, code):
    now = datetime.now(UTC)
    make_coupon(
        code,
        DiscountType.PERCENTAGE,
        str(percent),
        start_date=now - timedelta(days=30),
        end_date=now - timedelta(days=1),
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
@then(parsers.cfparse("the cart has {count:d} lines"))
def _(shopper, count):
    assert len(list_cart(shopper.customer_id)) == count


@then("the cart is empty")
def _(shopper):
    assert list_cart(shopper.customer_id) == []


@then(parsers.cfparse('the coupon "{code}" has been used {count:d} time'))
@then(parsers.cfparse('the coupon "{code}" has been used {count:d} times'))
def _(code, count):
    assert get_coupon_by_code(code).usage_count == count