"""BDD tests for redeeming coupons at checkout."""

from decimal import Decimal

from pytest_bdd import parsers, scenarios, then, when

from ordering.order.history import list_orders
from ordering.order.placement import OrderPlacement
from shared.errors import InvalidCoupon

scenarios("features/checkout_coupons.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the order is placed with coupon "{code}"'), target_fixture="order")
def place_order_with_coupon(shopper, code, error):
    try:
        return OrderPlacement().place(shopper.customer_id, coupon_code=code)
    except InvalidCoupon as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order subtotal is {amount}"))
def order_subtotal(order, amount):
    assert order.subtotal_amount == Decimal(amount)


@then(parsers.cfparse("the order discount is {amount}"))
def order_discount(order, amount):
    assert order.discount == Decimal(amount)


@then(parsers.cfparse("the order total is {amount}"))
def order_total(order, amount):
    assert order.total == Decimal(amount)


@then("the order is refused because the coupon has expired")
def refused_as_expired(order, error):
    assert order is None
    assert isinstance(error["exc"], InvalidCoupon)
    assert "has expired" in error["exc"].messages["coupon_code"][0]


@then("no order has been placed")
def no_order(shopper):
    assert list_orders(shopper.customer_id) == []
