"""Order ledger: the append-only repository of placed orders."""

from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.order.order import Order
from shared.errors import not_found
from shared.timestamps import as_utc


@dataclass(frozen=True)
class OrderLineSnapshot:
    """A cart line frozen at placement time."""

    cart_item_id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@ordering.repository(part_of=Order)
class OrderRepository:
    def for_customer(self, customer_id) -> list[Order]:
        """The customer's orders, newest first."""
        orders = self._dao.query.filter(customer_id=str(customer_id)).limit(None).all().items
        return sorted(orders, key=lambda order: as_utc(order.order_date), reverse=True)

    def owned_by(self, order_id, customer_id) -> Order:
        # Another customer's order is reported as missing, not as forbidden
        try:
            order = self.get(str(order_id))
        except ObjectNotFoundError as exc:
            raise not_found("order_id", f"Order {order_id} does not exist") from exc
        if str(order.customer_id) != str(customer_id):
            raise not_found("order_id", f"Order {order_id} does not exist")
        return order

    def count_for_customer(self, customer_id) -> int:
        return self._dao.query.filter(customer_id=str(customer_id)).all().total

    def is_first_time_customer(self, customer_id) -> bool:
        return self.count_for_customer(customer_id) == 0

    def redemptions(self, customer_id, coupon_code: str) -> int:
        """How many of the customer's orders carry this coupon."""
        return self._dao.query.filter(customer_id=str(customer_id), coupon_code=coupon_code).all().total

    def is_recorded(self, order_id) -> bool:
        return bool(self._dao.query.filter(id=str(order_id)).all().total)
