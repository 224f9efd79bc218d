"""Order aggregate: the immutable record of a placed cart.

Lines are snapshots: the unit price is the product's price at placement and
is never re-read from the catalogue. An order owns its lines.
"""

from decimal import Decimal
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from ordering.domain import ordering
from shared.money import round2


class OrderStatus(Enum):
    PLACED = "PLACED"


@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True)
    position = Integer(default=0)

    @property
    def price(self) -> Decimal:
        return round2(self.unit_price)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@ordering.aggregate
class Order:
    customer_id = Identifier(required=True)
    status = String(max_length=20, choices=OrderStatus, default=OrderStatus.PLACED.value)
    order_date = DateTime(required=True)
    subtotal = Float(required=True)
    discount_amount = Float(default=0.0)
    total_amount = Float(required=True)
    coupon_code = String(max_length=50)
    free_shipping = Boolean(default=False)
    currency = String(max_length=3, default="INR")
    items = HasMany(OrderItem)

    @invariant.post
    def total_is_never_negative(self):
        if self.total_amount is not None and self.total_amount < 0:
            raise ValidationError({"total_amount": ["Order total cannot be negative"]})

    @classmethod
    def place(cls, customer_id, lines, subtotal, discount, total, placed_at, coupon_code=None,
              free_shipping=False, currency="INR", id=None):
        """Build an order from snapshotted lines. Amounts are already rounded Decimals."""
        values = {"id": str(id)} if id is not None else {}
        return cls(
            customer_id=str(customer_id),
            status=OrderStatus.PLACED.value,
            order_date=placed_at,
            subtotal=float(subtotal),
            discount_amount=float(discount),
            total_amount=float(total),
            coupon_code=coupon_code,
            free_shipping=free_shipping,
            currency=currency,
            items=[
                OrderItem(
                    position=position,
                    product_id=str(line.product_id),
                    product_name=line.product_name,
                    quantity=line.quantity,
                    unit_price=float(line.unit_price),
                )
                for position, line in enumerate(lines)
            ],
            **values,
        )

    @property
    def lines(self) -> list[OrderItem]:
        return sorted(self.items or [], key=lambda item: item.position)

    @property
    def line_count(self) -> int:
        return len(self.items or [])

    @property
    def subtotal_amount(self) -> Decimal:
        return round2(self.subtotal)

    @property
    def discount(self) -> Decimal:
        return round2(self.discount_amount or 0)

    @property
    def total(self) -> Decimal:
        return round2(self.total_amount)

    def __repr__(self):
        return f"<Order {self.id} {self.status} total={self.total_amount}>"
