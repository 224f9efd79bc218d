"""Product aggregate: the catalogue record carts and orders read prices from.

Only price and availability matter to checkout. A price change affects cart
lines priced afterwards; order lines keep the price captured at placement.
"""

from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from catalogue.domain import catalogue
from shared.money import round2


@catalogue.aggregate
class Product:
    sku: String(max_length=50, unique=True)
    name: String(required=True, max_length=255)
    flavor: String(max_length=100)
    description: Text()
    price: Float(required=True)
    available: Boolean(default=True)
    stock_quantity: Integer()  # None means unlimited
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def price_must_be_positive(self):
        if self.price is None or self.price <= 0:
            raise ValidationError({"price": ["Price must be greater than zero"]})

    @invariant.post
    def stock_cannot_be_negative(self):
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock quantity cannot be negative"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, name, price, sku=None, flavor=None, description=None, available=True, stock_quantity=None):
        now = datetime.now(UTC)
        return cls(
            sku=sku,
            name=name,
            flavor=flavor,
            description=description,
            price=float(_validated_price(price)),
            available=available,
            stock_quantity=stock_quantity,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Price & availability
    # -------------------------------------------------------------------
    def change_price(self, new_price):
        self.price = float(_validated_price(new_price))
        self.updated_at = datetime.now(UTC)

    def set_availability(self, available: bool):
        self.available = available
        self.updated_at = datetime.now(UTC)

    @property
    def unit_price(self) -> Decimal:
        return round2(self.price)

    @property
    def in_stock(self) -> bool:
        return self.stock_quantity is None or self.stock_quantity > 0


def _validated_price(price) -> Decimal:
    price = round2(price)
    if price <= 0:
        raise ValidationError({"price": ["Price must be greater than zero"]})
    return price
